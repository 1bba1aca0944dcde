"""
AgentDispatcher - routes a (role, task) pair to an agent loop on the configured backend.

Backend selection is static: it is read once from the EngineConfig when the
dispatcher is built. The dispatcher is re-entrant so that agents can delegate
sub-tasks through the delegate_task action, bounded by max_delegation_depth.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional

from ..config import EngineConfig
from ..errors import DelegationDepthExceeded, UnknownBackend, UnknownRole
from ..logging_config import agent_log_context
from ..llm import BACKEND_REGISTRY, IBackendAdapter, create_backend
from ..prompts import ROLE_PERSONAS
from ..tools import ExecutionContext, create_default_action_executor
from ..utils.retry import RetryPolicy
from .models import AgentOutcome, Task
from .task import AgentTask, TaskConfig

logger = logging.getLogger(__name__)


class AgentDispatcher:
    """
    Maps roles to agent loops running on one backend adapter.

    Args:
        config: Engine configuration (backend, roles, limits)
        backend: Adapter to use; built from config when omitted
        personas: Role -> persona text prepended to each task prompt
        working_dir: Directory actions run in (process cwd when omitted)
        sleep: Awaitable sleep used for backoff and pacing
    """

    def __init__(
        self,
        config: EngineConfig,
        backend: Optional[IBackendAdapter] = None,
        personas: Optional[Dict[str, str]] = None,
        working_dir: Optional[str] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None
    ):
        if config.backend.lower() not in BACKEND_REGISTRY:
            raise UnknownBackend(config.backend, sorted(BACKEND_REGISTRY))

        self.config = config
        self.backend = backend or create_backend(config)
        self.personas = ROLE_PERSONAS if personas is None else personas
        self.working_dir = working_dir
        self._sleep = sleep or asyncio.sleep

        logger.info(f"Dispatcher using backend '{config.backend}' "
                    f"(model={self.backend.model_info.id}) for roles: {', '.join(config.roles)}")

    @property
    def roles(self) -> List[str]:
        return list(self.config.roles)

    def has_role(self, role: str) -> bool:
        return role in self.config.roles

    async def dispatch(self, role: str, task: str, depth: int = 0) -> AgentOutcome:
        """
        Run ``task`` as ``role`` in a fresh agent loop.

        Args:
            role: Agent role; must be one of config.roles
            task: Task description
            depth: Delegation depth (0 for planner-issued tasks)

        Raises:
            UnknownRole: role is not registered
            DelegationDepthExceeded: depth is above max_delegation_depth
            BackendError: fatal backend failure inside the loop
        """
        if not self.has_role(role):
            raise UnknownRole(role, self.roles)
        if depth > self.config.max_delegation_depth:
            raise DelegationDepthExceeded(depth, self.config.max_delegation_depth)

        logger.info(f"Dispatching to '{role}' (depth {depth}): {task[:120]}")

        executor = create_default_action_executor(
            max_result_chars=self.config.max_result_chars,
            command_timeout=self.config.command_timeout,
            allow_delegation=depth < self.config.max_delegation_depth
        )
        context = ExecutionContext(
            role=role,
            depth=depth,
            working_dir=self.working_dir,
            delegate=self.dispatch
        )
        agent = AgentTask(
            task=Task(role=role, description=task),
            backend=self.backend,
            executor=executor,
            config=TaskConfig(
                max_iterations=self.config.max_iterations,
                between_iterations_delay=self.config.between_iterations_delay,
                between_actions_delay=self.config.between_actions_delay
            ),
            retry_policy=RetryPolicy(self.config.retry, sleep=self._sleep),
            context=context,
            persona=self.personas.get(role),
            sleep=self._sleep
        )
        with agent_log_context(role, depth):
            return await agent.run()

    async def close(self) -> None:
        await self.backend.close()
