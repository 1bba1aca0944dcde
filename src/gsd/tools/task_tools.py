"""
Delegation action handler.

Lets an agent hand a sub-task to another role. The sub-task runs in its own
agent loop through the dispatcher, one level deeper than the requester.
"""

import logging
from typing import Any, Mapping

from .base import ActionCategory, ActionDefinition, ActionResult, BaseActionHandler, ExecutionContext
from ..errors import DelegationDepthExceeded, UnknownRole

logger = logging.getLogger(__name__)


class DelegateTaskHandler(BaseActionHandler):
    """Spawns a sub-agent task and returns its outcome as text"""

    aliases = ("delegate", "delegate-task", "spawn_agent")
    required_params = ("role", "task")

    @property
    def name(self) -> str:
        return "delegate_task"

    @property
    def category(self) -> ActionCategory:
        return ActionCategory.DELEGATION

    def get_definition(self) -> ActionDefinition:
        return ActionDefinition(
            name=self.name,
            description="hand a sub-task to another agent role and get its summary back",
            params={"role": "agent role", "task": "task description"},
            category=self.category
        )

    async def execute(self, params: Mapping[str, Any], context: ExecutionContext) -> ActionResult:
        role = params["role"]
        task = params["task"]

        if context.delegate is None:
            return ActionResult(content="Delegation is not available for this agent", success=False)

        logger.info(f"[Delegating to {role} at depth {context.depth + 1}: {task[:80]}]")

        try:
            outcome = await context.delegate(role, task, context.depth + 1)
        except (UnknownRole, DelegationDepthExceeded) as e:
            return self._error_response(e)

        return ActionResult(
            content=f"Sub-agent '{role}' {outcome.status.value}: {outcome.text}",
            success=outcome.is_done,
            metadata={"role": role, "status": outcome.status.value}
        )
