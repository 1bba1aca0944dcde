"""
AgentTask - the conversation-driven action loop.

This module implements the loop that:
1. Sends the whole conversation to the backend (through the retry policy)
2. Parses the reply into an action batch, a completion, or neither
3. Executes requested actions in order and feeds results back
4. Repeats until completion or the iteration budget runs out

Malformed replies are not fatal: they get a corrective user message and count
against the same budget as normal progress.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from ..llm import IBackendAdapter, Message
from ..prompts import CORRECTIVE_MESSAGE, build_feedback_message, build_task_prompt
from ..tools import ActionExecutor, ExecutionContext
from ..utils.retry import RetryPolicy
from .models import AgentOutcome, Task
from .replies import ActionBatch, Completion, Unrecognized, parse_reply

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """Agent loop states"""
    REQUESTING = "requesting"
    PARSING = "parsing"
    EXECUTING = "executing"
    AWAITING_CLARIFICATION = "awaiting_clarification"
    DONE = "done"
    EXHAUSTED = "exhausted"


@dataclass
class TaskConfig:
    """Configuration for one agent loop run"""
    max_iterations: int = 15
    between_iterations_delay: float = 0.0
    between_actions_delay: float = 0.0


class AgentTask:
    """
    One agent loop run for one task.

    The conversation is owned by this instance and only ever appended to.
    """

    def __init__(
        self,
        task: Task,
        backend: IBackendAdapter,
        executor: ActionExecutor,
        config: Optional[TaskConfig] = None,
        retry_policy: Optional[RetryPolicy] = None,
        context: Optional[ExecutionContext] = None,
        persona: Optional[str] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None
    ):
        self.task = task
        self.backend = backend
        self.executor = executor
        self.config = config or TaskConfig()
        if self.config.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.retry_policy = retry_policy or RetryPolicy()
        self.context = context or ExecutionContext(role=task.role)
        self.persona = persona
        self._sleep = sleep or asyncio.sleep

        self.state = LoopState.REQUESTING
        self.conversation: List[Message] = []
        self.iteration_count = 0
        self.request_count = 0

    async def run(self) -> AgentOutcome:
        """
        Drive the loop to a terminal state.

        Returns:
            AgentOutcome.done(summary) or AgentOutcome.exhausted(last assistant text)

        Raises:
            BackendError: transport/auth errors, or provider errors after retries
        """
        logger.info(f"Starting agent '{self.task.role}' (depth {self.context.depth}): "
                    f"{self.task.description[:200]}")

        self.conversation.append(Message(
            role="user",
            content=build_task_prompt(
                self.task.description,
                self.executor.get_action_definitions(),
                persona=self.persona
            )
        ))
        last_content = ""

        while True:
            self.state = LoopState.REQUESTING
            logger.info(f"=== Iteration {self.iteration_count + 1}/{self.config.max_iterations} ===")
            last_content = await self._request()

            self.state = LoopState.PARSING
            reply = parse_reply(last_content)

            if isinstance(reply, Completion):
                self.state = LoopState.DONE
                logger.info(f"Agent '{self.task.role}' done after {self.request_count} requests")
                return AgentOutcome.done(reply.summary, iterations=self.request_count)

            if isinstance(reply, ActionBatch):
                self.state = LoopState.EXECUTING
                await self._execute_actions(reply)
            elif isinstance(reply, Unrecognized):
                self.state = LoopState.AWAITING_CLARIFICATION
                logger.warning(f"Unusable reply ({reply.reason}); asking for valid JSON")
                self.conversation.append(Message(role="user", content=CORRECTIVE_MESSAGE))

            self.iteration_count += 1
            if self.iteration_count >= self.config.max_iterations:
                self.state = LoopState.EXHAUSTED
                logger.warning(
                    f"Agent '{self.task.role}' exhausted {self.config.max_iterations} iterations"
                )
                return AgentOutcome.exhausted(last_content, iterations=self.request_count)

            if self.config.between_iterations_delay > 0:
                await self._sleep(self.config.between_iterations_delay)

    async def _request(self) -> str:
        """Send a snapshot of the conversation and append the assistant reply"""
        snapshot = list(self.conversation)
        self.request_count += 1
        content = await self.retry_policy.call(self.backend.send, snapshot)
        logger.debug(f"Assistant reply ({len(content)} chars): {content[:200]}")
        self.conversation.append(Message(role="assistant", content=content))
        return content

    async def _execute_actions(self, batch: ActionBatch) -> None:
        """Run the batch sequentially, in order, and append one feedback message"""
        if batch.reasoning:
            logger.info(f"Reasoning: {batch.reasoning[:200]}")

        lines = []
        for index, action in enumerate(batch.actions):
            logger.info(f"Action {index + 1}/{len(batch.actions)}: {action.type}")
            result = await self.executor.execute(action.type, action.params, self.context)
            lines.append(f"{action.type}: {result.content}")

            if self.config.between_actions_delay > 0:
                await self._sleep(self.config.between_actions_delay)

        self.conversation.append(Message(role="user", content=build_feedback_message(lines)))
