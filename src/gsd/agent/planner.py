"""
Planner - decompose, dispatch, summarize, and decide whether to continue.

Each outer iteration makes one backend call to turn the current goal into a
task list, runs every task through the dispatcher in order, then makes one
more backend call to summarize the outputs against the original goal.
Neither planning call has a correction loop: a reply that does not parse is
fatal for the run.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from ..errors import MalformedResponse, PlanningError
from ..llm import Message
from ..prompts import build_planner_prompt, build_summary_prompt
from ..utils.retry import RetryPolicy
from .dispatcher import AgentDispatcher
from .models import IterationRecord, IterationState, IterationSummary, PlanResult, PlanStep, Task
from .replies import parse_iteration_summary, parse_task_list

logger = logging.getLogger(__name__)


def format_step_outputs(steps: List[PlanStep]) -> str:
    """Concatenate step outcomes the way the summary prompt expects them"""
    return "".join(
        f"\n\n--- Output from {step.task.role} ---\n{step.outcome.text}"
        for step in steps
    )


class Planner:
    """
    Top-level orchestrator over an AgentDispatcher.

    The outer loop is bounded by config.max_outer_iterations even in auto mode.
    """

    def __init__(
        self,
        dispatcher: AgentDispatcher,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None
    ):
        self.dispatcher = dispatcher
        self.config = dispatcher.config
        self._sleep = sleep or asyncio.sleep
        self.retry_policy = retry_policy or RetryPolicy(self.config.retry, sleep=self._sleep)

    async def run(self, goal: str, auto_mode: Optional[bool] = None) -> PlanResult:
        """
        Run outer iterations until the goal is reported complete or the loop stops.

        Args:
            goal: High-level goal
            auto_mode: Continue with next_prompt after an incomplete iteration
                (defaults to config.auto_mode)

        Raises:
            PlanningError: decomposition or summary reply was unusable
            UnknownRole: a planned task names an unregistered role
            BackendError: fatal backend failure
        """
        state = IterationState(
            current_goal=goal,
            auto_mode=self.config.auto_mode if auto_mode is None else auto_mode
        )
        result = PlanResult(goal=goal)

        while True:
            logger.info(f"=== Planner iteration {state.iteration_number} ===")
            logger.info(f"Goal: {state.current_goal[:200]}")

            tasks = await self.decompose(state.current_goal)
            steps = await self.execute_tasks(tasks)
            summary = await self.summarize(goal, state.current_goal, steps)

            result.iterations.append(IterationRecord(
                number=state.iteration_number,
                goal=state.current_goal,
                steps=steps,
                summary=summary
            ))

            if summary.complete:
                logger.info("Goal reported complete")
                result.stopped_reason = "complete"
                return result

            if not state.auto_mode:
                logger.info("Iteration incomplete; auto mode is off, stopping")
                result.stopped_reason = "manual"
                return result

            if state.iteration_number >= self.config.max_outer_iterations:
                logger.warning(
                    f"Stopping after {self.config.max_outer_iterations} outer iterations "
                    f"without a complete status"
                )
                result.stopped_reason = "max_iterations"
                return result

            state.current_goal = summary.next_prompt or state.current_goal
            state.iteration_number += 1

            if self.config.planner_cooldown > 0:
                logger.info(f"Cooling down for {self.config.planner_cooldown}s")
                await self._sleep(self.config.planner_cooldown)

    async def decompose(self, goal: str) -> List[Task]:
        """Ask the backend for a task list for ``goal``"""
        content = await self._ask(build_planner_prompt(goal, self.dispatcher.roles))
        try:
            tasks = parse_task_list(content)
        except MalformedResponse as e:
            raise PlanningError(f"Could not decompose goal: {e}") from e

        logger.info(f"Planned {len(tasks)} tasks: {', '.join(task.role for task in tasks)}")
        return tasks

    async def execute_tasks(self, tasks: List[Task]) -> List[PlanStep]:
        """Dispatch each task in order; an unknown role aborts the iteration"""
        steps = []
        for index, task in enumerate(tasks):
            logger.info(f"Task {index + 1}/{len(tasks)} -> {task.role}")
            outcome = await self.dispatcher.dispatch(task.role, task.description)
            steps.append(PlanStep(task=task, outcome=outcome))
        return steps

    async def summarize(self, original_goal: str, current_goal: str,
                        steps: List[PlanStep]) -> IterationSummary:
        content = await self._ask(
            build_summary_prompt(original_goal, current_goal, format_step_outputs(steps))
        )
        try:
            return parse_iteration_summary(content)
        except MalformedResponse as e:
            raise PlanningError(f"Could not summarize iteration: {e}") from e

    async def _ask(self, prompt: str) -> str:
        messages = [Message(role="user", content=prompt)]
        return await self.retry_policy.call(self.dispatcher.backend.send, messages)
