"""
Agent module - agent loop, role dispatcher and planner.
"""

from .models import (
    AgentOutcome,
    AgentStatus,
    IterationRecord,
    IterationState,
    IterationSummary,
    PlanResult,
    PlanStep,
    Task,
)
from .replies import (
    ActionBatch,
    ActionRequest,
    AssistantReply,
    Completion,
    Unrecognized,
    parse_iteration_summary,
    parse_reply,
    parse_task_list,
)
from .task import AgentTask, LoopState, TaskConfig
from .dispatcher import AgentDispatcher
from .planner import Planner, format_step_outputs


__all__ = [
    "AgentOutcome",
    "AgentStatus",
    "IterationRecord",
    "IterationState",
    "IterationSummary",
    "PlanResult",
    "PlanStep",
    "Task",
    "ActionBatch",
    "ActionRequest",
    "AssistantReply",
    "Completion",
    "Unrecognized",
    "parse_iteration_summary",
    "parse_reply",
    "parse_task_list",
    "AgentTask",
    "LoopState",
    "TaskConfig",
    "AgentDispatcher",
    "Planner",
    "format_step_outputs",
]
