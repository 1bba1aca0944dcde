"""
Tools module - action handlers and the action executor.
"""

from typing import Optional

from .base import (
    IActionHandler,
    BaseActionHandler,
    ActionDefinition,
    ActionResult,
    ActionCategory,
    ExecutionContext,
    format_definitions,
)
from .executor import ActionExecutor, UNKNOWN_ACTION_MARKER, truncate_result
from .shell_tools import RunCommandHandler
from .file_tools import ReadFileHandler, WriteFileHandler
from .task_tools import DelegateTaskHandler


def create_default_action_executor(
    max_result_chars: Optional[int] = None,
    command_timeout: float = 300.0,
    allow_delegation: bool = True
) -> ActionExecutor:
    """
    Create an ActionExecutor with the standard action vocabulary.

    Args:
        max_result_chars: Cap on each action result's length
        command_timeout: Timeout for run_command in seconds
        allow_delegation: Whether to register delegate_task

    Returns:
        ActionExecutor with run_command, read_file, write_file (and delegate_task)
    """
    executor = ActionExecutor(max_result_chars=max_result_chars)

    executor.register(RunCommandHandler(timeout=command_timeout))
    executor.register(ReadFileHandler())
    executor.register(WriteFileHandler())

    if allow_delegation:
        executor.register(DelegateTaskHandler())

    return executor


__all__ = [
    "IActionHandler",
    "BaseActionHandler",
    "ActionDefinition",
    "ActionResult",
    "ActionCategory",
    "ExecutionContext",
    "format_definitions",
    "ActionExecutor",
    "UNKNOWN_ACTION_MARKER",
    "truncate_result",
    "create_default_action_executor",
    "RunCommandHandler",
    "ReadFileHandler",
    "WriteFileHandler",
    "DelegateTaskHandler",
]
