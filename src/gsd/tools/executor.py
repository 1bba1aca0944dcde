"""
ActionExecutor - Coordinates action execution using the coordinator pattern.

This module manages handler registration, lookup by type or alias, and
execution. Per-action failures never abort the agent loop: they come back as
unsuccessful ActionResults.
"""

import logging
from typing import Dict, List, Any, Mapping, Optional
from .base import ActionDefinition, ActionResult, ExecutionContext, IActionHandler
from ..errors import BackendError, GSDError

logger = logging.getLogger(__name__)

UNKNOWN_ACTION_MARKER = "Unknown action"


def truncate_result(text: str, max_chars: Optional[int]) -> str:
    """Cap one action result, noting how much was dropped"""
    if max_chars is None or len(text) <= max_chars:
        return text
    dropped = len(text) - max_chars
    return f"{text[:max_chars]}... [truncated {dropped} chars]"


class ActionExecutor:
    """
    Coordinates action execution for the agent.

    Responsibilities:
    1. Register action handlers and their aliases
    2. Provide action definitions for the protocol preamble
    3. Route actions to the appropriate handler
    4. Turn execution errors into inline results
    """

    def __init__(self, max_result_chars: Optional[int] = None):
        self._handlers: Dict[str, IActionHandler] = {}
        self._aliases: Dict[str, str] = {}
        self.max_result_chars = max_result_chars

    def register(self, handler: IActionHandler) -> None:
        """
        Register an action handler.

        Raises:
            ValueError if a handler with the same name or alias already exists
        """
        names = [handler.name, *handler.aliases]
        for name in names:
            key = self.normalize(name)
            if key in self._aliases:
                raise ValueError(f"Action '{name}' is already registered")

        self._handlers[handler.name] = handler
        for name in names:
            self._aliases[self.normalize(name)] = handler.name
        logger.debug(f"Registered action: {handler.name} (category: {handler.category.value})")

    @staticmethod
    def normalize(action_type: str) -> str:
        return action_type.strip().lower().replace("-", "_")

    def resolve(self, action_type: Any) -> Optional[IActionHandler]:
        if not isinstance(action_type, str):
            return None
        name = self._aliases.get(self.normalize(action_type))
        return self._handlers.get(name) if name else None

    def get_action_definitions(self) -> List[ActionDefinition]:
        return [handler.get_definition() for handler in self._handlers.values()]

    async def execute(
        self,
        action_type: Any,
        params: Any,
        context: Optional[ExecutionContext] = None
    ) -> ActionResult:
        """
        Execute one action.

        Args:
            action_type: Requested action type (canonical name or alias)
            params: Mapping of named params
            context: Requesting agent's execution context

        Returns:
            ActionResult; unknown types yield an "Unknown action" marker

        Raises:
            BackendError: from a delegated sub-agent, which is fatal for the run
        """
        context = context or ExecutionContext()

        handler = self.resolve(action_type)
        if handler is None:
            logger.warning(f"Unknown action requested: {action_type}")
            return ActionResult(
                content=f"{UNKNOWN_ACTION_MARKER}: {action_type}. "
                        f"Available actions: {', '.join(self.get_action_names())}",
                success=False,
                metadata={"unknown": True}
            )

        if not isinstance(params, Mapping):
            params = {}

        try:
            handler.validate_input(params)
        except ValueError as e:
            logger.warning(f"Invalid params for action {handler.name}: {e}")
            return ActionResult(
                content=f"Invalid params for action '{handler.name}': {e}",
                success=False,
                metadata={"error": True}
            )

        try:
            result = await handler.execute(params, context)
        except BackendError:
            raise
        except (GSDError, OSError, ValueError) as e:
            logger.error(f"Action {handler.name} execution failed: {e}", exc_info=True)
            result = ActionResult(
                content=f"Action '{handler.name}' execution failed: {e}",
                success=False,
                metadata={"error": True}
            )

        content = truncate_result(result.content, self.max_result_chars)
        preview = content[:200] + "..." if len(content) > 200 else content
        if result.success:
            logger.debug(f"Action {handler.name} completed. Result preview: {preview}")
        else:
            logger.warning(f"Action {handler.name} completed with error: {preview}")

        return ActionResult(content=content, success=result.success, metadata=result.metadata)

    def get_action_names(self) -> List[str]:
        return list(self._handlers.keys())
