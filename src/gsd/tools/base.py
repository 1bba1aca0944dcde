"""
Base classes and interfaces for the action system.

An action is one side-effecting operation an agent may request. Each action
type is implemented by a handler registered with the ActionExecutor.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple
from enum import Enum


class ActionCategory(Enum):
    """Categories of actions available to the agent"""
    SHELL = "shell"  # Process execution
    FILE = "file"  # File system operations
    DELEGATION = "delegation"  # Spawning sub-agent tasks


@dataclass
class ActionResult:
    """Textual result of one action plus a success marker"""
    content: str
    success: bool = True
    metadata: Optional[Dict[str, Any]] = None


@dataclass
class ExecutionContext:
    """
    What a handler may know about the agent that requested the action.

    Attributes:
        role: Role of the requesting agent
        depth: Delegation depth of the requesting agent (0 for top-level tasks)
        working_dir: Directory commands run in and relative paths resolve against
        delegate: Coroutine spawning a sub-task as (role, task, depth) -> outcome
    """
    role: str = ""
    depth: int = 0
    working_dir: Optional[str] = None
    delegate: Optional[Callable[[str, str, int], Awaitable[Any]]] = None


@dataclass
class ActionDefinition:
    """Definition of an action for the protocol preamble"""
    name: str
    description: str
    params: Dict[str, str] = field(default_factory=dict)  # param name -> description
    category: ActionCategory = ActionCategory.SHELL

    def example(self) -> str:
        fields = ", ".join(f'"{key}": "<{value}>"' for key, value in self.params.items())
        return f'{{"type": "{self.name}", "params": {{{fields}}}}}'


class IActionHandler(ABC):
    """
    Base interface for all action handlers.

    Each handler implements:
    1. Action definition (name, description, params)
    2. Execution logic
    3. Optional validation
    """

    # Alternate type names accepted for this action
    aliases: Tuple[str, ...] = ()

    @property
    @abstractmethod
    def name(self) -> str:
        """Canonical action type"""
        pass

    @property
    @abstractmethod
    def category(self) -> ActionCategory:
        pass

    @abstractmethod
    def get_definition(self) -> ActionDefinition:
        pass

    @abstractmethod
    async def execute(self, params: Mapping[str, Any], context: ExecutionContext) -> ActionResult:
        """
        Execute the action.

        Failures the agent should reason about (non-zero exit, missing file)
        are returned as an unsuccessful ActionResult, not raised.
        """
        pass

    def validate_input(self, params: Mapping[str, Any]) -> None:
        """
        Validate action params before execution.

        Raises:
            ValueError if validation fails
        """
        pass


class BaseActionHandler(IActionHandler):
    """
    Base implementation of IActionHandler with common functionality.

    Subclasses declare ``required_params`` and implement execute().
    """

    required_params: Tuple[str, ...] = ()

    def validate_input(self, params: Mapping[str, Any]) -> None:
        missing = [key for key in self.required_params if not isinstance(params.get(key), str)]
        if missing:
            raise ValueError(f"missing or non-string params: {', '.join(missing)}")

    def _format_error(self, error: Exception) -> str:
        return f"Error executing {self.name}: {str(error)}"

    def _success_response(self, content: str, metadata: Optional[Dict] = None) -> ActionResult:
        return ActionResult(content=content, success=True, metadata=metadata)

    def _error_response(self, error: Exception) -> ActionResult:
        return ActionResult(
            content=self._format_error(error),
            success=False,
            metadata={"error": True}
        )


def format_definitions(definitions: List[ActionDefinition]) -> str:
    """Render action definitions as the 'Available actions' list"""
    return "\n".join(f"- {d.name}: {d.example()}  ({d.description})" for d in definitions)
