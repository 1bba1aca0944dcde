"""
File operation action handlers.

Relative paths resolve against the agent's working directory.
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from .base import ActionCategory, ActionDefinition, ActionResult, BaseActionHandler, ExecutionContext

logger = logging.getLogger(__name__)


def resolve_path(path: str, working_dir: Optional[str]) -> Path:
    resolved = Path(path).expanduser()
    if not resolved.is_absolute() and working_dir:
        resolved = Path(working_dir) / resolved
    return resolved


class ReadFileHandler(BaseActionHandler):
    """Returns file contents; read errors come back as data"""

    aliases = ("read-file", "cat")
    required_params = ("path",)

    @property
    def name(self) -> str:
        return "read_file"

    @property
    def category(self) -> ActionCategory:
        return ActionCategory.FILE

    def get_definition(self) -> ActionDefinition:
        return ActionDefinition(
            name=self.name,
            description="read a file's contents",
            params={"path": "file path"},
            category=self.category
        )

    async def execute(self, params: Mapping[str, Any], context: ExecutionContext) -> ActionResult:
        path = params["path"]
        logger.info(f"[Reading: {path}]")

        try:
            content = resolve_path(path, context.working_dir).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return ActionResult(
                content=f"{path}: {e}",
                success=False,
                metadata={"path": path, "exists": False}
            )

        return self._success_response(content, metadata={"path": path, "length": len(content)})


class WriteFileHandler(BaseActionHandler):
    """Writes content to a path, creating parent directories. Overwrites."""

    aliases = ("write-file",)
    required_params = ("path", "content")

    @property
    def name(self) -> str:
        return "write_file"

    @property
    def category(self) -> ActionCategory:
        return ActionCategory.FILE

    def get_definition(self) -> ActionDefinition:
        return ActionDefinition(
            name=self.name,
            description="create or overwrite a file",
            params={"path": "file path", "content": "file content"},
            category=self.category
        )

    async def execute(self, params: Mapping[str, Any], context: ExecutionContext) -> ActionResult:
        path = params["path"]
        content = params["content"]
        logger.info(f"[Writing: {path}]")

        target = resolve_path(path, context.working_dir)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as e:
            return self._error_response(e)

        return self._success_response(
            f"File written: {path}",
            metadata={"path": path, "length": len(content)}
        )
