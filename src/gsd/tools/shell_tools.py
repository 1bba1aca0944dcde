"""
Shell command action handler.
"""

import asyncio
import logging
import os
import signal
from typing import Any, Mapping

from .base import ActionCategory, ActionDefinition, ActionResult, BaseActionHandler, ExecutionContext

logger = logging.getLogger(__name__)


class RunCommandHandler(BaseActionHandler):
    """
    Runs an arbitrary shell command and captures combined stdout/stderr.

    A non-zero exit status is returned as data so the agent can react to it.
    The command runs in its own session; on timeout or cancellation the whole
    process group is killed.
    """

    aliases = ("bash", "run-command", "shell")
    required_params = ("command",)

    def __init__(self, timeout: float = 300.0):
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "run_command"

    @property
    def category(self) -> ActionCategory:
        return ActionCategory.SHELL

    def get_definition(self) -> ActionDefinition:
        return ActionDefinition(
            name=self.name,
            description="run a shell command in the project directory",
            params={"command": "shell command"},
            category=self.category
        )

    async def execute(self, params: Mapping[str, Any], context: ExecutionContext) -> ActionResult:
        command = params["command"]
        logger.info(f"[Executing: {command}]")

        try:
            process = await asyncio.create_subprocess_shell(
                command,
                cwd=context.working_dir,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                start_new_session=True
            )
        except OSError as e:
            return self._error_response(e)

        buffer = bytearray()
        try:
            returncode = await asyncio.wait_for(_collect(process, buffer), timeout=self.timeout)
        except asyncio.TimeoutError:
            await _kill_group(process)
            return ActionResult(
                content=f"{decode_output(buffer)}\n[command timed out after {self.timeout:.0f}s]".lstrip(),
                success=False,
                metadata={"timed_out": True}
            )
        except asyncio.CancelledError:
            await _kill_group(process)
            raise

        output = decode_output(buffer)
        if returncode != 0:
            return ActionResult(
                content=f"{output}\n[exit code {returncode}]".lstrip(),
                success=False,
                metadata={"returncode": returncode}
            )

        return self._success_response(output, metadata={"returncode": 0})


def decode_output(payload: bytes) -> str:
    """Commands may print any bytes; undecodable ones become U+FFFD"""
    return bytes(payload).decode("utf-8", errors="replace")


async def _collect(process: asyncio.subprocess.Process, buffer: bytearray) -> int:
    # Partial output stays in ``buffer`` if this is cancelled by a timeout
    while True:
        chunk = await process.stdout.read(4096)
        if not chunk:
            break
        buffer.extend(chunk)
    return await process.wait()


async def _kill_group(process: asyncio.subprocess.Process) -> None:
    """Kill the command's whole process group, grandchildren included"""
    if process.returncode is None:
        try:
            if hasattr(os, "killpg"):
                os.killpg(process.pid, signal.SIGKILL)
            else:
                process.kill()
        except ProcessLookupError:
            logger.debug(f"Process group {process.pid} already exited")
    await process.wait()
