"""
Logging configuration for GSD agents.

Configures logging based on environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL
- LOG_FORMAT: simple, detailed, json

Every record is tagged with the agent that emitted it (``role@depth``, or
``-`` outside an agent run) so that interleaved delegated runs stay readable.
Logs go to stderr.
"""

import contextvars
import json
import logging
import os
import sys
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

NOISY_LOGGERS = ("httpx", "httpcore", "anthropic", "google_genai", "asyncio", "uvicorn.access")

# Agent currently running in this task context, e.g. "backend@1"
CURRENT_AGENT: contextvars.ContextVar[str] = contextvars.ContextVar("gsd_agent", default="-")

FORMATS = {
    "simple": "%(levelname)s - [%(agent)s] %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - [%(agent)s] "
                "%(funcName)s:%(lineno)d - %(message)s",
}


@contextmanager
def agent_log_context(role: str, depth: int = 0) -> Iterator[None]:
    """Tag records logged inside the block with ``role@depth``"""
    token = CURRENT_AGENT.set(f"{role}@{depth}")
    try:
        yield
    finally:
        CURRENT_AGENT.reset(token)


class AgentContextFilter(logging.Filter):
    """Copies the current agent tag onto each record as ``record.agent``"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.agent = CURRENT_AGENT.get()
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record; ``extra={"extra_data": {...}}`` lands under "extra"."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "agent": getattr(record, "agent", CURRENT_AGENT.get()),
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_data"):
            log_data["extra"] = record.extra_data

        return json.dumps(log_data, default=str)


def build_handler(format_style: str, level: int = logging.NOTSET) -> logging.Handler:
    """stderr handler for the given style, with the agent tag filter attached"""
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(AgentContextFilter())

    if format_style == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            fmt=FORMATS.get(format_style, FORMATS["simple"]),
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
    return handler


def configure_logging(
    level: Optional[str] = None,
    format_style: Optional[str] = None
) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level. Defaults to LOG_LEVEL env var or INFO.
        format_style: simple, detailed or json. Defaults to LOG_FORMAT env var or simple.
    """
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_format = (format_style or os.getenv("LOG_FORMAT", "simple")).lower()

    valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if log_level not in valid_levels:
        sys.stderr.write(f"Warning: Invalid LOG_LEVEL '{log_level}', defaulting to INFO\n")
        log_level = "INFO"

    numeric_level = getattr(logging, log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(build_handler(log_format, numeric_level))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.debug(f"Logging configured: level={log_level}, format={log_format}")
