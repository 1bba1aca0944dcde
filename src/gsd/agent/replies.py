"""
Parsing of assistant text into tagged reply variants.

The agent loop matches exhaustively on AssistantReply:
- ActionBatch: a non-empty "actions" array
- Completion: "done": true with an optional "summary"
- Unrecognized: anything else (no JSON, wrong shape, empty actions)

The planner uses the strict parsers at the bottom, which raise
MalformedResponse instead of returning Unrecognized.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..errors import MalformedResponse
from .models import IterationSummary, Task

logger = logging.getLogger(__name__)

JSON_FENCE_PATTERN = re.compile(r"```json[^\n]*\n?(.*?)```", re.DOTALL | re.IGNORECASE)


@dataclass(frozen=True)
class ActionRequest:
    """One action as requested by the assistant"""
    type: Any
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ActionBatch:
    actions: List[ActionRequest]
    reasoning: str = ""


@dataclass(frozen=True)
class Completion:
    summary: str


@dataclass(frozen=True)
class Unrecognized:
    content: str
    reason: str


AssistantReply = Union[ActionBatch, Completion, Unrecognized]


def extract_json_candidate(text: str) -> str:
    """
    Isolate the JSON part of assistant text.

    A fenced block labelled json wins; otherwise the whole text is the candidate.
    """
    match = JSON_FENCE_PATTERN.search(text)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return text.strip()


def load_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Parse the JSON candidate of ``text``; None unless it is an object"""
    candidate = extract_json_candidate(text)
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        logger.debug(f"Assistant text is not JSON: {e}")
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else json.dumps(value)


def parse_reply(text: str) -> AssistantReply:
    """Classify assistant text into one of the reply variants"""
    parsed = load_json_object(text)
    if parsed is None:
        return Unrecognized(content=text, reason="no JSON object found")

    if parsed.get("done") is True:
        return Completion(summary=_as_text(parsed.get("summary")))

    actions = parsed.get("actions")
    if isinstance(actions, list) and actions:
        requests = []
        for item in actions:
            if isinstance(item, dict):
                params = item.get("params")
                requests.append(ActionRequest(
                    type=item.get("type"),
                    params=params if isinstance(params, dict) else {}
                ))
            else:
                requests.append(ActionRequest(type=item))
        return ActionBatch(actions=requests, reasoning=_as_text(parsed.get("reasoning")))

    return Unrecognized(content=text, reason="neither 'done' nor a non-empty 'actions' array")


def parse_task_list(text: str) -> List[Task]:
    """
    Parse a planner decomposition: {"tasks": [{"agent", "task_description"}, ...]}.

    Raises:
        MalformedResponse: if the list is missing, empty or has malformed entries
    """
    parsed = load_json_object(text)
    if parsed is None:
        raise MalformedResponse("Planner response is not a JSON object", content=text)

    tasks = parsed.get("tasks")
    if not isinstance(tasks, list) or not tasks:
        raise MalformedResponse("Planner response has no 'tasks' list", content=text)

    result = []
    for index, item in enumerate(tasks):
        if not isinstance(item, dict):
            raise MalformedResponse(f"Task {index} is not an object", content=text)
        role = item.get("agent") or item.get("role")
        description = item.get("task_description") or item.get("task")
        if not isinstance(role, str) or not role.strip():
            raise MalformedResponse(f"Task {index} has no agent", content=text)
        if not isinstance(description, str) or not description.strip():
            raise MalformedResponse(f"Task {index} has no task_description", content=text)
        result.append(Task(role=role.strip(), description=description))

    return result


def parse_iteration_summary(text: str) -> IterationSummary:
    """
    Parse a planner summary: {"summary", "status": complete|incomplete, "next_prompt"}.

    Raises:
        MalformedResponse: if the object or its status is missing or invalid
    """
    parsed = load_json_object(text)
    if parsed is None:
        raise MalformedResponse("Summary response is not a JSON object", content=text)

    status = parsed.get("status")
    if not isinstance(status, str) or status.strip().lower() not in ("complete", "incomplete"):
        raise MalformedResponse(f"Summary has invalid status: {status!r}", content=text)

    return IterationSummary(
        summary=_as_text(parsed.get("summary")),
        complete=status.strip().lower() == "complete",
        next_prompt=_as_text(parsed.get("next_prompt")),
    )
