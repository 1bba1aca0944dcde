"""
Data models shared by the agent loop, dispatcher and planner.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class AgentStatus(Enum):
    """Terminal status of an agent loop run"""
    DONE = "done"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class Task:
    """A unit of work for one role"""
    role: str
    description: str


@dataclass(frozen=True)
class AgentOutcome:
    """
    Terminal value of an agent loop run.

    ``text`` is the completion summary for DONE and the last assistant text
    for EXHAUSTED.
    """
    status: AgentStatus
    text: str
    iterations: int = 0

    @classmethod
    def done(cls, summary: str, iterations: int = 0) -> "AgentOutcome":
        return cls(AgentStatus.DONE, summary, iterations)

    @classmethod
    def exhausted(cls, last_content: str, iterations: int = 0) -> "AgentOutcome":
        return cls(AgentStatus.EXHAUSTED, last_content, iterations)

    @property
    def is_done(self) -> bool:
        return self.status == AgentStatus.DONE

    @property
    def summary(self) -> Optional[str]:
        return self.text if self.is_done else None

    @property
    def last_content(self) -> Optional[str]:
        return self.text if not self.is_done else None

    def to_dict(self) -> Dict[str, Any]:
        key = "summary" if self.is_done else "last_content"
        return {"status": self.status.value, key: self.text, "iterations": self.iterations}


@dataclass(frozen=True)
class PlanStep:
    """One task and the outcome of running it"""
    task: Task
    outcome: AgentOutcome

    def to_dict(self) -> Dict[str, Any]:
        return {"agent": self.task.role, "task_description": self.task.description,
                **self.outcome.to_dict()}


@dataclass(frozen=True)
class IterationSummary:
    """Planner summary of one outer iteration"""
    summary: str
    complete: bool
    next_prompt: str = ""


@dataclass
class IterationState:
    """Planner state between outer iterations"""
    current_goal: str
    iteration_number: int = 1
    auto_mode: bool = False


@dataclass
class IterationRecord:
    """What happened in one outer iteration"""
    number: int
    goal: str
    steps: List[PlanStep]
    summary: IterationSummary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "iteration": self.number,
            "goal": self.goal,
            "steps": [step.to_dict() for step in self.steps],
            "summary": self.summary.summary,
            "status": "complete" if self.summary.complete else "incomplete",
            "next_prompt": self.summary.next_prompt,
        }


@dataclass
class PlanResult:
    """
    Final result of a planner run.

    ``stopped_reason`` is one of: complete, manual, max_iterations.
    """
    goal: str
    iterations: List[IterationRecord] = field(default_factory=list)
    stopped_reason: str = "complete"

    @property
    def final_summary(self) -> str:
        if not self.iterations:
            return ""
        return self.iterations[-1].summary.summary

    @property
    def complete(self) -> bool:
        return bool(self.iterations) and self.iterations[-1].summary.complete

    def to_dict(self) -> Dict[str, Any]:
        return {
            "goal": self.goal,
            "status": "complete" if self.complete else "incomplete",
            "stopped_reason": self.stopped_reason,
            "summary": self.final_summary,
            "iterations": [record.to_dict() for record in self.iterations],
        }
