"""
Prompts module - agent protocol preamble, planner and summary prompts.
"""

from .builder import (
    PromptBuilder,
    PromptComponent,
    CORRECTIVE_MESSAGE,
    ROLE_PERSONAS,
    build_task_prompt,
    build_feedback_message,
    build_planner_prompt,
    build_summary_prompt,
)


__all__ = [
    "PromptBuilder",
    "PromptComponent",
    "CORRECTIVE_MESSAGE",
    "ROLE_PERSONAS",
    "build_task_prompt",
    "build_feedback_message",
    "build_planner_prompt",
    "build_summary_prompt",
]
