"""
Prompt builder - Constructs agent, planner and summary prompts from modular components.

Uses a template-based system with reusable components and {{VARIABLE}}
substitution.
"""

import re
from typing import Dict, List, Any, Optional
from dataclasses import dataclass

from ..tools.base import ActionDefinition, format_definitions


CORRECTIVE_MESSAGE = (
    "Please provide a valid JSON response with either actions to execute or mark as done."
)

CONTINUE_SUFFIX = "Continue or finish if done."

# Opaque persona text per role; callers may supply their own mapping.
ROLE_PERSONAS: Dict[str, str] = {
    "planner": "You are a software engineering project planner.",
    "architect": "You are a senior software architect. Design structure before code.",
    "backend": "You are a senior backend engineer.",
    "frontend": "You are a senior frontend engineer.",
    "db": "You are a senior database engineer.",
    "reviewer": "You are a meticulous code reviewer. Report problems and fix them.",
}


@dataclass
class PromptComponent:
    """Represents a reusable prompt component"""
    name: str
    content: str
    required: bool = True


class PromptBuilder:
    """
    Builds prompts from modular components.

    Default components:
    - TASK: the task description
    - PROTOCOL: the two legal response shapes and the action vocabulary
    """

    def __init__(self, separator: str = "\n\n"):
        self.components: Dict[str, PromptComponent] = {}
        self.separator = separator
        self._register_default_components()

    def _register_default_components(self):
        self.register(PromptComponent(name="TASK", content="{{TASK}}"))

        self.register(PromptComponent(
            name="PROTOCOL",
            content="""IMPORTANT: You must complete the task by taking actions. After each response, you can either:
1. Execute actions by providing a JSON object with "actions" array
2. Finish by providing a JSON object with "done": true and "summary"

Available actions:
{{ACTIONS}}

Response format for actions:
{"actions": [{"type": "run_command", "params": {"command": "ls -la"}}], "reasoning": "why you're doing this"}

Response format when done:
{"done": true, "summary": "Brief description of what you accomplished"}

Actions run in the order listed. Start working on the task now."""
        ))

    def register(self, component: PromptComponent):
        """Register a prompt component"""
        self.components[component.name] = component

    def build(
        self,
        include: Optional[List[str]] = None,
        exclude: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Build the full prompt.

        Args:
            include: Component names to include, in order (None = all required)
            exclude: Component names to exclude
            context: Values substituted for {{VARIABLE}} placeholders

        Returns:
            Complete prompt string
        """
        if include is None:
            components_to_use = [
                comp for comp in self.components.values()
                if comp.required
            ]
        else:
            components_to_use = [
                self.components[name]
                for name in include
                if name in self.components
            ]

        if exclude:
            components_to_use = [
                comp for comp in components_to_use
                if comp.name not in exclude
            ]

        sections = []
        for component in components_to_use:
            content = component.content
            if context:
                content = self._apply_context(content, context)
            sections.append(content)

        return self.separator.join(sections)

    def _apply_context(self, content: str, context: Dict[str, Any]) -> str:
        """Apply context variable substitutions to content"""
        def replace_var(match):
            var_name = match.group(1)
            return str(context.get(var_name, match.group(0)))

        return re.sub(r'\{\{(\w+)\}\}', replace_var, content)

    def add_context_section(self, name: str, content: str):
        """Add a dynamic section; it is only used when named in ``include``"""
        self.register(PromptComponent(
            name=name,
            content=content,
            required=False
        ))


def build_task_prompt(
    task: str,
    actions: List[ActionDefinition],
    persona: Optional[str] = None
) -> str:
    """
    First user message of an agent loop: persona, task, then the protocol preamble.
    """
    builder = PromptBuilder()
    include = ["TASK", "PROTOCOL"]
    if persona:
        builder.add_context_section("PERSONA", persona)
        include.insert(0, "PERSONA")

    return builder.build(
        include=include,
        context={"TASK": task, "ACTIONS": format_definitions(actions)}
    )


def build_feedback_message(lines: List[str]) -> str:
    """User message carrying the results of one batch of actions"""
    results = "".join(f"\n- {line}" for line in lines)
    return f"Actions executed. Results:{results}\n\n{CONTINUE_SUFFIX}"


def build_planner_prompt(goal: str, roles: List[str]) -> str:
    """Decomposition prompt: goal -> {"tasks": [{"agent", "task_description"}]}"""
    return f"""You are a master software engineering project planner. Your job is to take a high-level goal and break it down into a series of small, atomic, sequential tasks. Each task must be assigned to a specific agent.

You MUST return your response as a single, valid JSON object.
The JSON object should contain one key: "tasks".
The value of "tasks" should be an array of task objects.
Each task object must have two keys: "agent" and "task_description".

The available agents are: {' '.join(roles)}

Goal: "{goal}"

Provide the JSON response now."""


def build_summary_prompt(original_goal: str, current_goal: str, outputs: str) -> str:
    """Summary prompt: plan step outputs -> {"summary", "status", "next_prompt"}"""
    return f"""You are a senior tech lead. You have received a series of outputs from different agents working on a task. Your job is to summarize their work and determine if the original goal has been met.

Original Goal: "{original_goal}"
Summary of previous work: "{current_goal}"
Outputs from this iteration:
{outputs}

Your task:
1. Summarize the work done in this iteration.
2. Determine the project status.
3. Provide a new high-level prompt for the next iteration if the goal is not met.

You MUST return a single, valid JSON object with three keys:
- "summary": A concise summary of the work completed.
- "status": Either "complete" or "incomplete".
- "next_prompt": A clear, high-level prompt for the planner in the next iteration. If the status is "complete", this can be an empty string."""
