"""
Error message formatting for terminal status reports.
"""

import logging
from typing import Any, Dict
from .categories import ErrorCategory, categorize_error

logger = logging.getLogger(__name__)


class ErrorFormatter:
    """
    Formats errors into user-friendly messages for the caller.
    """

    # Suggestions for each error category
    SUGGESTIONS = {
        ErrorCategory.CONFIGURATION: [
            "Check AGENT_BACKEND and AGENT_ROLES in your `.env` file",
            "Run `GET /health` to see which backend the service resolved"
        ],
        ErrorCategory.AUTH: [
            "Verify the API key for the selected backend is set and valid",
            "GitHub Models needs GITHUB_TOKEN; Groq needs GROQ_API_KEY"
        ],
        ErrorCategory.NETWORK: [
            "Verify the backend endpoint URL is reachable",
            "For Ollama: make sure the server is running (`ollama serve`)"
        ],
        ErrorCategory.RATE_LIMIT: [
            "Raise the retry limit or backoff delay for the backend",
            "Add pacing with *_BETWEEN_ITER_SECONDS for long tasks"
        ],
        ErrorCategory.API: [
            "Check the provider status page for outages",
            "Verify the model name and generation parameters"
        ],
        ErrorCategory.RESPONSE: [
            "Try a more capable model",
            "Lower the temperature for more deterministic JSON output"
        ],
        ErrorCategory.TOOL: [
            "Review the action parameters in the conversation"
        ],
        ErrorCategory.INTERNAL: [
            "Re-run the task; agent state is not persisted between runs",
            "Check the logs for more details"
        ]
    }

    @staticmethod
    def format_error_report(error: Exception, include_traceback: bool = False) -> str:
        """
        Format an error as a Markdown report.

        Args:
            error: The exception to format
            include_traceback: Whether to include technical details (default: False)

        Returns:
            Formatted markdown string
        """
        category, explanation = categorize_error(error)
        suggestions = ErrorFormatter.SUGGESTIONS.get(category, [])

        lines = [
            f"**Run Failed - {category.value.replace('_', ' ').title()} Error**",
            "",
            "### What Happened",
            f"{explanation}: {str(error)[:200]}",
            ""
        ]

        if suggestions:
            lines.append("### Suggestions")
            for suggestion in suggestions:
                lines.append(f"- {suggestion}")
            lines.append("")

        if include_traceback:
            lines.append("```")
            lines.append(f"Error Type: {type(error).__name__}")
            lines.append(f"Error Message: {str(error)}")
            lines.append("```")
            lines.append("")

        return "\n".join(lines)

    @staticmethod
    def format_error_concise(error: Exception) -> str:
        """
        Format an error concisely for logs or inline display.

        Args:
            error: The exception to format

        Returns:
            Concise error string
        """
        category, explanation = categorize_error(error)
        return f"{category.value.upper()}: {explanation} - {str(error)[:100]}"

    @staticmethod
    def to_status(error: Exception) -> Dict[str, Any]:
        """Terminal 'failed' status body, distinct from done/exhausted"""
        category, explanation = categorize_error(error)
        return {
            "status": "failed",
            "category": category.value,
            "error": str(error),
            "explanation": explanation
        }


def format_error_for_user(error: Exception, format_type: str = "concise") -> str:
    """
    Convenience function to format an error for display to users.

    Args:
        error: The exception to format
        format_type: Format type ("report" or "concise")

    Returns:
        Formatted error message
    """
    if format_type == "report":
        return ErrorFormatter.format_error_report(error)
    return ErrorFormatter.format_error_concise(error)
