"""
Error categorization for user-friendly error messages.
"""

from enum import Enum
from typing import Tuple

from .exceptions import (
    AuthError,
    DelegationDepthExceeded,
    MalformedResponse,
    PlanningError,
    ProviderError,
    TransportError,
    UnknownBackend,
    UnknownRole,
)


class ErrorCategory(Enum):
    """Categories of errors that can occur while running agents"""
    CONFIGURATION = "configuration"
    AUTH = "authentication"
    NETWORK = "network"
    RATE_LIMIT = "rate_limit"
    API = "api"
    RESPONSE = "response"
    TOOL = "tool"
    INTERNAL = "internal"


def categorize_error(error: Exception) -> Tuple[ErrorCategory, str]:
    """
    Categorize an error and provide a user-friendly explanation.

    Typed engine errors are matched first; anything else falls back to
    keyword matching on the message.

    Args:
        error: The exception to categorize

    Returns:
        Tuple of (ErrorCategory, explanation)
    """
    if isinstance(error, AuthError):
        return (
            ErrorCategory.AUTH,
            "Authentication failed - please check your API keys"
        )

    if isinstance(error, (UnknownBackend, UnknownRole, DelegationDepthExceeded)):
        return (
            ErrorCategory.CONFIGURATION,
            "Configuration error - the requested backend or agent is not available"
        )

    if isinstance(error, TransportError):
        return (
            ErrorCategory.NETWORK,
            "Network error - the backend could not be reached"
        )

    if isinstance(error, ProviderError):
        if error.is_rate_limit:
            return (
                ErrorCategory.RATE_LIMIT,
                "Rate limit exceeded - retries exhausted"
            )
        return (
            ErrorCategory.API,
            "API error - the provider returned an error"
        )

    if isinstance(error, (MalformedResponse, PlanningError)):
        return (
            ErrorCategory.RESPONSE,
            "Unusable response - the model did not return the expected JSON"
        )

    error_str = str(error).lower()
    error_type = type(error).__name__

    if "api key" in error_str or "token" in error_str or "config" in error_str:
        return (
            ErrorCategory.CONFIGURATION,
            "Configuration error - please check your API keys and environment variables"
        )

    if "401" in error_str or "unauthorized" in error_str or "forbidden" in error_str:
        return (
            ErrorCategory.AUTH,
            "Authentication failed - please check your API keys"
        )

    if "429" in error_str or "rate limit" in error_str:
        return (
            ErrorCategory.RATE_LIMIT,
            "Rate limit exceeded - too many requests"
        )

    if error_type == "TimeoutError" or any(
        keyword in error_str for keyword in ["timeout", "connection", "network", "unreachable"]
    ):
        return (
            ErrorCategory.NETWORK,
            "Network error - please check your connection to the backend"
        )

    if "action" in error_str or "command" in error_str:
        return (
            ErrorCategory.TOOL,
            "Action execution failed"
        )

    return (
        ErrorCategory.INTERNAL,
        "An unexpected error occurred"
    )
