"""
Error taxonomy, categorization and formatting.
"""

from .exceptions import (
    GSDError,
    BackendError,
    TransportError,
    AuthError,
    ProviderError,
    MalformedResponse,
    PlanningError,
    UnknownBackend,
    UnknownRole,
    DelegationDepthExceeded,
)
from .formatter import ErrorFormatter, format_error_for_user
from .categories import ErrorCategory, categorize_error

__all__ = [
    "GSDError",
    "BackendError",
    "TransportError",
    "AuthError",
    "ProviderError",
    "MalformedResponse",
    "PlanningError",
    "UnknownBackend",
    "UnknownRole",
    "DelegationDepthExceeded",
    "ErrorFormatter",
    "format_error_for_user",
    "ErrorCategory",
    "categorize_error",
]
