"""
Exception taxonomy shared by backends, the retry policy, the agent loop and the planner.

Adapters classify their own failures into these types; everything above the
adapter only reacts to the taxonomy.
"""

from typing import Optional


class GSDError(Exception):
    """Base class for all engine errors"""
    pass


class BackendError(GSDError):
    """A backend call failed"""
    pass


class TransportError(BackendError):
    """Network or connection failure talking to a backend"""
    pass


class AuthError(BackendError):
    """Missing or invalid credential. Never retried."""
    pass


class ProviderError(BackendError):
    """
    Structured error payload returned by the provider.

    Attributes:
        message: Provider error message
        retryable: Whether the retry policy may retry this error (rate limiting)
        status_code: HTTP status, if the provider returned one
    """

    def __init__(self, message: str, retryable: bool = False, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.retryable = retryable
        self.status_code = status_code

    @property
    def is_rate_limit(self) -> bool:
        return self.retryable or self.status_code == 429


class MalformedResponse(GSDError):
    """Assistant text could not be parsed into a legal reply shape"""

    def __init__(self, message: str, content: str = ""):
        super().__init__(message)
        self.content = content


class PlanningError(GSDError):
    """Planner decomposition or summary response was not well formed"""
    pass


class UnknownBackend(GSDError):
    """Configured backend identifier has no registered adapter"""

    def __init__(self, backend: str, available: Optional[list] = None):
        available = available or []
        super().__init__(
            f"Unknown agent backend: {backend}. Supported: {', '.join(available)}"
        )
        self.backend = backend


class UnknownRole(GSDError):
    """Role has no resolvable execution target"""

    def __init__(self, role: str, available: Optional[list] = None):
        available = available or []
        super().__init__(
            f"Agent '{role}' not found. Available agents: {', '.join(available)}"
        )
        self.role = role


class DelegationDepthExceeded(GSDError):
    """A sub-agent tried to delegate deeper than the configured bound"""

    def __init__(self, depth: int, max_depth: int):
        super().__init__(
            f"Delegation depth {depth} exceeds maximum of {max_depth}"
        )
        self.depth = depth
        self.max_depth = max_depth
