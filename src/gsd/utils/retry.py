"""
Retry policy with exponential backoff around a single backend call.

Only rate-limit ProviderErrors are retried. Transport, auth and other provider
errors surface immediately.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, List, Optional, TypeVar
from dataclasses import dataclass

from ..errors import ProviderError

logger = logging.getLogger(__name__)

T = TypeVar('T')

SleepFunc = Callable[[float], Awaitable[None]]


@dataclass
class RetryConfig:
    """Configuration for retry behavior"""
    max_attempts: int = 3
    base_delay: float = 2.0
    max_delay: Optional[float] = None  # no cap unless set
    exponential_base: float = 2.0
    jitter: bool = False


def is_retryable_error(error: Exception) -> bool:
    """
    Determine if an error should be retried.

    Args:
        error: The exception to check

    Returns:
        True only for provider errors the adapter classified as rate limiting
    """
    return isinstance(error, ProviderError) and error.is_rate_limit


def calculate_delay(
    attempt: int,
    base_delay: float,
    exponential_base: float,
    max_delay: Optional[float],
    jitter: bool
) -> float:
    """
    Calculate delay for retry attempt with exponential backoff.

    Args:
        attempt: Current attempt number (0-indexed)
        base_delay: Base delay in seconds
        exponential_base: Base for exponential backoff
        max_delay: Maximum delay in seconds (None for no cap)
        jitter: Whether to add random jitter

    Returns:
        Delay in seconds
    """
    delay = base_delay * (exponential_base ** attempt)
    if max_delay is not None:
        delay = min(delay, max_delay)

    if jitter:
        delay = delay * (0.5 + random.random() * 0.5)

    return delay


class RetryPolicy:
    """
    Wraps one backend call with bounded exponential backoff.

    The attempt limit counts every call, the first one included, so a limit
    of 1 disables retrying. Delays recorded for the most recent call are
    available in ``last_delays``.
    """

    def __init__(self, config: Optional[RetryConfig] = None, sleep: Optional[SleepFunc] = None):
        self.config = config or RetryConfig()
        if self.config.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.config.base_delay <= 0:
            raise ValueError("base_delay must be positive")
        self._sleep = sleep or asyncio.sleep
        self.last_delays: List[float] = []

    async def call(self, func: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        """
        Invoke ``func`` until it succeeds, fails non-retryably, or attempts run out.

        Raises:
            The last error raised by ``func``
        """
        self.last_delays = []
        name = getattr(func, "__name__", "call")
        max_attempts = self.config.max_attempts

        for attempt in range(max_attempts):
            try:
                result = await func(*args, **kwargs)

                if attempt > 0:
                    logger.info(f"{name} succeeded on attempt {attempt + 1}")

                return result

            except Exception as e:
                if not is_retryable_error(e):
                    logger.debug(f"{name} failed with non-retryable error: {e}")
                    raise

                if attempt >= max_attempts - 1:
                    logger.error(f"{name} failed after {max_attempts} attempts: {e}")
                    raise

                delay = calculate_delay(
                    attempt,
                    self.config.base_delay,
                    self.config.exponential_base,
                    self.config.max_delay,
                    self.config.jitter
                )
                self.last_delays.append(delay)

                logger.warning(
                    f"{name} rate limited on attempt {attempt + 1}/{max_attempts}, "
                    f"retrying in {delay:.2f}s: {e}"
                )

                await self._sleep(delay)

        # unreachable: the loop either returns or raises
        raise RuntimeError("retry loop exited without result")
