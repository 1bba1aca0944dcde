"""
Utility modules for GSD agents.
"""

from .retry import RetryConfig, RetryPolicy, calculate_delay, is_retryable_error

__all__ = ["RetryConfig", "RetryPolicy", "calculate_delay", "is_retryable_error"]
