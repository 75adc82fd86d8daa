"""
Resilience patterns module.

Components:
    - RetryConfig: Retry count and exponential backoff configuration
    - RetryHandler: 401 token refresh plus backoff for 429/5xx and network errors
"""

from .retry import (
    DEFAULT_RETRY,
    RetryConfig,
    RetryHandler,
    is_backoff_status,
)

__all__ = [
    "RetryConfig",
    "RetryHandler",
    "DEFAULT_RETRY",
    "is_backoff_status",
]
