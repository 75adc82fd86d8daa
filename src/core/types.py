"""
Core types and protocols used across modules.

This module provides base types, enums, and protocol definitions that are
shared across the core library to ensure consistency and type safety.
"""

from enum import Enum
from typing import Protocol


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Categories:
        TRANSIENT: Temporary failures that should retry with backoff
                   (e.g., network timeouts, 429/5xx responses)
        AUTH: Authentication failures requiring credential refresh
              (e.g., 401 responses, failed token exchange)
        PERMANENT: Non-retriable failures that won't succeed on retry
                   (e.g., batch validation, configuration issues)
        ENCRYPTION: Payload encryption or decryption failures
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    ENCRYPTION = "encryption"
    UNKNOWN = "unknown"


class TokenProvider(Protocol):
    """
    Protocol for bearer token providers.

    The retry layer only needs to be able to force a refresh after a 401;
    callers fetch the current token themselves on every attempt.
    """

    async def get_access_token(self) -> str:
        """
        Get a valid access token, acquiring one if needed.

        Raises:
            AuthError: If token acquisition fails
        """
        ...

    async def refresh_access_token(self) -> str:
        """
        Unconditionally acquire a fresh access token.

        Raises:
            AuthError: If token refresh fails
        """
        ...


__all__ = [
    "ErrorCategory",
    "TokenProvider",
]
