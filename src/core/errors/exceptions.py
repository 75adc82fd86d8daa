"""
Unified exception hierarchy for the vault client.

Provides typed exceptions with retry classification so the retry layer and
the operation pipeline can decide what to do with a failure without string
matching.
"""

import asyncio

import aiohttp

# Import ErrorCategory from canonical source to avoid duplicate enum issues
# (comparing enums from different classes always returns False)
from core.types import ErrorCategory


class VaultError(Exception):
    """
    Base exception for all vault client errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for retry decisions
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def should_refresh_auth(self) -> bool:
        return self.category == ErrorCategory.AUTH

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthError(VaultError):
    """Base class for authentication errors."""

    category = ErrorCategory.AUTH


class AuthenticationError(AuthError):
    """Client-credentials exchange was rejected by the auth server.

    Carries the HTTP status and the response body verbatim.
    """

    def __init__(self, status_code: int, response_body: str):
        super().__init__(
            f"Authentication failed: {status_code} - {response_body}",
            context={"status_code": status_code},
        )
        self.status_code = status_code
        self.response_body = response_body


# =============================================================================
# Permanent Errors (Don't Retry)
# =============================================================================


class PermanentError(VaultError):
    """Base class for permanent/non-retriable errors."""

    category = ErrorCategory.PERMANENT


class BatchValidationError(PermanentError, ValueError):
    """Batch request is empty or larger than the endpoint allows."""

    pass


class ConfigurationError(PermanentError):
    """Client configuration is missing or malformed."""

    pass


# =============================================================================
# Transport Errors
# =============================================================================


class HttpStatusError(VaultError):
    """Non-2xx response surfaced as an exception by the transport."""

    def __init__(self, status: int, body: str = "", cause: Exception | None = None):
        super().__init__(f"HTTP {status}: {body[:200]}", cause, {"status": status})
        self.status = status
        self.body = body
        self.category = classify_http_status(status)


# =============================================================================
# Error Classification Utilities
# =============================================================================

NETWORK_ERROR_TYPES: tuple[type[BaseException], ...] = (
    aiohttp.ClientConnectionError,
    aiohttp.ClientPayloadError,
    asyncio.TimeoutError,
    OSError,
)

RETRYABLE_STATUS_CODES = frozenset({429})


def classify_http_status(status_code: int) -> ErrorCategory:
    """Classify HTTP status code into error category."""
    if 200 <= status_code < 300:
        return ErrorCategory.UNKNOWN  # Not an error

    if status_code == 401:
        return ErrorCategory.AUTH

    if status_code in RETRYABLE_STATUS_CODES:
        return ErrorCategory.TRANSIENT  # Rate limited

    if status_code == 419:
        return ErrorCategory.ENCRYPTION  # Backend cannot decrypt

    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT

    if status_code >= 500:
        return ErrorCategory.TRANSIENT

    return ErrorCategory.UNKNOWN


def is_network_error(exc: BaseException) -> bool:
    """
    Check if exception is a network I/O failure worth retrying.

    Cancellation is never a network error, even though it can surface
    from inside a socket read.
    """
    if isinstance(exc, asyncio.CancelledError):
        return False
    return isinstance(exc, NETWORK_ERROR_TYPES)


def classify_exception(exc: Exception) -> ErrorCategory:
    """Classify an exception into error category."""
    if isinstance(exc, VaultError):
        return exc.category

    if is_network_error(exc):
        return ErrorCategory.TRANSIENT

    if isinstance(exc, aiohttp.ClientResponseError):
        return classify_http_status(exc.status)

    if isinstance(exc, (ValueError, TypeError, KeyError, AttributeError)):
        return ErrorCategory.PERMANENT

    return ErrorCategory.UNKNOWN
