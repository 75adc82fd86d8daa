"""
Error classification and exception hierarchy.

Provides:
- ErrorCategory enum for classifying errors
- VaultError hierarchy for typed exceptions
- Classification utilities for retry decisions
"""

from core.errors.exceptions import (
    AuthenticationError,
    AuthError,
    BatchValidationError,
    ConfigurationError,
    # Enums
    ErrorCategory,
    HttpStatusError,
    PermanentError,
    # Base classes
    VaultError,
    # Classification utilities
    classify_exception,
    classify_http_status,
    is_network_error,
)

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "VaultError",
    "AuthError",
    "AuthenticationError",
    "PermanentError",
    "BatchValidationError",
    "ConfigurationError",
    "HttpStatusError",
    # Classification utilities
    "classify_http_status",
    "classify_exception",
    "is_network_error",
]
