"""
Core library: Reusable, infrastructure-agnostic components.

Shared building blocks for the vault client; nothing in here knows about
tokenization endpoints or payload shapes.

Modules:
    resilience  - Retry with exponential backoff and 401 token refresh
    logging     - Structured JSON logging with context propagation
    errors      - Error classification and exception hierarchy

Design Principles:
    - All modules are independently testable
    - Async-first where applicable
    - Type hints throughout
"""

from .types import ErrorCategory, TokenProvider

__version__ = "0.1.0"

__all__ = [
    "ErrorCategory",
    "TokenProvider",
]
