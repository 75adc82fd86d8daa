"""Context variables for structured logging."""

import secrets
from contextvars import ContextVar
from typing import Dict, Optional

_operation: ContextVar[str] = ContextVar("operation", default="")
_request_id: ContextVar[str] = ContextVar("request_id", default="")


def set_log_context(
    operation: Optional[str] = None,
    request_id: Optional[str] = None,
) -> None:
    if operation is not None:
        _operation.set(operation)
    if request_id is not None:
        _request_id.set(request_id)


def get_log_context() -> Dict[str, str]:
    return {
        "operation": _operation.get(),
        "request_id": _request_id.get(),
    }


def clear_log_context() -> None:
    _operation.set("")
    _request_id.set("")


def generate_request_id() -> str:
    """
    Generate a short request identifier.

    Format: r-XXXXXXXX where X is random hex.
    """
    return f"r-{secrets.token_hex(4)}"
