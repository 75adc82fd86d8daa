"""Context managers for structured logging."""

import logging
import time
from typing import Dict, Optional

from core.logging.context import (
    generate_request_id,
    get_log_context,
    set_log_context,
)


class LogContext:
    """
    Context manager for temporary log context.

    Usage:
        with LogContext(operation="Batch Tokenize"):
            # All logs in this block carry operation and request_id
            await do_work()

    A fresh request_id is generated unless one is passed. The previous
    context is restored on exit, so nested contexts behave.
    """

    def __init__(
        self,
        operation: Optional[str] = None,
        request_id: Optional[str] = None,
    ):
        self.new_context = {
            "operation": operation,
            "request_id": request_id or generate_request_id(),
        }
        self.old_context: Dict[str, str] = {}

    def __enter__(self) -> "LogContext":
        self.old_context = get_log_context()
        set_log_context(**self.new_context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        set_log_context(
            operation=self.old_context.get("operation", ""),
            request_id=self.old_context.get("request_id", ""),
        )
        return False

    @property
    def request_id(self) -> str:
        return self.new_context["request_id"]


class OperationContext(LogContext):
    """
    Log context that also records how long the block took.

    Usage:
        with OperationContext("Single Tokenize", logger) as ctx:
            result = await operation.execute(request)
        # ctx.duration_ms is set, and a debug line is emitted on exit
    """

    def __init__(self, operation: str, logger: logging.Logger):
        super().__init__(operation=operation)
        self.operation = operation
        self.logger = logger
        self.start_time: Optional[float] = None
        self.duration_ms: Optional[float] = None

    def __enter__(self) -> "OperationContext":
        super().__enter__()
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = (time.perf_counter() - self.start_time) * 1000
        self.logger.debug(
            "%s finished",
            self.operation,
            extra={
                "operation": self.operation,
                "duration_ms": round(self.duration_ms, 2),
            },
        )
        return super().__exit__(exc_type, exc_val, exc_tb)
