"""
Retry handler with 401 token refresh and exponential backoff.

Decisions are made per attempt from the response status or the raised
exception:
- 401: refresh the bearer token and retry immediately (no sleep)
- 429 / 5xx: sleep initial_delay * 2**attempt, then retry
- Network I/O errors: same backoff; re-raised once retries run out
- Raised HttpStatusError: handled like its status, re-raised when exhausted
- Anything else: returned or raised as-is

The handler never inspects bodies, so it works with any response object
that exposes an integer ``status``.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol, TypeVar

from core.errors.exceptions import (
    HttpStatusError,
    classify_exception,
    classify_http_status,
)
from core.types import ErrorCategory, TokenProvider

logger = logging.getLogger(__name__)


class StatusResponse(Protocol):
    status: int


R = TypeVar("R", bound=StatusResponse)

SleepFunc = Callable[[float], Awaitable[None]]


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    # Extra attempts after the first one
    max_retries: int = 1
    initial_delay_ms: int = 1000

    def __post_init__(self):
        """Ensure proper types from YAML/env vars."""
        self.max_retries = int(self.max_retries)
        self.initial_delay_ms = int(self.initial_delay_ms)
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.initial_delay_ms < 0:
            raise ValueError(
                f"initial_delay_ms must be >= 0, got {self.initial_delay_ms}"
            )

    def get_delay(self, attempt: int) -> float:
        """
        Backoff delay before the given retry.

        Args:
            attempt: 1-indexed number of the upcoming retry

        Returns:
            Delay in seconds
        """
        return self.initial_delay_ms * (2**attempt) / 1000.0


DEFAULT_RETRY = RetryConfig()


def is_backoff_status(status: int) -> bool:
    """True for statuses retried with backoff (429 and every 5xx)."""
    return classify_http_status(status) == ErrorCategory.TRANSIENT


class RetryHandler:
    """
    Executes an API call with token refresh and backoff.

    The call is a zero-argument coroutine function so that each attempt
    re-reads the current access token.

    Usage:
        handler = RetryHandler(auth_manager, RetryConfig(max_retries=2))
        response = await handler.execute_with_retry(lambda: api.tokenize(...))
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        config: RetryConfig | None = None,
        sleep: SleepFunc | None = None,
    ):
        self._token_provider = token_provider
        self.config = config or DEFAULT_RETRY
        self._sleep = sleep or asyncio.sleep

    @property
    def max_retries(self) -> int:
        return self.config.max_retries

    async def execute_with_retry(self, call: Callable[[], Awaitable[R]]) -> R:
        """
        Run call, retrying on 401, 429, 5xx and network errors.

        Returns:
            The first non-retryable response, or the last response once
            retries are exhausted

        Raises:
            Exception: Last transient error (network or raised 401/429/5xx)
                once retries are exhausted, any other error immediately,
                or a token refresh failure
        """
        attempt = 0
        while True:
            try:
                response = await call()
            except Exception as e:
                can_retry = attempt < self.max_retries
                if (
                    isinstance(e, HttpStatusError)
                    and e.should_refresh_auth
                    and can_retry
                ):
                    attempt += 1
                    await self._refresh(attempt)
                    continue
                if classify_exception(e) != ErrorCategory.TRANSIENT:
                    raise
                if not can_retry:
                    logger.error(
                        "Transient error, retries exhausted: %s",
                        type(e).__name__,
                        extra={
                            "attempt": attempt + 1,
                            "max_retries": self.max_retries,
                            "error_type": type(e).__name__,
                            "error_message": str(e)[:200],
                        },
                    )
                    raise
                attempt += 1
                await self._backoff(
                    attempt, reason=type(e).__name__, status=getattr(e, "status", None)
                )
                continue

            status = response.status

            if status == 401 and attempt < self.max_retries:
                attempt += 1
                await self._refresh(attempt)
                continue

            if is_backoff_status(status) and attempt < self.max_retries:
                attempt += 1
                await self._backoff(attempt, reason=f"HTTP {status}", status=status)
                continue

            if status == 401 or is_backoff_status(status):
                logger.warning(
                    "Retries exhausted with HTTP %s",
                    status,
                    extra={
                        "http_status": status,
                        "attempt": attempt + 1,
                        "max_retries": self.max_retries,
                    },
                )
            return response

    async def _refresh(self, attempt: int) -> None:
        logger.info(
            "Received 401, refreshing access token",
            extra={"attempt": attempt, "max_retries": self.max_retries},
        )
        await self._token_provider.refresh_access_token()

    async def _backoff(
        self, attempt: int, reason: str, status: int | None = None
    ) -> None:
        delay = self.config.get_delay(attempt)
        logger.warning(
            "Retryable failure (%s), retrying in %.2fs",
            reason,
            delay,
            extra={
                "attempt": attempt,
                "max_retries": self.max_retries,
                "delay_seconds": round(delay, 2),
                "http_status": status,
            },
        )
        await self._sleep(delay)


__all__ = [
    "RetryConfig",
    "RetryHandler",
    "DEFAULT_RETRY",
    "is_backoff_status",
]
