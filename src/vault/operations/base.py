"""
Template for a cache-aware, retried, optionally encrypted vault call.

Every operation runs the same steps:
    1. validate_request   - raises before any I/O
    2. check_cache        - CompleteFromCache short-circuits with no auth and no network
    3. remote call        - RetryHandler around strategy + fresh access token
    4. process_response   - decrypt if needed, classify, merge cached items
    5. update_cache       - freshly fetched items only, on success only

Subclasses fill in the hooks; they never re-implement the sequence.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from core.logging.context_managers import OperationContext
from core.logging.utilities import log_exception
from core.resilience.retry import RetryHandler
from vault.auth.manager import AuthTokenManager
from vault.cache.manager import CacheManager
from vault.encryption.strategy import EncryptionStrategy
from vault.models import EncryptedResponse, WireModel
from vault.results import Error, RepoResult, Success
from vault.states import (
    CacheCheckResult,
    CompleteFromCache,
    PartialFromCache,
)
from vault.transport import ApiResponse, VaultApiClient

logger = logging.getLogger(__name__)

Req = TypeVar("Req", bound=WireModel)
Res = TypeVar("Res", bound=WireModel)

STRATEGY_MISMATCH_MESSAGE = "Encryption strategy mismatch"
DECRYPT_FAILED_MESSAGE = "Failed to decrypt response"
UNKNOWN_ERROR_BODY = "Unknown error"


class BaseTokenOperation(ABC, Generic[Req, Res]):
    """Shared pipeline for the four tokenization operations."""

    operation_type: str = ""
    response_model: type[WireModel]

    def __init__(
        self,
        auth_manager: AuthTokenManager,
        api: VaultApiClient,
        strategy: EncryptionStrategy,
        retry_handler: RetryHandler,
        cache_manager: CacheManager,
    ):
        self._auth = auth_manager
        self._api = api
        self._strategy = strategy
        self._retry_handler = retry_handler
        self._cache = cache_manager

    @property
    def strategy(self) -> EncryptionStrategy:
        return self._strategy

    async def execute(self, request: Req) -> RepoResult:
        """
        Run the operation.

        Returns:
            Success with the typed response, or Error with a message

        Raises:
            BatchValidationError: Request is outside the endpoint's limits
        """
        self.validate_request(request)

        with OperationContext(self.operation_type, logger):
            cache_result = self.check_cache(request)

            if isinstance(cache_result, CompleteFromCache):
                logger.debug(
                    "All results found in cache for %s", self.operation_type
                )
                return Success(cache_result.result)

            uncached_request = cache_result.uncached_request

            async def attempt() -> ApiResponse:
                access_token = await self._auth.get_access_token()
                return await self.make_api_call(uncached_request, access_token)

            try:
                response = await self._retry_handler.execute_with_retry(attempt)
                result = self.process_response(response, cache_result)
                if isinstance(result, Success):
                    self.update_cache(request, result.payload, cache_result)
            except Exception as e:
                log_exception(
                    logger,
                    e,
                    f"Error during {self.operation_type}",
                    operation=self.operation_type,
                )
                return Error(f"Error during {self.operation_type}: {e}")

            if isinstance(result, Error):
                logger.error(result.message, extra={"operation": self.operation_type})
            else:
                logger.debug("%s operation completed successfully", self.operation_type)
            return result

    # =========================================================================
    # Hooks
    # =========================================================================

    def validate_request(self, request: Req) -> None:
        """Raise BatchValidationError if the request cannot be sent."""
        return None

    @abstractmethod
    def check_cache(self, request: Req) -> CacheCheckResult:
        ...

    @abstractmethod
    async def make_api_call(self, request: Req, access_token: str) -> ApiResponse:
        ...

    def build_result(self, body: Res, cache_result: CacheCheckResult) -> Res:
        """Combine the remote body with cached items; identity by default."""
        return body

    @abstractmethod
    def update_cache(
        self, request: Req, result: Res, cache_result: CacheCheckResult
    ) -> None:
        ...

    # =========================================================================
    # Response handling
    # =========================================================================

    def process_response(
        self, response: ApiResponse, cache_result: CacheCheckResult
    ) -> RepoResult:
        body: Any = response.body

        if isinstance(body, EncryptedResponse):
            if not self._strategy.encrypts:
                return Error(STRATEGY_MISMATCH_MESSAGE)
            body = self._strategy.decrypt_response(body, self.response_model)
            if body is None:
                return Error(DECRYPT_FAILED_MESSAGE)

        if 200 <= response.status < 300 and isinstance(body, self.response_model):
            return Success(self.build_result(body, cache_result))

        return Error(self.error_message(response))

    def error_message(self, response: ApiResponse) -> str:
        error_body = response.error_body or UNKNOWN_ERROR_BODY
        return f"{self.operation_type} failed: {response.status} - {error_body}"

    @staticmethod
    def cached_items_of(cache_result: CacheCheckResult) -> list:
        if isinstance(cache_result, PartialFromCache):
            return list(cache_result.cached_items)
        return []


__all__ = [
    "BaseTokenOperation",
    "STRATEGY_MISMATCH_MESSAGE",
    "DECRYPT_FAILED_MESSAGE",
]
