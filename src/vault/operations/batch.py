"""Batch tokenize and detokenize operations with partial cache hits."""

from core.errors.exceptions import BatchValidationError
from vault.models import (
    BatchDetokenizeRequest,
    BatchDetokenizeResponse,
    BatchDetokenizeSummary,
    BatchTokenizeRequest,
    BatchTokenizeResponse,
    BatchTokenizeSummary,
)
from vault.operations.base import BaseTokenOperation
from vault.states import (
    CacheCheckResult,
    CompleteFromCache,
    NothingFromCache,
    PartialFromCache,
)
from vault.transport import ApiResponse

MAX_BATCH_TOKENIZE_SIZE = 1000
MAX_BATCH_DETOKENIZE_SIZE = 10000


class BatchTokenizeOperation(
    BaseTokenOperation[BatchTokenizeRequest, BatchTokenizeResponse]
):
    operation_type = "Batch Tokenize"
    response_model = BatchTokenizeResponse

    def validate_request(self, request: BatchTokenizeRequest) -> None:
        if not request.values:
            raise BatchValidationError("Batch tokenize request contains no values")
        if len(request.values) > MAX_BATCH_TOKENIZE_SIZE:
            raise BatchValidationError(
                f"Batch size exceeds the maximum limit of "
                f"{MAX_BATCH_TOKENIZE_SIZE} values",
                context={"batch_size": len(request.values)},
            )

    def check_cache(self, request: BatchTokenizeRequest) -> CacheCheckResult:
        partition = self._cache.get_batch_tokens_from_cache(request.values)

        if not partition.uncached:
            return CompleteFromCache(
                original_request=request,
                result=BatchTokenizeResponse(
                    results=partition.cached,
                    summary=BatchTokenizeSummary.from_items(partition.cached),
                ),
            )

        uncached_request = BatchTokenizeRequest(values=partition.uncached)
        if partition.cached:
            return PartialFromCache(
                original_request=request,
                cached_items=partition.cached,
                uncached_request=uncached_request,
            )
        return NothingFromCache(
            original_request=request, uncached_request=uncached_request
        )

    async def make_api_call(
        self, request: BatchTokenizeRequest, access_token: str
    ) -> ApiResponse:
        return await self._strategy.batch_tokenize(self._api, access_token, request)

    def build_result(
        self, body: BatchTokenizeResponse, cache_result: CacheCheckResult
    ) -> BatchTokenizeResponse:
        # Cached first, then remote; remote summary is ignored
        merged = self.cached_items_of(cache_result) + list(body.results)
        return BatchTokenizeResponse(
            results=merged,
            summary=BatchTokenizeSummary.from_items(merged),
        )

    def update_cache(
        self,
        request: BatchTokenizeRequest,
        result: BatchTokenizeResponse,
        cache_result: CacheCheckResult,
    ) -> None:
        fresh = result.results[len(self.cached_items_of(cache_result)):]
        self._cache.store_batch_tokens_in_cache(fresh)


class BatchDetokenizeOperation(
    BaseTokenOperation[BatchDetokenizeRequest, BatchDetokenizeResponse]
):
    operation_type = "Batch Detokenize"
    response_model = BatchDetokenizeResponse

    def validate_request(self, request: BatchDetokenizeRequest) -> None:
        if not request.tokens:
            raise BatchValidationError("Batch detokenize request contains no tokens")
        if len(request.tokens) > MAX_BATCH_DETOKENIZE_SIZE:
            raise BatchValidationError(
                f"Batch size exceeds the maximum limit of "
                f"{MAX_BATCH_DETOKENIZE_SIZE} tokens",
                context={"batch_size": len(request.tokens)},
            )

    def check_cache(self, request: BatchDetokenizeRequest) -> CacheCheckResult:
        partition = self._cache.get_batch_values_from_cache(request.tokens)

        if not partition.uncached:
            return CompleteFromCache(
                original_request=request,
                result=BatchDetokenizeResponse(
                    results=partition.cached,
                    summary=BatchDetokenizeSummary.from_items(partition.cached),
                ),
            )

        uncached_request = BatchDetokenizeRequest(tokens=partition.uncached)
        if partition.cached:
            return PartialFromCache(
                original_request=request,
                cached_items=partition.cached,
                uncached_request=uncached_request,
            )
        return NothingFromCache(
            original_request=request, uncached_request=uncached_request
        )

    async def make_api_call(
        self, request: BatchDetokenizeRequest, access_token: str
    ) -> ApiResponse:
        return await self._strategy.batch_detokenize(self._api, access_token, request)

    def build_result(
        self, body: BatchDetokenizeResponse, cache_result: CacheCheckResult
    ) -> BatchDetokenizeResponse:
        merged = self.cached_items_of(cache_result) + list(body.results)
        return BatchDetokenizeResponse(
            results=merged,
            summary=BatchDetokenizeSummary.from_items(merged),
        )

    def update_cache(
        self,
        request: BatchDetokenizeRequest,
        result: BatchDetokenizeResponse,
        cache_result: CacheCheckResult,
    ) -> None:
        fresh = result.results[len(self.cached_items_of(cache_result)):]
        self._cache.store_batch_values_in_cache(fresh)


__all__ = [
    "BatchTokenizeOperation",
    "BatchDetokenizeOperation",
    "MAX_BATCH_TOKENIZE_SIZE",
    "MAX_BATCH_DETOKENIZE_SIZE",
]
