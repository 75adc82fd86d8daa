"""Single-value tokenize and detokenize operations."""

from vault.models import (
    DetokenizeRequest,
    DetokenizeResponse,
    TokenizeRequest,
    TokenizeResponse,
)
from vault.operations.base import BaseTokenOperation
from vault.states import CacheCheckResult, CompleteFromCache, NothingFromCache
from vault.transport import ApiResponse


class SingleTokenizeOperation(BaseTokenOperation[TokenizeRequest, TokenizeResponse]):
    operation_type = "Single Tokenize"
    response_model = TokenizeResponse

    def check_cache(self, request: TokenizeRequest) -> CacheCheckResult:
        hit = self._cache.get_token_from_cache(request.value)
        if hit is None:
            return NothingFromCache(original_request=request)
        return CompleteFromCache(
            original_request=request,
            result=TokenizeResponse(
                token=hit.token,
                exists=True,
                newly_created=False,
                data_type=hit.data_type,
            ),
        )

    async def make_api_call(
        self, request: TokenizeRequest, access_token: str
    ) -> ApiResponse:
        return await self._strategy.tokenize(self._api, access_token, request)

    def update_cache(
        self,
        request: TokenizeRequest,
        result: TokenizeResponse,
        cache_result: CacheCheckResult,
    ) -> None:
        self._cache.store_token_in_cache(request.value, result.token, result.data_type)


class SingleDetokenizeOperation(
    BaseTokenOperation[DetokenizeRequest, DetokenizeResponse]
):
    operation_type = "Single Detokenize"
    response_model = DetokenizeResponse

    def check_cache(self, request: DetokenizeRequest) -> CacheCheckResult:
        hit = self._cache.get_value_from_cache(request.token)
        if hit is None:
            return NothingFromCache(original_request=request)
        return CompleteFromCache(
            original_request=request,
            result=DetokenizeResponse(
                value=hit.value,
                exists=True,
                data_type=hit.data_type,
            ),
        )

    async def make_api_call(
        self, request: DetokenizeRequest, access_token: str
    ) -> ApiResponse:
        return await self._strategy.detokenize(self._api, access_token, request)

    def update_cache(
        self,
        request: DetokenizeRequest,
        result: DetokenizeResponse,
        cache_result: CacheCheckResult,
    ) -> None:
        # Unknown tokens are never cached
        if result.exists and result.value is not None:
            self._cache.store_value_in_cache(
                request.token, result.value, result.data_type
            )


__all__ = ["SingleTokenizeOperation", "SingleDetokenizeOperation"]
