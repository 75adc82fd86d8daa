"""Tests for batch tokenize/detokenize operations."""

import pytest

from core.errors.exceptions import BatchValidationError
from core.resilience.retry import RetryHandler
from vault.cache.manager import CacheManager
from vault.cache.token_cache import TokenCache
from vault.encryption.strategy import NoEncryptionStrategy
from vault.models import (
    BatchDetokenItem,
    BatchDetokenizeRequest,
    BatchDetokenizeResponse,
    BatchDetokenizeSummary,
    BatchTokenItem,
    BatchTokenizeRequest,
    BatchTokenizeResponse,
    BatchTokenizeSummary,
)
from vault.operations.batch import (
    MAX_BATCH_DETOKENIZE_SIZE,
    MAX_BATCH_TOKENIZE_SIZE,
    BatchDetokenizeOperation,
    BatchTokenizeOperation,
)
from vault.results import Error
from vault.transport import BATCH_DETOKENIZE, BATCH_TOKENIZE, ApiResponse


def _token_items(values, newly_created=True):
    return [
        BatchTokenItem(
            original_value=v,
            token=f"tok-{v}",
            exists=not newly_created,
            newly_created=newly_created,
        )
        for v in values
    ]


def _tokenize_response(values, **kwargs):
    items = _token_items(values, **kwargs)
    # Stale remote summary; the merged result recomputes it
    return ApiResponse(
        status=200,
        body=BatchTokenizeResponse(
            results=items, summary=BatchTokenizeSummary(processed_count=999)
        ),
    )


class TestBatchTokenizeValidation:
    async def test_empty_batch_raises(self, make_operation, api):
        op = make_operation(BatchTokenizeOperation)
        with pytest.raises(BatchValidationError, match="contains no values"):
            await op.execute(BatchTokenizeRequest(values=[]))
        api.post.assert_not_awaited()

    async def test_over_limit_raises(self, make_operation, api):
        op = make_operation(BatchTokenizeOperation)
        values = [f"v{i}" for i in range(MAX_BATCH_TOKENIZE_SIZE + 1)]
        with pytest.raises(
            BatchValidationError, match="maximum limit of 1000 values"
        ):
            await op.execute(BatchTokenizeRequest(values=values))
        api.post.assert_not_awaited()

    async def test_limit_is_inclusive(self, make_operation, api):
        values = [f"v{i}" for i in range(MAX_BATCH_TOKENIZE_SIZE)]
        api.post.return_value = _tokenize_response(values)
        op = make_operation(BatchTokenizeOperation)

        result = await op.execute(BatchTokenizeRequest(values=values))

        assert result.is_success
        assert result.payload.summary.processed_count == 1000

    def test_validation_error_is_also_value_error(self):
        assert issubclass(BatchValidationError, ValueError)


class TestBatchTokenize:
    async def test_nothing_cached_sends_everything(self, make_operation, api):
        api.post.return_value = _tokenize_response(["a", "b"])
        op = make_operation(BatchTokenizeOperation)

        result = await op.execute(BatchTokenizeRequest(values=["a", "b"]))

        endpoint, _, body = api.post.call_args.args
        assert endpoint is BATCH_TOKENIZE
        assert body.values == ["a", "b"]
        assert result.payload.summary == BatchTokenizeSummary(
            processed_count=2, existing_count=0, newly_created_count=2
        )

    async def test_partial_cache_merges_cached_first(
        self, make_operation, api, token_cache
    ):
        token_cache.put("b", "tok-b-cached")
        token_cache.put("d", "tok-d-cached")
        api.post.return_value = _tokenize_response(["a", "c", "e"])
        op = make_operation(BatchTokenizeOperation)

        result = await op.execute(
            BatchTokenizeRequest(values=["a", "b", "c", "d", "e"])
        )

        assert api.post.call_args.args[2].values == ["a", "c", "e"]
        merged = result.payload.results
        assert [i.original_value for i in merged] == ["b", "d", "a", "c", "e"]
        assert merged[0].token == "tok-b-cached"
        summary = result.payload.summary
        assert summary.processed_count == len(merged) == 5
        assert summary.existing_count == 2
        assert summary.newly_created_count == 3
        assert summary.existing_count + summary.newly_created_count == summary.processed_count

    async def test_fresh_items_are_cached(self, make_operation, api, token_cache):
        token_cache.put("b", "tok-b-cached")
        api.post.return_value = _tokenize_response(["a"])
        op = make_operation(BatchTokenizeOperation)

        await op.execute(BatchTokenizeRequest(values=["a", "b"]))

        assert token_cache.get_token("a").paired == "tok-a"
        assert token_cache.get_token("b").paired == "tok-b-cached"
        assert len(token_cache) == 2

    async def test_all_cached_skips_network(self, make_operation, api, auth, token_cache):
        token_cache.put("a", "ta")
        token_cache.put("b", "tb")
        op = make_operation(BatchTokenizeOperation)

        result = await op.execute(BatchTokenizeRequest(values=["a", "b"]))

        assert [i.token for i in result.payload.results] == ["ta", "tb"]
        assert result.payload.summary == BatchTokenizeSummary(
            processed_count=2, existing_count=2, newly_created_count=0
        )
        api.post.assert_not_awaited()
        auth.get_access_token.assert_not_awaited()

    async def test_server_error_after_retries_is_error(
        self, make_operation, api, auth, sleep, token_cache
    ):
        api.post.return_value = ApiResponse(status=500, error_body="boom")
        op = make_operation(BatchTokenizeOperation, max_retries=2)

        result = await op.execute(BatchTokenizeRequest(values=["a"]))

        assert result == Error("Batch Tokenize failed: 500 - boom")
        assert api.post.await_count == 3
        assert sleep.delays == [2.0, 4.0]
        auth.refresh_access_token.assert_not_awaited()
        assert len(token_cache) == 0


class TestBatchDetokenize:
    async def test_validation(self, make_operation):
        op = make_operation(BatchDetokenizeOperation)
        with pytest.raises(BatchValidationError, match="contains no tokens"):
            await op.execute(BatchDetokenizeRequest(tokens=[]))
        with pytest.raises(
            BatchValidationError, match="maximum limit of 10000 tokens"
        ):
            await op.execute(
                BatchDetokenizeRequest(
                    tokens=["t"] * (MAX_BATCH_DETOKENIZE_SIZE + 1)
                )
            )

    async def test_limit_is_inclusive(self, make_operation, api):
        tokens = [f"t{i}" for i in range(MAX_BATCH_DETOKENIZE_SIZE)]
        api.post.return_value = ApiResponse(
            status=200,
            body=BatchDetokenizeResponse(
                results=[
                    BatchDetokenItem(token=t, value=f"v-{t}", exists=True)
                    for t in tokens
                ]
            ),
        )
        op = make_operation(BatchDetokenizeOperation)

        result = await op.execute(BatchDetokenizeRequest(tokens=tokens))

        assert result.is_success
        assert result.payload.summary.processed_count == 10000
        assert result.payload.summary.found_count == 10000
        assert len(api.post.call_args.args[2].tokens) == 10000

    async def test_partial_cache_merge_and_summary(
        self, make_operation, api, token_cache
    ):
        token_cache.put("value-1", "t1", "email")
        api.post.return_value = ApiResponse(
            status=200,
            body=BatchDetokenizeResponse(
                results=[
                    BatchDetokenItem(token="t2", value="value-2", exists=True),
                    BatchDetokenItem(token="t3", value=None, exists=False),
                ]
            ),
        )
        op = make_operation(BatchDetokenizeOperation)

        result = await op.execute(BatchDetokenizeRequest(tokens=["t1", "t2", "t3"]))

        endpoint, _, body = api.post.call_args.args
        assert endpoint is BATCH_DETOKENIZE
        assert body.tokens == ["t2", "t3"]
        assert [i.token for i in result.payload.results] == ["t1", "t2", "t3"]
        assert result.payload.results[0].data_type == "email"
        assert result.payload.summary == BatchDetokenizeSummary(
            processed_count=3, found_count=2, not_found_count=1
        )
        assert token_cache.get_value("t2").paired == "value-2"
        assert token_cache.get_value("t3") is None

    async def test_all_cached(self, make_operation, api, token_cache):
        token_cache.put("v", "t")
        op = make_operation(BatchDetokenizeOperation)

        result = await op.execute(BatchDetokenizeRequest(tokens=["t"]))

        assert result.payload.results[0].value == "v"
        api.post.assert_not_awaited()

    async def test_disabled_cache_sends_everything(self, auth, api, sleep):
        cache = TokenCache(enabled=False)
        cache.put("v", "t")
        api.post.return_value = ApiResponse(
            status=200,
            body=BatchDetokenizeResponse(
                results=[BatchDetokenItem(token="t", value="v", exists=True)]
            ),
        )
        op = BatchDetokenizeOperation(
            auth,
            api,
            NoEncryptionStrategy(),
            RetryHandler(auth, sleep=sleep),
            CacheManager(cache),
        )

        await op.execute(BatchDetokenizeRequest(tokens=["t"]))
        await op.execute(BatchDetokenizeRequest(tokens=["t"]))

        assert api.post.await_count == 2
        assert len(cache) == 0
