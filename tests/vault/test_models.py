"""Tests for wire models, result types and cache states."""

import pytest
from pydantic import ValidationError

from vault.models import (
    AuthTokenResponse,
    BatchDetokenItem,
    BatchDetokenizeResponse,
    BatchDetokenizeSummary,
    BatchTokenItem,
    BatchTokenizeSummary,
    DetokenizeResponse,
    EncryptedRequest,
    TokenizeResponse,
)
from vault.results import Error, Success
from vault.states import NothingFromCache, PartialFromCache


class TestWireModels:
    def test_camel_case_input(self):
        resp = TokenizeResponse.model_validate(
            {"token": "t", "exists": False, "newlyCreated": True, "dataType": "ssn"}
        )
        assert resp.newly_created
        assert resp.data_type == "ssn"

    def test_snake_case_input(self):
        resp = TokenizeResponse(token="t", newly_created=True)
        assert resp.to_wire() == {
            "token": "t",
            "exists": False,
            "newlyCreated": True,
        }

    def test_unknown_fields_ignored(self):
        resp = DetokenizeResponse.model_validate({"value": "v", "exists": True, "x": 1})
        assert resp.value == "v"

    def test_missing_required_field(self):
        with pytest.raises(ValidationError):
            TokenizeResponse.model_validate({"exists": True})

    def test_encrypted_request_aliases(self):
        envelope = EncryptedRequest(payload="p", iv="i")
        assert envelope.to_wire() == {"itp": "p", "itv": "i"}

    def test_batch_detokenize_parses_nested(self):
        resp = BatchDetokenizeResponse.model_validate(
            {
                "results": [{"token": "t", "value": "v", "exists": True}],
                "summary": {"processedCount": 1, "foundCount": 1, "notFoundCount": 0},
            }
        )
        assert resp.results[0].value == "v"
        assert resp.summary.found_count == 1

    def test_auth_response_defaults(self):
        resp = AuthTokenResponse.model_validate({"access_token": "a"})
        assert resp.expires_in == 300
        assert resp.token_type == "Bearer"


class TestSummaries:
    def test_tokenize_summary_from_items(self):
        items = [
            BatchTokenItem(original_value="a", token="1", exists=True),
            BatchTokenItem(original_value="b", token="2", newly_created=True),
            BatchTokenItem(original_value="c", token="3", newly_created=True),
        ]
        summary = BatchTokenizeSummary.from_items(items)
        assert summary.processed_count == 3
        assert summary.existing_count == 1
        assert summary.newly_created_count == 2

    def test_detokenize_summary_from_items(self):
        items = [
            BatchDetokenItem(token="1", value="a", exists=True),
            BatchDetokenItem(token="2"),
        ]
        summary = BatchDetokenizeSummary.from_items(items)
        assert summary.found_count + summary.not_found_count == summary.processed_count == 2

    def test_empty(self):
        assert BatchTokenizeSummary.from_items([]).processed_count == 0


class TestResultsAndStates:
    def test_success_and_error(self):
        assert Success("x").is_success
        assert not Error("boom").is_success
        assert Error("boom").message == "boom"

    def test_nothing_from_cache_defaults_to_original(self):
        state = NothingFromCache(original_request="req")
        assert state.uncached_request == "req"

    def test_partial_keeps_both_sides(self):
        state = PartialFromCache(
            original_request="all", cached_items=[1], uncached_request="rest"
        )
        assert state.cached_items == [1]
        assert state.uncached_request == "rest"
