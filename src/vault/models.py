"""
Wire schemas for the tokenization and auth endpoints.

Field names are snake_case in Python and camelCase on the wire. Every model
accepts either spelling on input (populate_by_name) and serializes with the
wire aliases through ``to_wire()``.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, Field


class WireModel(BaseModel):
    """Base for request/response bodies exchanged with the vault service."""

    model_config = {
        "populate_by_name": True,  # Allow both alias and field name
        "extra": "ignore",
    }

    def to_wire(self) -> dict[str, Any]:
        """Serialize to a JSON-ready dict using camelCase aliases."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_wire_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


# =============================================================================
# Single value
# =============================================================================


class TokenizeRequest(WireModel):
    value: str = Field(..., description="Sensitive value to tokenize")


class TokenizeResponse(WireModel):
    token: str = Field(..., description="Format-preserving token for the value")
    exists: bool = Field(
        default=False, description="Token already existed in the vault"
    )
    newly_created: bool = Field(
        default=False,
        description="Token was minted by this call",
        alias="newlyCreated",
    )
    data_type: str | None = Field(
        default=None, description="Declared data type of the value", alias="dataType"
    )


class DetokenizeRequest(WireModel):
    token: str = Field(..., description="Token to resolve")


class DetokenizeResponse(WireModel):
    value: str | None = Field(
        default=None, description="Original value, or None when the token is unknown"
    )
    exists: bool = Field(default=False, description="Token is known to the vault")
    data_type: str | None = Field(default=None, alias="dataType")


# =============================================================================
# Batch
# =============================================================================


class BatchTokenizeRequest(WireModel):
    values: list[str] = Field(..., description="Values to tokenize, in order")


class BatchTokenItem(WireModel):
    original_value: str = Field(..., alias="originalValue")
    token: str
    exists: bool = False
    newly_created: bool = Field(default=False, alias="newlyCreated")
    data_type: str | None = Field(default=None, alias="dataType")


class BatchTokenizeSummary(WireModel):
    processed_count: int = Field(default=0, alias="processedCount")
    existing_count: int = Field(default=0, alias="existingCount")
    newly_created_count: int = Field(default=0, alias="newlyCreatedCount")

    @classmethod
    def from_items(cls, items: list[BatchTokenItem]) -> "BatchTokenizeSummary":
        """Recompute counters from an item list."""
        return cls(
            processed_count=len(items),
            existing_count=sum(1 for i in items if i.exists),
            newly_created_count=sum(1 for i in items if i.newly_created),
        )


class BatchTokenizeResponse(WireModel):
    results: list[BatchTokenItem] = Field(default_factory=list)
    summary: BatchTokenizeSummary = Field(default_factory=BatchTokenizeSummary)


class BatchDetokenizeRequest(WireModel):
    tokens: list[str] = Field(..., description="Tokens to resolve, in order")


class BatchDetokenItem(WireModel):
    token: str
    value: str | None = None
    exists: bool = False
    data_type: str | None = Field(default=None, alias="dataType")


class BatchDetokenizeSummary(WireModel):
    processed_count: int = Field(default=0, alias="processedCount")
    found_count: int = Field(default=0, alias="foundCount")
    not_found_count: int = Field(default=0, alias="notFoundCount")

    @classmethod
    def from_items(cls, items: list[BatchDetokenItem]) -> "BatchDetokenizeSummary":
        """Recompute counters from an item list."""
        found = sum(1 for i in items if i.exists)
        return cls(
            processed_count=len(items),
            found_count=found,
            not_found_count=len(items) - found,
        )


class BatchDetokenizeResponse(WireModel):
    results: list[BatchDetokenItem] = Field(default_factory=list)
    summary: BatchDetokenizeSummary = Field(default_factory=BatchDetokenizeSummary)


# =============================================================================
# Encrypted envelope
# =============================================================================


class EncryptedRequest(WireModel):
    """Opaque request envelope: AES-GCM ciphertext plus session material."""

    payload: str = Field(..., alias="itp")
    session_key: str | None = Field(default=None, alias="itk")
    iv: str = Field(..., alias="itv")


class EncryptedResponse(WireModel):
    payload: str = Field(..., alias="itp")
    iv: str = Field(..., alias="itv")


# =============================================================================
# Auth
# =============================================================================


class AuthTokenResponse(BaseModel):
    """
    Client-credentials token response.

    Accepts both the OAuth2 snake_case keys and camelCase keys.
    """

    access_token: str = Field(
        ..., validation_alias=AliasChoices("access_token", "accessToken")
    )
    expires_in: int = Field(
        default=300, validation_alias=AliasChoices("expires_in", "expiresIn")
    )
    refresh_expires_in: int | None = Field(
        default=None,
        validation_alias=AliasChoices("refresh_expires_in", "refreshExpiresIn"),
    )
    token_type: str = Field(
        default="Bearer", validation_alias=AliasChoices("token_type", "tokenType")
    )
    scope: str | None = None


__all__ = [
    "WireModel",
    "TokenizeRequest",
    "TokenizeResponse",
    "DetokenizeRequest",
    "DetokenizeResponse",
    "BatchTokenizeRequest",
    "BatchTokenItem",
    "BatchTokenizeSummary",
    "BatchTokenizeResponse",
    "BatchDetokenizeRequest",
    "BatchDetokenItem",
    "BatchDetokenizeSummary",
    "BatchDetokenizeResponse",
    "EncryptedRequest",
    "EncryptedResponse",
    "AuthTokenResponse",
]
