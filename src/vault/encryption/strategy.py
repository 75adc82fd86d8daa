"""
Transport strategies: plain, or encrypted with fallback to plain.

Fallback cascade for WithEncryptionStrategy, checked in order:
    1. Encryption permanently disabled on this instance, or the manager is
       disabled: plain call.
    2. Encrypting the request fails: plain call, this time only.
    3. The encrypted call answers 419 (or raises HttpStatusError(419)):
       encryption is disabled for the lifetime of this instance and the
       call is repeated in plain.
    4. Anything else from the encrypted call is passed through unchanged.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, TypeVar

from pydantic import ValidationError

from core.errors.exceptions import HttpStatusError
from vault.encryption.manager import (
    DecryptionSuccess,
    EncryptionManager,
    EncryptionSuccess,
)
from vault.models import (
    BatchDetokenizeRequest,
    BatchTokenizeRequest,
    DetokenizeRequest,
    EncryptedRequest,
    EncryptedResponse,
    TokenizeRequest,
    WireModel,
)
from vault.transport import (
    BATCH_DETOKENIZE,
    BATCH_TOKENIZE,
    DETOKENIZE,
    TOKENIZE,
    ApiResponse,
    VaultApiClient,
    VaultEndpoint,
)

logger = logging.getLogger(__name__)

# Server cannot decrypt the envelope
ENCRYPTION_REJECTED_STATUS = 419

M = TypeVar("M", bound=WireModel)


class EncryptionStrategy(ABC):
    """How a request body travels to the vault."""

    @property
    def encrypts(self) -> bool:
        """True when responses may arrive as encrypted envelopes."""
        return False

    @abstractmethod
    async def send(
        self,
        api: VaultApiClient,
        endpoint: VaultEndpoint,
        access_token: str,
        request: WireModel,
    ) -> ApiResponse:
        ...

    async def tokenize(
        self, api: VaultApiClient, access_token: str, request: TokenizeRequest
    ) -> ApiResponse:
        return await self.send(api, TOKENIZE, access_token, request)

    async def detokenize(
        self, api: VaultApiClient, access_token: str, request: DetokenizeRequest
    ) -> ApiResponse:
        return await self.send(api, DETOKENIZE, access_token, request)

    async def batch_tokenize(
        self, api: VaultApiClient, access_token: str, request: BatchTokenizeRequest
    ) -> ApiResponse:
        return await self.send(api, BATCH_TOKENIZE, access_token, request)

    async def batch_detokenize(
        self, api: VaultApiClient, access_token: str, request: BatchDetokenizeRequest
    ) -> ApiResponse:
        return await self.send(api, BATCH_DETOKENIZE, access_token, request)

    def decrypt_response(
        self, encrypted: EncryptedResponse, model_cls: type[M]
    ) -> Optional[M]:
        """Plain transport has nothing to decrypt."""
        return None


class NoEncryptionStrategy(EncryptionStrategy):
    """Sends the request body as plain JSON."""

    async def send(
        self,
        api: VaultApiClient,
        endpoint: VaultEndpoint,
        access_token: str,
        request: WireModel,
    ) -> ApiResponse:
        logger.debug(
            "Making non-encrypted %s call",
            endpoint.name,
            extra={"api_endpoint": endpoint.name, "encrypted": False},
        )
        return await api.post(endpoint, access_token, request)


class WithEncryptionStrategy(EncryptionStrategy):
    """Encrypts the request body and falls back to plain when it must."""

    def __init__(
        self,
        encryption_manager: EncryptionManager,
        fallback: NoEncryptionStrategy | None = None,
    ):
        self._encryption_manager = encryption_manager
        self._fallback = fallback or NoEncryptionStrategy()
        self._encryption_disabled_due_to_failure = False

    @property
    def encrypts(self) -> bool:
        return True

    @property
    def encryption_disabled_due_to_failure(self) -> bool:
        return self._encryption_disabled_due_to_failure

    def _disable_encryption(self, endpoint: VaultEndpoint) -> None:
        self._encryption_disabled_due_to_failure = True
        logger.warning(
            "Server rejected encrypted payload, disabling encryption",
            extra={
                "api_endpoint": endpoint.name,
                "http_status": ENCRYPTION_REJECTED_STATUS,
            },
        )

    def _create_encrypted_request(self, request: WireModel) -> EncryptedRequest | None:
        result = self._encryption_manager.encrypt(request.to_wire_json())
        if not isinstance(result, EncryptionSuccess):
            logger.error("Request encryption failed: %s", result.message)
            return None
        return EncryptedRequest(
            payload=result.encrypted_payload,
            session_key=result.session_key,
            iv=result.iv,
        )

    async def send(
        self,
        api: VaultApiClient,
        endpoint: VaultEndpoint,
        access_token: str,
        request: WireModel,
    ) -> ApiResponse:
        if (
            self._encryption_disabled_due_to_failure
            or not self._encryption_manager.is_enabled()
        ):
            logger.debug(
                "Encryption is disabled or failed, falling back to plain %s",
                endpoint.name,
            )
            return await self._fallback.send(api, endpoint, access_token, request)

        encrypted_request = self._create_encrypted_request(request)
        if encrypted_request is None:
            return await self._fallback.send(api, endpoint, access_token, request)

        logger.debug(
            "Making encrypted %s call",
            endpoint.name,
            extra={"api_endpoint": endpoint.name, "encrypted": True},
        )
        try:
            response = await api.post(
                endpoint, access_token, encrypted_request, encrypted=True
            )
        except HttpStatusError as e:
            if e.status != ENCRYPTION_REJECTED_STATUS:
                raise
            self._disable_encryption(endpoint)
            return await self._fallback.send(api, endpoint, access_token, request)

        if response.status == ENCRYPTION_REJECTED_STATUS:
            self._disable_encryption(endpoint)
            return await self._fallback.send(api, endpoint, access_token, request)

        return response

    def decrypt_response(
        self, encrypted: EncryptedResponse, model_cls: type[M]
    ) -> Optional[M]:
        """
        Decrypt an envelope and parse it as model_cls.

        Returns:
            The parsed model, or None on decrypt or parse failure
        """
        result = self._encryption_manager.decrypt(encrypted.payload, encrypted.iv)
        if not isinstance(result, DecryptionSuccess):
            logger.error("Response decryption failed: %s", result.message)
            return None
        try:
            return model_cls.model_validate_json(result.data)
        except ValidationError as e:
            logger.error(
                "Decrypted response did not match %s",
                model_cls.__name__,
                extra={"error_type": type(e).__name__},
            )
            return None


def create_encryption_strategy(
    encryption_manager: EncryptionManager,
) -> EncryptionStrategy:
    """Encrypted strategy when the manager is enabled, plain otherwise."""
    if encryption_manager.is_enabled():
        return WithEncryptionStrategy(encryption_manager, NoEncryptionStrategy())
    return NoEncryptionStrategy()


__all__ = [
    "EncryptionStrategy",
    "NoEncryptionStrategy",
    "WithEncryptionStrategy",
    "create_encryption_strategy",
    "ENCRYPTION_REJECTED_STATUS",
]
