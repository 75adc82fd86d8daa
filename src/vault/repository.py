"""
Token repository: owns the eight operations and the shared collaborators.

Each kind (single/batch, tokenize/detokenize) exists in a plain and an
encrypted flavour. Operations are built on first use. Every encrypted
operation carries its own WithEncryptionStrategy, so a 419 fallback on one
endpoint does not switch off encryption for the others.
"""

import logging
from typing import Optional

from core.resilience.retry import RetryHandler
from vault.auth.manager import AuthTokenManager
from vault.cache.manager import CacheManager
from vault.encryption.manager import EncryptionManager
from vault.encryption.strategy import (
    EncryptionStrategy,
    NoEncryptionStrategy,
    create_encryption_strategy,
)
from vault.models import (
    BatchDetokenizeRequest,
    BatchTokenizeRequest,
    DetokenizeRequest,
    TokenizeRequest,
)
from vault.operations import (
    BaseTokenOperation,
    BatchDetokenizeOperation,
    BatchTokenizeOperation,
    SingleDetokenizeOperation,
    SingleTokenizeOperation,
)
from vault.results import RepoResult
from vault.transport import VaultApiClient

logger = logging.getLogger(__name__)


class TokenRepository:
    """
    Entry point for executing tokenization operations.

    Usage:
        repo = TokenRepository(auth, api, encryption, cache, retry)
        result = await repo.tokenize_with_encryption("4111111111111111")
        if result.is_success:
            print(result.payload.token)
    """

    def __init__(
        self,
        auth_manager: AuthTokenManager,
        api: VaultApiClient,
        encryption_manager: EncryptionManager,
        cache_manager: CacheManager,
        retry_handler: RetryHandler,
    ):
        self._auth = auth_manager
        self._api = api
        self._encryption_manager = encryption_manager
        self._cache = cache_manager
        self._retry_handler = retry_handler
        self._operations: dict[tuple[str, bool], BaseTokenOperation] = {}

    @property
    def cache_manager(self) -> CacheManager:
        return self._cache

    def _new_strategy(self, encrypted: bool) -> EncryptionStrategy:
        if encrypted:
            return create_encryption_strategy(self._encryption_manager)
        return NoEncryptionStrategy()

    def _operation(
        self, factory: type[BaseTokenOperation], encrypted: bool
    ) -> BaseTokenOperation:
        key = (factory.__name__, encrypted)
        operation: Optional[BaseTokenOperation] = self._operations.get(key)
        if operation is None:
            operation = factory(
                self._auth,
                self._api,
                self._new_strategy(encrypted),
                self._retry_handler,
                self._cache,
            )
            self._operations[key] = operation
            logger.debug(
                "Created %s operation",
                factory.operation_type,
                extra={"encrypted": encrypted},
            )
        return operation

    # =========================================================================
    # Plain transport
    # =========================================================================

    async def tokenize(self, value: str) -> RepoResult:
        op = self._operation(SingleTokenizeOperation, encrypted=False)
        return await op.execute(TokenizeRequest(value=value))

    async def detokenize(self, token: str) -> RepoResult:
        op = self._operation(SingleDetokenizeOperation, encrypted=False)
        return await op.execute(DetokenizeRequest(token=token))

    async def batch_tokenize(self, values: list[str]) -> RepoResult:
        op = self._operation(BatchTokenizeOperation, encrypted=False)
        return await op.execute(BatchTokenizeRequest(values=list(values)))

    async def batch_detokenize(self, tokens: list[str]) -> RepoResult:
        op = self._operation(BatchDetokenizeOperation, encrypted=False)
        return await op.execute(BatchDetokenizeRequest(tokens=list(tokens)))

    # =========================================================================
    # Encrypted transport (falls back to plain on 419 or local failure)
    # =========================================================================

    async def tokenize_with_encryption(self, value: str) -> RepoResult:
        op = self._operation(SingleTokenizeOperation, encrypted=True)
        return await op.execute(TokenizeRequest(value=value))

    async def detokenize_with_encryption(self, token: str) -> RepoResult:
        op = self._operation(SingleDetokenizeOperation, encrypted=True)
        return await op.execute(DetokenizeRequest(token=token))

    async def batch_tokenize_with_encryption(self, values: list[str]) -> RepoResult:
        op = self._operation(BatchTokenizeOperation, encrypted=True)
        return await op.execute(BatchTokenizeRequest(values=list(values)))

    async def batch_detokenize_with_encryption(self, tokens: list[str]) -> RepoResult:
        op = self._operation(BatchDetokenizeOperation, encrypted=True)
        return await op.execute(BatchDetokenizeRequest(tokens=list(tokens)))

    def clear_cache(self) -> None:
        self._cache.clear()


__all__ = ["TokenRepository"]
