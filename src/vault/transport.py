"""Vault tokenization REST client."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import aiohttp
from pydantic import ValidationError

from core.errors.exceptions import HttpStatusError
from core.logging.utilities import log_with_context
from vault.models import (
    BatchDetokenizeResponse,
    BatchTokenizeResponse,
    DetokenizeResponse,
    EncryptedResponse,
    TokenizeResponse,
    WireModel,
)

logger = logging.getLogger(__name__)

ENCRYPTED_HEADER = "X-Encrypted"

DEFAULT_API_TIMEOUT = aiohttp.ClientTimeout(total=15, connect=15, sock_read=15)

# Slow-call threshold for promoting the completion log to INFO
SLOW_REQUEST_SECONDS = 2.0


@dataclass(frozen=True)
class VaultEndpoint:
    """A tokenization endpoint and the model its 2xx body parses into."""

    name: str
    path: str
    response_model: type[WireModel]


TOKENIZE = VaultEndpoint("tokenize", "api/tokenization/getToken", TokenizeResponse)
DETOKENIZE = VaultEndpoint(
    "detokenize", "api/tokenization/getRawValue", DetokenizeResponse
)
BATCH_TOKENIZE = VaultEndpoint(
    "batch_tokenize", "api/tokenization/tokens/batch", BatchTokenizeResponse
)
BATCH_DETOKENIZE = VaultEndpoint(
    "batch_detokenize",
    "api/tokenization/tokens/values/batch",
    BatchDetokenizeResponse,
)


@dataclass(frozen=True)
class ApiResponse:
    """
    Outcome of one HTTP exchange.

    Attributes:
        status: HTTP status code
        body: Parsed model for 2xx responses (the endpoint's response model,
            or EncryptedResponse for encrypted calls), otherwise None
        error_body: Raw response text when body is None
    """

    status: int
    body: Any = None
    error_body: str | None = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300 and self.body is not None


class VaultApiClient:
    """
    Async client for the vault tokenization endpoints.

    Non-2xx responses are returned as ApiResponse values, never raised.
    Network failures (connection errors, timeouts) propagate unchanged so
    the retry layer can classify them.
    """

    def __init__(
        self,
        api_url: str,
        timeout: aiohttp.ClientTimeout | None = None,
        max_connections: int = 20,
        session: aiohttp.ClientSession | None = None,
        raise_for_status: bool = False,
    ):
        self.api_url = api_url.rstrip("/") if api_url else ""

        if not self.api_url:
            raise ValueError("VaultApiClient requires 'api_url'")

        if not self.api_url.startswith(("http://", "https://")):
            raise ValueError(
                f"VaultApiClient api_url must start with http:// or https://, "
                f"got: {self.api_url!r}"
            )

        self.timeout = timeout or DEFAULT_API_TIMEOUT
        self.max_connections = max_connections
        self.raise_for_status = raise_for_status
        self._session = session
        self._owns_session = session is None
        self._closed = False

        logger.debug(
            "VaultApiClient initialized",
            extra={"http_url": self.api_url},
        )

    async def __aenter__(self) -> "VaultApiClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._closed:
            raise RuntimeError("VaultApiClient is closed, cannot create new session")
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self.max_connections,
                limit_per_host=self.max_connections,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        self._closed = True
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            await asyncio.sleep(0)
        self._session = None

    def url_for(self, endpoint: VaultEndpoint) -> str:
        return f"{self.api_url}/{endpoint.path}"

    async def post(
        self,
        endpoint: VaultEndpoint,
        access_token: str,
        payload: WireModel,
        encrypted: bool = False,
    ) -> ApiResponse:
        """
        POST a JSON body to an endpoint.

        Args:
            endpoint: Target endpoint
            access_token: Bearer token for this attempt
            payload: Request body (plain request or EncryptedRequest)
            encrypted: Mark the body as an encrypted envelope

        Returns:
            ApiResponse with a parsed body on 2xx, raw error text otherwise

        Raises:
            HttpStatusError: Non-2xx response when raise_for_status is set
            aiohttp.ClientError, asyncio.TimeoutError: Network failures
        """
        session = await self._ensure_session()
        url = self.url_for(endpoint)

        headers = {"Authorization": f"Bearer {access_token}"}
        if encrypted:
            headers[ENCRYPTED_HEADER] = "true"

        start_time = asyncio.get_running_loop().time()
        try:
            async with session.post(
                url,
                json=payload.to_wire(),
                headers=headers,
                timeout=self.timeout,
            ) as response:
                text = await response.text()
                duration = asyncio.get_running_loop().time() - start_time
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            duration = asyncio.get_running_loop().time() - start_time
            logger.warning(
                "API request failed: %s",
                type(e).__name__,
                extra={
                    "api_endpoint": endpoint.name,
                    "encrypted": encrypted,
                    "error_type": type(e).__name__,
                    "duration_ms": round(duration * 1000, 1),
                },
            )
            raise

        if not 200 <= status < 300:
            logger.warning(
                "API request returned HTTP %s",
                status,
                extra={
                    "api_endpoint": endpoint.name,
                    "http_status": status,
                    "encrypted": encrypted,
                    "duration_ms": round(duration * 1000, 1),
                },
            )
            if self.raise_for_status:
                raise HttpStatusError(status, text)
            return ApiResponse(status=status, error_body=text)

        body = self._parse_body(endpoint, text, encrypted)

        log_level = logging.INFO if duration > SLOW_REQUEST_SECONDS else logging.DEBUG
        log_with_context(
            logger,
            log_level,
            "Slow API request" if duration > SLOW_REQUEST_SECONDS else "API request succeeded",
            api_endpoint=endpoint.name,
            http_status=status,
            encrypted=encrypted,
            duration_ms=round(duration * 1000, 1),
        )

        if body is None:
            return ApiResponse(status=status, error_body=text)
        return ApiResponse(status=status, body=body)

    @staticmethod
    def _parse_body(endpoint: VaultEndpoint, text: str, encrypted: bool) -> Any:
        """Parse a 2xx body; None when it matches no expected shape."""
        candidates: list[type[WireModel]] = [endpoint.response_model]
        if encrypted:
            candidates.insert(0, EncryptedResponse)

        for model in candidates:
            try:
                return model.model_validate_json(text)
            except ValidationError:
                continue

        logger.warning(
            "Unexpected response body shape",
            extra={"api_endpoint": endpoint.name, "encrypted": encrypted},
        )
        return None


__all__ = [
    "ApiResponse",
    "VaultApiClient",
    "VaultEndpoint",
    "TOKENIZE",
    "DETOKENIZE",
    "BATCH_TOKENIZE",
    "BATCH_DETOKENIZE",
    "ENCRYPTED_HEADER",
    "HttpStatusError",
]
