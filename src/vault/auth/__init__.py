"""
Authentication for the vault API.

Components:
    - AccessToken: Token value with buffer-zone expiry check
    - ClientCredentialsProvider: OAuth2 client_credentials exchange
    - AuthTokenManager: Caches the token and serializes refreshes
"""

from vault.auth.exceptions import (
    AuthenticationError,
    AuthError,
    InvalidCredentialsConfigError,
    MalformedTokenResponseError,
)
from vault.auth.manager import AuthTokenManager
from vault.auth.models import DEFAULT_BUFFER_SECONDS, AccessToken
from vault.auth.provider import AUTH_TOKEN_PATH, ClientCredentialsProvider

__all__ = [
    "AccessToken",
    "DEFAULT_BUFFER_SECONDS",
    "AuthTokenManager",
    "ClientCredentialsProvider",
    "AUTH_TOKEN_PATH",
    "AuthError",
    "AuthenticationError",
    "InvalidCredentialsConfigError",
    "MalformedTokenResponseError",
]
