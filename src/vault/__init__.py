"""
Vault tokenization client.

Replaces sensitive values with format-preserving tokens held by a remote
vault service, and resolves tokens back to values. Supports single and
batch calls, an in-memory value/token cache, OAuth2 client-credentials
auth, and AES-GCM payload encryption with automatic fallback.
"""

from vault.client import VaultClient, get_client, initialize, reset_client
from vault.config import VaultConfig, load_config
from vault.models import (
    BatchDetokenItem,
    BatchDetokenizeResponse,
    BatchDetokenizeSummary,
    BatchTokenItem,
    BatchTokenizeResponse,
    BatchTokenizeSummary,
    DetokenizeResponse,
    TokenizeResponse,
)
from vault.repository import TokenRepository
from vault.results import Error, RepoResult, Success

__all__ = [
    "VaultClient",
    "VaultConfig",
    "TokenRepository",
    "load_config",
    "initialize",
    "get_client",
    "reset_client",
    "Success",
    "Error",
    "RepoResult",
    "TokenizeResponse",
    "DetokenizeResponse",
    "BatchTokenItem",
    "BatchTokenizeSummary",
    "BatchTokenizeResponse",
    "BatchDetokenItem",
    "BatchDetokenizeSummary",
    "BatchDetokenizeResponse",
]
