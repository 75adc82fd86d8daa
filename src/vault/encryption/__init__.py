"""
Payload encryption and the transport strategies that use it.

Components:
    - EncryptionManager: AES-256-GCM with a lazily generated session key
    - NoEncryptionStrategy: Plain JSON transport
    - WithEncryptionStrategy: Encrypted transport with fallback to plain
    - create_encryption_strategy: Picks the variant from the manager
"""

from vault.encryption.manager import (
    DecryptionFailure,
    DecryptionSuccess,
    EncryptionFailure,
    EncryptionManager,
    EncryptionSuccess,
)
from vault.encryption.strategy import (
    ENCRYPTION_REJECTED_STATUS,
    EncryptionStrategy,
    NoEncryptionStrategy,
    WithEncryptionStrategy,
    create_encryption_strategy,
)

__all__ = [
    "EncryptionManager",
    "EncryptionSuccess",
    "EncryptionFailure",
    "DecryptionSuccess",
    "DecryptionFailure",
    "EncryptionStrategy",
    "NoEncryptionStrategy",
    "WithEncryptionStrategy",
    "create_encryption_strategy",
    "ENCRYPTION_REJECTED_STATUS",
]
