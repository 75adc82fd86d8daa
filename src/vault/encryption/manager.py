"""
Payload encryption for the vault transport.

Uses AES-256-GCM authenticated encryption with a session key generated on
first use and reused for the lifetime of the manager. The server receives
the session key alongside each request and encrypts its response with it.

Wire format (all base64, no line breaks):
    payload: ciphertext with the 16-byte GCM tag appended
    session_key: raw 32-byte AES key
    iv: 12-byte nonce, fresh per encryption

encrypt() and decrypt() never raise; failures come back as
EncryptionFailure / DecryptionFailure values.
"""

import base64
import logging
import secrets
import threading
from dataclasses import dataclass
from typing import Optional, Union

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

logger = logging.getLogger(__name__)

# Constants
KEY_SIZE = 32  # 256 bits
NONCE_SIZE = 12  # 96 bits (standard for GCM)

DISABLED_MESSAGE = "Encryption is disabled"


@dataclass(frozen=True)
class EncryptionSuccess:
    encrypted_payload: str
    session_key: str
    iv: str


@dataclass(frozen=True)
class EncryptionFailure:
    message: str


@dataclass(frozen=True)
class DecryptionSuccess:
    data: str


@dataclass(frozen=True)
class DecryptionFailure:
    message: str


EncryptionResult = Union[EncryptionSuccess, EncryptionFailure]
DecryptionResult = Union[DecryptionSuccess, DecryptionFailure]


def _b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


class EncryptionManager:
    """AES-256-GCM session encryption.

    Example:
        >>> manager = EncryptionManager(enabled=True)
        >>> result = manager.encrypt('{"value": "4111"}')
        >>> decrypted = manager.decrypt(result.encrypted_payload, result.iv)
        >>> decrypted.data
        '{"value": "4111"}'
    """

    def __init__(self, enabled: bool, session_key: Optional[bytes] = None):
        """Initialize manager.

        Args:
            enabled: When False every call returns a failure value.
            session_key: Optional fixed 32-byte key; generated lazily otherwise.

        Raises:
            ValueError: If session_key is given with the wrong size.
        """
        if session_key is not None and len(session_key) != KEY_SIZE:
            raise ValueError(
                f"Session key must be {KEY_SIZE} bytes, got {len(session_key)} bytes"
            )
        self._enabled = enabled
        self._session_key = session_key
        self._cipher: Optional[AESGCM] = None
        self._key_lock = threading.Lock()

    def is_enabled(self) -> bool:
        return self._enabled

    def _get_cipher(self) -> AESGCM:
        with self._key_lock:
            if self._cipher is None:
                if self._session_key is None:
                    self._session_key = AESGCM.generate_key(bit_length=256)
                    logger.debug("Generated encryption session key")
                self._cipher = AESGCM(self._session_key)
            return self._cipher

    def encrypt(self, data: str) -> EncryptionResult:
        """Encrypt a UTF-8 string under the session key."""
        if not self._enabled:
            return EncryptionFailure(DISABLED_MESSAGE)

        try:
            cipher = self._get_cipher()
            nonce = secrets.token_bytes(NONCE_SIZE)
            ciphertext = cipher.encrypt(nonce, data.encode("utf-8"), None)
        except Exception as e:
            logger.warning(
                "Payload encryption failed",
                extra={"error_type": type(e).__name__},
            )
            return EncryptionFailure(f"Encryption error: {e}")

        return EncryptionSuccess(
            encrypted_payload=_b64encode(ciphertext),
            session_key=_b64encode(self._session_key),
            iv=_b64encode(nonce),
        )

    def decrypt(self, encrypted_payload: str, iv: str) -> DecryptionResult:
        """Decrypt a base64 payload produced under the session key."""
        if not self._enabled:
            return DecryptionFailure(DISABLED_MESSAGE)

        try:
            cipher = self._get_cipher()
            plaintext = cipher.decrypt(
                base64.b64decode(iv, validate=True),
                base64.b64decode(encrypted_payload, validate=True),
                None,
            )
            return DecryptionSuccess(data=plaintext.decode("utf-8"))
        except Exception as e:
            # InvalidTag carries no message
            logger.warning(
                "Payload decryption failed",
                extra={"error_type": type(e).__name__},
            )
            return DecryptionFailure(f"Decryption error: {type(e).__name__} {e}".strip())


__all__ = [
    "EncryptionManager",
    "EncryptionSuccess",
    "EncryptionFailure",
    "DecryptionSuccess",
    "DecryptionFailure",
    "EncryptionResult",
    "DecryptionResult",
    "KEY_SIZE",
    "NONCE_SIZE",
]
