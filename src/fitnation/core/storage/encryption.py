"""Fernet encryption for stored profile payloads, with key rotation.

Profiles carry biometric data, so every stored payload (profile, cached
diet plan, workout progress) is encrypted before it reaches SQLite.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from cryptography.fernet import Fernet, InvalidToken, MultiFernet

logger = logging.getLogger(__name__)


class EncryptionError(Exception):
    """Raised when encryption/decryption fails."""


def _split_keys(keys: str | list[str]) -> list[str]:
    if isinstance(keys, str):
        keys = keys.split(",")
    return [k.strip() for k in keys if k and k.strip()]


class PayloadCipher:
    """Encrypts JSON-serializable payloads with one or more Fernet keys.

    The first key encrypts; every key is tried when decrypting, so a new
    key can be put in front while old rows are still readable.

    Usage::

        cipher = PayloadCipher("new-key,old-key")
        token = cipher.encrypt({"age": 30})
        cipher.decrypt(token)  # {"age": 30}
        cipher.rotate(old_token)  # re-encrypted under new-key
    """

    def __init__(self, keys: str | list[str]) -> None:
        """Initialize with Fernet keys (comma-separated string or list).

        Raises:
            EncryptionError: If no key is given or any key is invalid.
        """
        key_list = _split_keys(keys)
        if not key_list:
            raise EncryptionError("Encryption key must not be empty")
        try:
            self._fernet = MultiFernet([Fernet(k.encode("utf-8")) for k in key_list])
        except ValueError as exc:
            raise EncryptionError(f"Invalid encryption key: {exc}") from exc
        self.key_count = len(key_list)

    def encrypt(self, data: Any) -> str:
        """Encrypt a JSON-serializable value. ``None`` is stored as ``""``.

        Raises:
            EncryptionError: If serialization fails.
        """
        if data is None:
            return ""
        try:
            plaintext = json.dumps(data, separators=(",", ":"), sort_keys=True).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise EncryptionError(f"Payload is not JSON-serializable: {exc}") from exc
        return self._fernet.encrypt(plaintext).decode("utf-8")

    def decrypt(self, token: str) -> Any:
        """Decrypt a token produced by :meth:`encrypt`.

        Raises:
            EncryptionError: If no key matches or the payload is corrupt.
        """
        if not token:
            return None
        try:
            plaintext = self._fernet.decrypt(token.encode("utf-8"))
        except InvalidToken as exc:
            raise EncryptionError("Decryption failed: invalid token or wrong key") from exc
        try:
            return json.loads(plaintext)
        except ValueError as exc:
            raise EncryptionError(f"Decrypted payload is not JSON: {exc}") from exc

    def rotate(self, token: str) -> str:
        """Re-encrypt ``token`` under the primary key."""
        if not token:
            return ""
        try:
            return self._fernet.rotate(token.encode("utf-8")).decode("utf-8")
        except InvalidToken as exc:
            raise EncryptionError("Rotation failed: invalid token or wrong key") from exc

    @staticmethod
    def generate_key() -> str:
        """Generate a new URL-safe base64 Fernet key."""
        return Fernet.generate_key().decode("utf-8")
