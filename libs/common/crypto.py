"""AES-256-GCM encryption for stored images.

Stored layout: nonce (12 bytes) | tag (16 bytes) | ciphertext.
"""

import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from libs.common.config import Settings
from libs.common.logging import get_logger

logger = get_logger(__name__)

NONCE_LENGTH = 12
TAG_LENGTH = 16
KEY_LENGTH = 32

# Used only outside production when IMAGE_ENCRYPTION_KEY is missing.
DEV_KEY_HEX = "0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"


class ImageDecryptionError(Exception):
    """Ciphertext is truncated, tampered with, or was encrypted with another key."""


class ImageCipher:
    def __init__(self, key: bytes):
        if len(key) != KEY_LENGTH:
            raise ValueError(f"Encryption key must be {KEY_LENGTH} bytes")
        self._aesgcm = AESGCM(key)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImageCipher":
        """
        Build the cipher from IMAGE_ENCRYPTION_KEY.

        Production refuses to start without a valid key; other environments
        fall back to a fixed development key and log a warning.
        """
        key_hex = settings.IMAGE_ENCRYPTION_KEY
        try:
            key = bytes.fromhex(key_hex) if key_hex else b""
        except ValueError:
            key = b""

        if len(key) != KEY_LENGTH:
            if settings.ENVIRONMENT == "production":
                raise RuntimeError(
                    "IMAGE_ENCRYPTION_KEY must be set to 64 hex characters in production"
                )
            logger.warning(
                "IMAGE_ENCRYPTION_KEY missing or invalid, using development key"
            )
            key = bytes.fromhex(DEV_KEY_HEX)
        return cls(key)

    def encrypt(self, data: bytes) -> bytes:
        nonce = os.urandom(NONCE_LENGTH)
        # AESGCM appends the tag to the ciphertext
        sealed = self._aesgcm.encrypt(nonce, data, None)
        ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return nonce + tag + ciphertext

    def decrypt(self, blob: bytes) -> bytes:
        if len(blob) < NONCE_LENGTH + TAG_LENGTH:
            raise ImageDecryptionError("Encrypted payload is too short")
        nonce = blob[:NONCE_LENGTH]
        tag = blob[NONCE_LENGTH : NONCE_LENGTH + TAG_LENGTH]
        ciphertext = blob[NONCE_LENGTH + TAG_LENGTH :]
        try:
            return self._aesgcm.decrypt(nonce, ciphertext + tag, None)
        except InvalidTag as e:
            raise ImageDecryptionError("Authentication tag mismatch") from e
