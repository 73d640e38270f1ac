"""Per-user authenticated encryption for stored credentials.

Blob layout (base64 encoded): ``IV (16 bytes) || ciphertext || HMAC-SHA256 tag (32 bytes)``.
The tag covers ``IV || ciphertext`` and is verified before anything is decrypted.
"""

import base64
import binascii
import logging
import os
from typing import Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

logger = logging.getLogger(__name__)

IV_SIZE = 16
TAG_SIZE = 32
KEY_SIZE = 32
BLOCK_SIZE_BITS = algorithms.AES.block_size
MIN_BLOB_SIZE = IV_SIZE + TAG_SIZE

MIN_CREDENTIAL_LENGTH = 8
MAX_CREDENTIAL_LENGTH = 500
DEFAULT_ITERATIONS = 10000

HMAC_SALT_SUFFIX = ":hmac"


class ValidationError(ValueError):
    """The credential cannot be stored as given."""


class EncryptionError(Exception):
    """Encryption failed unexpectedly; nothing should be stored."""


class CredentialCipher:
    """Encrypts short credential strings under a key bound to one user."""

    def __init__(self, master_secret: str, iterations: int = DEFAULT_ITERATIONS):
        if not master_secret:
            raise ValueError("ENCRYPTION_KEY environment variable is required")
        if iterations < DEFAULT_ITERATIONS:
            raise ValueError(f"iterations must be at least {DEFAULT_ITERATIONS}")
        self._master_secret = master_secret.encode("utf-8")
        self.iterations = iterations

    def _pbkdf2(self, secret: bytes, salt: bytes) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_SIZE,
            salt=salt,
            iterations=self.iterations,
        )
        return kdf.derive(secret)

    def derive_keys(self, user_identifier: str) -> Tuple[bytes, bytes]:
        """Return the (encryption key, HMAC key) pair for a user."""
        salt = user_identifier.encode("utf-8")
        encryption_key = self._pbkdf2(self._master_secret, salt)
        hmac_key = self._pbkdf2(
            encryption_key, salt + HMAC_SALT_SUFFIX.encode("utf-8")
        )
        return encryption_key, hmac_key

    @staticmethod
    def _tag(hmac_key: bytes, data: bytes) -> hmac.HMAC:
        mac = hmac.HMAC(hmac_key, hashes.SHA256())
        mac.update(data)
        return mac

    @staticmethod
    def validate(plaintext: str, user_identifier: str) -> str:
        """Check the inputs of ``encrypt`` and return the trimmed credential."""
        if not user_identifier:
            raise ValidationError("User identifier is required")
        if not isinstance(plaintext, str):
            raise ValidationError("Credential must be a string")
        trimmed = plaintext.strip()
        if not trimmed:
            raise ValidationError("Credential cannot be empty")
        if len(trimmed) < MIN_CREDENTIAL_LENGTH:
            raise ValidationError(
                f"Credential is too short (minimum {MIN_CREDENTIAL_LENGTH} characters)"
            )
        if len(trimmed) > MAX_CREDENTIAL_LENGTH:
            raise ValidationError(
                f"Credential is too long (maximum {MAX_CREDENTIAL_LENGTH} characters)"
            )
        return trimmed

    def encrypt(self, plaintext: str, user_identifier: str) -> str:
        """Encrypt a credential for ``user_identifier`` and return the base64 blob."""
        trimmed = self.validate(plaintext, user_identifier)

        try:
            encryption_key, hmac_key = self.derive_keys(user_identifier)
            iv = os.urandom(IV_SIZE)

            padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
            padded = padder.update(trimmed.encode("utf-8")) + padder.finalize()

            encryptor = Cipher(algorithms.AES(encryption_key), modes.CBC(iv)).encryptor()
            ciphertext = encryptor.update(padded) + encryptor.finalize()

            tag = self._tag(hmac_key, iv + ciphertext).finalize()
            return base64.b64encode(iv + ciphertext + tag).decode("ascii")
        except Exception as e:
            logger.error("Credential encryption failed: %s", type(e).__name__)
            raise EncryptionError("Failed to encrypt credential") from e

    def decrypt(self, blob: str, user_identifier: str) -> str:
        """
        Decrypt a blob produced by ``encrypt`` for the same user.

        Returns an empty string for a missing, malformed, tampered or foreign
        blob so callers can treat it the same as "no credential". The reason
        is logged, never returned.
        """
        if not blob or not user_identifier:
            return ""

        try:
            raw = base64.b64decode(blob, validate=True)
        except (binascii.Error, ValueError):
            logger.warning("Stored credential is not valid base64")
            return ""

        ciphertext_size = len(raw) - MIN_BLOB_SIZE
        if ciphertext_size <= 0 or ciphertext_size % (BLOCK_SIZE_BITS // 8):
            logger.warning("Stored credential has an invalid length (%d bytes)", len(raw))
            return ""

        iv = raw[:IV_SIZE]
        ciphertext = raw[IV_SIZE:-TAG_SIZE]
        tag = raw[-TAG_SIZE:]

        encryption_key, hmac_key = self.derive_keys(user_identifier)
        try:
            # Constant-time comparison
            self._tag(hmac_key, iv + ciphertext).verify(tag)
        except InvalidSignature:
            logger.warning("Stored credential failed integrity check")
            return ""

        try:
            decryptor = Cipher(algorithms.AES(encryption_key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
            plaintext = (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")
        except ValueError:
            # Covers bad padding and invalid UTF-8
            logger.warning("Stored credential could not be decrypted")
            return ""

        return plaintext
