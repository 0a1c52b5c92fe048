"""
Password Envelope Encryption

Wire format (every field base64):
    {"cipher": ..., "salt": ..., "iv": ...}

Key: PBKDF2-HMAC-SHA256 over the UTF-8 password, random salt,
100 000 iterations by default, 256-bit output.
Cipher: AES-256-GCM with a random 12-byte nonce. `cipher` is the
ciphertext followed by the 16-byte GCM tag (the same layout WebCrypto
produces, so browser exports decrypt here and vice versa).

The primitives are CPU-bound, so they run in a worker thread and the
event loop stays free while a key is derived.
"""

import asyncio
import base64
import binascii
import os
from enum import Enum

from cryptography.exceptions import InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from pydantic import BaseModel

KEY_LENGTH_BYTES = 32


class CryptoFailureReason(str, Enum):
    """Why an encrypt or decrypt did not happen."""
    AUTHENTICATION_FAILED = "authentication_failed"  # wrong password or tampered data
    MALFORMED_ENVELOPE = "malformed_envelope"
    PRIMITIVE_UNAVAILABLE = "primitive_unavailable"


class CryptoError(Exception):
    """Base exception for envelope encryption."""

    def __init__(self, reason: CryptoFailureReason, message: str):
        self.reason = reason
        super().__init__(message)


class EncryptionError(CryptoError):
    """Encrypting the export failed; nothing was produced."""
    pass


class DecryptionError(CryptoError):
    """Decrypting an envelope failed; no plaintext is returned."""
    pass


class EncryptedEnvelope(BaseModel):
    """The encrypted-export document."""

    cipher: str
    salt: str
    iv: str


def _b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _b64decode(field: str, value: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecryptionError(
            CryptoFailureReason.MALFORMED_ENVELOPE,
            f"Envelope field '{field}' is not valid base64",
        ) from e


class EnvelopeCipher:
    """Password-based AES-GCM envelope."""

    def __init__(
        self,
        iterations: int = 100_000,
        salt_bytes: int = 16,
        iv_bytes: int = 12,
    ):
        self.iterations = iterations
        self.salt_bytes = salt_bytes
        self.iv_bytes = iv_bytes

    def derive_key(self, password: str, salt: bytes) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH_BYTES,
            salt=salt,
            iterations=self.iterations,
        )
        return kdf.derive(password.encode("utf-8"))

    async def encrypt(self, plaintext: str, password: str) -> EncryptedEnvelope:
        """
        Encrypt `plaintext` under `password`.

        Raises:
            EncryptionError: if the crypto backend cannot do it
        """
        return await asyncio.to_thread(self.encrypt_sync, plaintext, password)

    async def decrypt(self, envelope: EncryptedEnvelope, password: str) -> str:
        """
        Decrypt an envelope.

        Raises:
            DecryptionError: AUTHENTICATION_FAILED for a wrong password or
                tampered data, MALFORMED_ENVELOPE for undecodable fields
        """
        return await asyncio.to_thread(self.decrypt_sync, envelope, password)

    def encrypt_sync(self, plaintext: str, password: str) -> EncryptedEnvelope:
        salt = os.urandom(self.salt_bytes)
        iv = os.urandom(self.iv_bytes)
        try:
            key = self.derive_key(password, salt)
            cipher = AESGCM(key).encrypt(iv, plaintext.encode("utf-8"), None)
        except UnsupportedAlgorithm as e:
            raise EncryptionError(
                CryptoFailureReason.PRIMITIVE_UNAVAILABLE,
                f"Crypto backend cannot encrypt: {e}",
            ) from e
        return EncryptedEnvelope(
            cipher=_b64encode(cipher),
            salt=_b64encode(salt),
            iv=_b64encode(iv),
        )

    def decrypt_sync(self, envelope: EncryptedEnvelope, password: str) -> str:
        salt = _b64decode("salt", envelope.salt)
        iv = _b64decode("iv", envelope.iv)
        cipher = _b64decode("cipher", envelope.cipher)

        try:
            key = self.derive_key(password, salt)
            plaintext = AESGCM(key).decrypt(iv, cipher, None)
        except InvalidTag as e:
            raise DecryptionError(
                CryptoFailureReason.AUTHENTICATION_FAILED,
                "Decryption failed: wrong password or corrupted data",
            ) from e
        except UnsupportedAlgorithm as e:
            raise DecryptionError(
                CryptoFailureReason.PRIMITIVE_UNAVAILABLE,
                f"Crypto backend cannot decrypt: {e}",
            ) from e
        except ValueError as e:
            # empty salt or a nonce of unusable length
            raise DecryptionError(
                CryptoFailureReason.MALFORMED_ENVELOPE,
                f"Envelope parameters are invalid: {e}",
            ) from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError(
                CryptoFailureReason.MALFORMED_ENVELOPE,
                "Decrypted payload is not UTF-8 text",
            ) from e
