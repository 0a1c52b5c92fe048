"""Envelope encryption package."""

from invoicecraft.services.crypto.envelope import (
    CryptoError,
    CryptoFailureReason,
    DecryptionError,
    EncryptedEnvelope,
    EncryptionError,
    EnvelopeCipher,
)

__all__ = [
    "CryptoError",
    "CryptoFailureReason",
    "DecryptionError",
    "EncryptedEnvelope",
    "EncryptionError",
    "EnvelopeCipher",
]
