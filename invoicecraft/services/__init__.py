"""Services package."""

from invoicecraft.services.codec import (
    PasswordRequiredError,
    SnapshotCodec,
    SnapshotDecodeError,
)
from invoicecraft.services.crypto import (
    CryptoError,
    CryptoFailureReason,
    DecryptionError,
    EncryptedEnvelope,
    EncryptionError,
    EnvelopeCipher,
)
from invoicecraft.services.storage import (
    FileLedgerStorage,
    InMemoryLedgerStorage,
    LedgerStorageInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)

__all__ = [
    # Codec
    "PasswordRequiredError",
    "SnapshotCodec",
    "SnapshotDecodeError",
    # Crypto
    "CryptoError",
    "CryptoFailureReason",
    "DecryptionError",
    "EncryptedEnvelope",
    "EncryptionError",
    "EnvelopeCipher",
    # Storage
    "FileLedgerStorage",
    "InMemoryLedgerStorage",
    "LedgerStorageInterface",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
]
