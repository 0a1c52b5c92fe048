"""
Storage Services Package

Provides the abstract blob-store interface and its local implementations.
"""

from invoicecraft.services.storage.interface import (
    LedgerStorageInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from invoicecraft.services.storage.file_storage import (
    FileLedgerStorage,
    InMemoryLedgerStorage,
)

__all__ = [
    # Interface
    "LedgerStorageInterface",
    # Exceptions
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "FileLedgerStorage",
    "InMemoryLedgerStorage",
]
