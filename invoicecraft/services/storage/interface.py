"""
Abstract Storage Interface

DESIGN DECISION: The ledger is persisted as ONE JSON document under a
fixed key in a key-value store. The interface is intentionally tiny so
we can:
1. Keep the blob in a local file today
2. Use in-memory storage for testing
3. Move to another local store later without touching the engine

Every method is async: I/O never blocks the session's event loop.
"""

from abc import ABC, abstractmethod
from typing import Optional


class LedgerStorageInterface(ABC):
    """
    Abstract key-value store for ledger snapshots.

    Values are opaque text (the encoded ledger); the store never parses them.
    """

    @abstractmethod
    async def read_blob(self, key: str) -> Optional[str]:
        """
        Read the blob stored under `key`.

        Returns:
            The stored text, or None if nothing is stored under the key

        Raises:
            StorageReadError: If the backend fails
        """
        pass

    @abstractmethod
    async def write_blob(self, key: str, text: str) -> None:
        """
        Store `text` under `key`, replacing any previous value atomically.

        Raises:
            StorageWriteError: If the write fails
        """
        pass

    @abstractmethod
    async def delete_blob(self, key: str) -> bool:
        """
        Remove the blob under `key`.

        Returns:
            True if something was deleted
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """The backend could not be read."""
    pass


class StorageWriteError(StorageError):
    """The backend could not be written."""
    pass
