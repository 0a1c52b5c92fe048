"""
Local Storage Implementations

FileLedgerStorage keeps each key as `<data_dir>/<key>.json`. Writes go
to a temporary file in the same directory first and are then swapped in
with os.replace, so a crash mid-write never leaves a truncated ledger.

InMemoryLedgerStorage is the dict-backed twin used by tests.
"""

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from invoicecraft.services.storage.interface import (
    LedgerStorageInterface,
    StorageReadError,
    StorageWriteError,
)


class FileLedgerStorage(LedgerStorageInterface):
    """File-per-key storage under a data directory."""

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: str) -> Path:
        return self._data_dir / f"{key}.json"

    async def read_blob(self, key: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(self._read_text, self.path_for(key))
        except OSError as e:
            raise StorageReadError(f"Failed to read {key}: {e}") from e
        except UnicodeDecodeError as e:
            # not retried: the bytes on disk will not change
            raise StorageReadError(f"Stored {key} is not UTF-8 text: {e}") from e

    async def write_blob(self, key: str, text: str) -> None:
        try:
            await asyncio.to_thread(self._write_text, self.path_for(key), text)
        except OSError as e:
            raise StorageWriteError(f"Failed to write {key}: {e}") from e

    async def delete_blob(self, key: str) -> bool:
        path = self.path_for(key)
        try:
            return await asyncio.to_thread(self._unlink, path)
        except OSError as e:
            raise StorageWriteError(f"Failed to delete {key}: {e}") from e

    @staticmethod
    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _read_text(path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    @staticmethod
    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write_text(path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    @staticmethod
    def _unlink(path: Path) -> bool:
        if not path.exists():
            return False
        path.unlink()
        return True


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Dict-backed storage. Not durable; for tests and previews."""

    def __init__(self, blobs: Optional[dict[str, str]] = None):
        self.blobs: dict[str, str] = dict(blobs or {})
        self.write_count = 0

    async def read_blob(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    async def write_blob(self, key: str, text: str) -> None:
        self.blobs[key] = text
        self.write_count += 1

    async def delete_blob(self, key: str) -> bool:
        return self.blobs.pop(key, None) is not None
