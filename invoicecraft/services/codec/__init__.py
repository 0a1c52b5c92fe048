"""Snapshot codec package."""

from invoicecraft.services.codec.snapshot import (
    PasswordRequiredError,
    SnapshotCodec,
    SnapshotDecodeError,
)

__all__ = [
    "PasswordRequiredError",
    "SnapshotCodec",
    "SnapshotDecodeError",
]
