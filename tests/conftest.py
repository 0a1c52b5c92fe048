"""Shared fixtures."""

from datetime import datetime

import pytest

from invoicecraft.clock import ManualClock
from invoicecraft.ledger import LedgerStore
from invoicecraft.services.codec import SnapshotCodec
from invoicecraft.services.crypto import EnvelopeCipher

# Key derivation at full strength takes a noticeable fraction of a second;
# only the dedicated default-strength test pays for it.
FAST_ITERATIONS = 1_000


@pytest.fixture
def clock():
    return ManualClock(datetime(2024, 1, 15, 9, 0, 0))


@pytest.fixture
def store(clock):
    return LedgerStore(clock=clock)


@pytest.fixture
def fast_cipher():
    return EnvelopeCipher(iterations=FAST_ITERATIONS)


@pytest.fixture
def codec(fast_cipher):
    return SnapshotCodec(cipher=fast_cipher)
