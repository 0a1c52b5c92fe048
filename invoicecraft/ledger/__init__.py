"""Ledger engine package: store, totals, status, history and autosave."""

from invoicecraft.ledger.autosave import AutoSaveTask
from invoicecraft.ledger.history import (
    DEFAULT_HISTORY_LIMIT,
    history_entry_for,
    push_history,
    rebuild_history,
)
from invoicecraft.ledger.status import (
    due_instant,
    refresh_status,
    refresh_statuses,
    resolve_status,
)
from invoicecraft.ledger.store import LedgerLookupError, LedgerStore
from invoicecraft.ledger.totals import compute_totals, line_total

__all__ = [
    "AutoSaveTask",
    "DEFAULT_HISTORY_LIMIT",
    "LedgerLookupError",
    "LedgerStore",
    "compute_totals",
    "due_instant",
    "history_entry_for",
    "line_total",
    "push_history",
    "rebuild_history",
    "refresh_status",
    "refresh_statuses",
    "resolve_status",
]
