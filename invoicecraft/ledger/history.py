"""
History Cache

A bounded, newest-first list of save events for quick recent-activity
display. It is a cache: entries older than the limit are dropped
silently, and the whole list can be rebuilt from the invoices.
"""

from typing import Iterable

from invoicecraft.models.ledger import HistoryEntry, Invoice, SavedInvoice

DEFAULT_HISTORY_LIMIT = 10


def history_entry_for(invoice: Invoice) -> HistoryEntry:
    """Denormalized entry describing the invoice as it is now."""
    return HistoryEntry(
        invoice_id=invoice.id,
        number=invoice.number,
        client=invoice.client.name,
        total=invoice.totals.total,
        status=invoice.status,
        due_date=invoice.due_date,
        updated_at=invoice.updated_at,
    )


def push_history(
    cache: list[HistoryEntry],
    entry: HistoryEntry,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> list[HistoryEntry]:
    """New list with `entry` at the head, truncated to `limit` entries."""
    return [entry, *cache][:limit]


def rebuild_history(
    invoices: Iterable[Invoice],
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> list[HistoryEntry]:
    """Recreate the cache from saved invoices, newest update first."""
    saved = [inv for inv in invoices if isinstance(inv, SavedInvoice)]
    saved.sort(key=lambda inv: inv.updated_at, reverse=True)
    return [history_entry_for(inv) for inv in saved[:limit]]
