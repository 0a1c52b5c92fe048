"""
Aggregation Reporter

Read-only rollups over the invoice list for dashboard rendering.

DESIGN DECISION: Reports work on the *effective* invoice list. When an
invoice has both a saved record and an autosaved draft, only the saved
record is counted, so an open editor never double-counts money.

All figures are computed from `invoice.totals` and the resolved status;
renderers must not recompute them.
"""

from datetime import date, datetime
from typing import Iterable, Optional, Sequence, Union

from pydantic import BaseModel, Field

from invoicecraft.ledger.status import resolve_status
from invoicecraft.models.ledger import (
    DraftInvoice,
    Invoice,
    InvoiceStatus,
    SavedInvoice,
)

LedgerRecord = Union[SavedInvoice, DraftInvoice, Invoice]

MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


class MonthlyBucket(BaseModel):
    """One calendar month of the rollup."""

    year: int
    month: int = Field(ge=1, le=12)
    label: str
    paid: float = 0.0
    outstanding: float = 0.0


class DashboardSummary(BaseModel):
    """Headline figures shown above the chart."""

    paid: float = 0.0
    outstanding: float = 0.0
    overdue: float = 0.0
    drafts: int = 0


def effective_invoices(invoices: Iterable[LedgerRecord]) -> list[LedgerRecord]:
    """One record per invoice id, preferring the saved record over its draft."""
    chosen: dict = {}
    order: list = []
    for record in invoices:
        if record.id not in chosen:
            order.append(record.id)
            chosen[record.id] = record
        elif not isinstance(record, DraftInvoice):
            chosen[record.id] = record
    return [chosen[invoice_id] for invoice_id in order]


def trailing_months(today: date, months: int = 6) -> list[tuple[int, int]]:
    """(year, month) pairs for the trailing window, oldest first, ending at today."""
    pairs = []
    for offset in range(months - 1, -1, -1):
        index = today.year * 12 + (today.month - 1) - offset
        pairs.append((index // 12, index % 12 + 1))
    return pairs


def monthly_rollup(
    invoices: Iterable[LedgerRecord],
    today: date,
    months: int = 6,
) -> list[MonthlyBucket]:
    """
    Paid vs outstanding per issue month.

    Always returns exactly `months` buckets, oldest to newest; a month
    without invoices reports zeros.
    """
    buckets = {
        (year, month): MonthlyBucket(year=year, month=month, label=MONTH_LABELS[month - 1])
        for year, month in trailing_months(today, months)
    }

    for invoice in effective_invoices(invoices):
        bucket = buckets.get((invoice.issue_date.year, invoice.issue_date.month))
        if bucket is None:
            continue
        if invoice.status == InvoiceStatus.PAID:
            bucket.paid += invoice.totals.total
        else:
            bucket.outstanding += invoice.totals.total

    return list(buckets.values())


def dashboard_summary(invoices: Iterable[LedgerRecord], now: datetime) -> DashboardSummary:
    """Totals by resolved status; drafts are counted, not summed."""
    summary = DashboardSummary()
    for invoice in effective_invoices(invoices):
        status = resolve_status(invoice, now)
        if status == InvoiceStatus.PAID:
            summary.paid += invoice.totals.total
        elif status == InvoiceStatus.SENT:
            summary.outstanding += invoice.totals.total
        elif status == InvoiceStatus.OVERDUE:
            summary.overdue += invoice.totals.total
        else:
            summary.drafts += 1
    return summary


def recent_invoices(invoices: Iterable[LedgerRecord], limit: int = 5) -> list[LedgerRecord]:
    """Most recently updated invoices first."""
    ordered = sorted(effective_invoices(invoices), key=lambda inv: inv.updated_at, reverse=True)
    return ordered[:limit]


def search_invoices(
    invoices: Sequence[LedgerRecord],
    now: datetime,
    status: Optional[InvoiceStatus] = None,
    text: str = "",
) -> list[LedgerRecord]:
    """
    Filter by resolved status and a case-insensitive search over the
    invoice number and client name. Newest update first.
    """
    needle = text.strip().lower()
    matches = []
    for invoice in effective_invoices(invoices):
        if status is not None and resolve_status(invoice, now) != status:
            continue
        if needle and not (
            needle in invoice.number.lower()
            or needle in invoice.client.name.lower()
        ):
            continue
        matches.append(invoice)
    matches.sort(key=lambda inv: inv.updated_at, reverse=True)
    return matches
