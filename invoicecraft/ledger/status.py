"""
Status Resolver

Derives an invoice's lifecycle status from the clock. Evaluated lazily on
every read path (dashboard, history, search), never on a timer.

Rules:
- PAID is absorbing: never re-evaluated
- SENT becomes OVERDUE once the clock is strictly past local midnight
  of the due date
- DRAFT never moves on its own; only an explicit user edit sends it
- Nothing moves back from OVERDUE automatically
"""

from datetime import date, datetime, time
from typing import Iterable, TypeVar

from invoicecraft.models.ledger import Invoice, InvoiceStatus

InvoiceT = TypeVar("InvoiceT", bound=Invoice)


def due_instant(due_date: date) -> datetime:
    """Local midnight at the start of the due date."""
    return datetime.combine(due_date, time.min)


def resolve_status(invoice: Invoice, now: datetime) -> InvoiceStatus:
    """Status the invoice should have at `now`. Does not mutate."""
    if invoice.status == InvoiceStatus.PAID:
        return invoice.status
    if invoice.status == InvoiceStatus.SENT and now > due_instant(invoice.due_date):
        return InvoiceStatus.OVERDUE
    return invoice.status


def refresh_status(invoice: InvoiceT, now: datetime) -> InvoiceT:
    """Apply the resolved status in place and return the invoice."""
    resolved = resolve_status(invoice, now)
    if resolved != invoice.status:
        invoice.status = resolved
    return invoice


def refresh_statuses(invoices: Iterable[InvoiceT], now: datetime) -> list[InvoiceT]:
    return [refresh_status(invoice, now) for invoice in invoices]
