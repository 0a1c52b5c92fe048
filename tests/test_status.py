"""Tests for the status resolver."""

from datetime import date, datetime, timedelta

import pytest

from invoicecraft.ledger.status import (
    due_instant,
    refresh_status,
    refresh_statuses,
    resolve_status,
)
from invoicecraft.models.ledger import Invoice, InvoiceStatus


def _invoice(status, due):
    return Invoice(number="INV-1", status=status, issue_date=due - timedelta(days=14), due_date=due)


class TestResolveStatus:
    """Lazy status transitions against the clock."""

    def test_due_instant_is_local_midnight(self):
        assert due_instant(date(2024, 2, 1)) == datetime(2024, 2, 1, 0, 0, 0)

    def test_sent_due_yesterday_is_overdue(self):
        """Test a sent invoice due yesterday reads as overdue."""
        now = datetime(2024, 1, 15, 9, 0)
        invoice = _invoice(InvoiceStatus.SENT, date(2024, 1, 14))
        assert resolve_status(invoice, now) == InvoiceStatus.OVERDUE

    def test_sent_due_today_is_overdue_after_midnight(self):
        """Test the boundary: strictly after midnight of the due date."""
        invoice = _invoice(InvoiceStatus.SENT, date(2024, 1, 15))
        assert resolve_status(invoice, datetime(2024, 1, 15, 0, 0, 0)) == InvoiceStatus.SENT
        assert resolve_status(invoice, datetime(2024, 1, 15, 0, 0, 1)) == InvoiceStatus.OVERDUE

    def test_sent_not_yet_due(self):
        invoice = _invoice(InvoiceStatus.SENT, date(2024, 1, 20))
        assert resolve_status(invoice, datetime(2024, 1, 15, 9, 0)) == InvoiceStatus.SENT

    def test_paid_stays_paid(self):
        """Test paid is absorbing however often it is evaluated."""
        invoice = _invoice(InvoiceStatus.PAID, date(2023, 1, 1))
        now = datetime(2024, 1, 15)
        for _ in range(5):
            refresh_status(invoice, now)
            now += timedelta(days=30)
        assert invoice.status == InvoiceStatus.PAID

    def test_draft_never_moves(self):
        """Test drafts are not auto-transitioned even when past due."""
        invoice = _invoice(InvoiceStatus.DRAFT, date(2023, 1, 1))
        assert resolve_status(invoice, datetime(2024, 1, 15)) == InvoiceStatus.DRAFT

    def test_overdue_does_not_move_back(self):
        """Test there is no automatic path out of overdue."""
        invoice = _invoice(InvoiceStatus.OVERDUE, date(2024, 6, 1))
        assert resolve_status(invoice, datetime(2024, 1, 15)) == InvoiceStatus.OVERDUE

    def test_resolve_does_not_mutate(self):
        invoice = _invoice(InvoiceStatus.SENT, date(2024, 1, 1))
        resolve_status(invoice, datetime(2024, 1, 15))
        assert invoice.status == InvoiceStatus.SENT


class TestRefreshStatuses:
    """In-place application of the resolved status."""

    @pytest.mark.parametrize("status,expected", [
        (InvoiceStatus.DRAFT, InvoiceStatus.DRAFT),
        (InvoiceStatus.SENT, InvoiceStatus.OVERDUE),
        (InvoiceStatus.OVERDUE, InvoiceStatus.OVERDUE),
        (InvoiceStatus.PAID, InvoiceStatus.PAID),
    ])
    def test_refresh_statuses_in_place(self, status, expected):
        invoices = [_invoice(status, date(2024, 1, 1))]
        result = refresh_statuses(invoices, datetime(2024, 1, 15))
        assert result[0] is invoices[0]
        assert invoices[0].status == expected
