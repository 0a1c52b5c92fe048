"""Tests for the ledger store."""

from datetime import date, timedelta
from uuid import uuid4

import pytest

from invoicecraft.ledger import LedgerLookupError, LedgerStore
from invoicecraft.models.ledger import (
    DraftInvoice,
    InvoiceStatus,
    Ledger,
    SavedInvoice,
)
from invoicecraft.validation import InvoiceValidationError


class TestClients:
    """Client directory operations."""

    def test_add_client_stamps_times(self, store, clock):
        client = store.add_client("Acme", email="a@acme.test")
        assert client.created_at == clock.now()
        assert client.last_used == clock.now()
        assert store.ledger.clients == [client]

    def test_clients_by_recency(self, store, clock):
        """Test most recently used clients come first."""
        first = store.add_client("First")
        clock.advance(60)
        second = store.add_client("Second")
        clock.advance(60)
        store.update_client(first.id, phone="555")
        assert [c.name for c in store.clients_by_recency()] == ["First", "Second"]
        assert second in store.ledger.clients

    def test_update_unknown_client(self, store):
        with pytest.raises(LedgerLookupError):
            store.update_client(uuid4(), name="Nobody")

    def test_save_client_from_invoice_dedupes_by_name(self, store):
        """Test the snapshot only becomes a client if no client has that name."""
        existing = store.add_client("Globex")
        invoice = store.create_empty_invoice()
        invoice.client.name = "Globex"
        assert store.save_client_from_invoice(invoice) is existing
        invoice.client.name = "Initech"
        created = store.save_client_from_invoice(invoice)
        assert created.name == "Initech"
        assert len(store.ledger.clients) == 2

    def test_resolve_dangling_client(self, store):
        """Test an unknown client id resolves to None instead of failing."""
        invoice = store.create_empty_invoice()
        invoice.client_id = uuid4()
        assert store.resolve_client(invoice) is None


class TestWorkingInvoice:
    """Editing the working invoice."""

    def test_create_empty_invoice(self, store, clock):
        store.update_company(name="My Studio", email="me@studio.test")
        invoice = store.create_empty_invoice()
        assert invoice.issue_date == date(2024, 1, 15)
        assert invoice.due_date == date(2024, 1, 29)
        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.sender.name == "My Studio"
        # the sender is a copy, not the profile itself
        invoice.sender.name = "Changed"
        assert store.ledger.company.name == "My Studio"

    def test_next_invoice_number(self, store):
        """Test the counter increments before formatting."""
        assert store.next_invoice_number() == "INV-1001"
        assert store.next_invoice_number() == "INV-1002"
        assert store.ledger.last_invoice_number == 1002

    def test_custom_prefix(self, clock):
        store = LedgerStore(clock=clock, invoice_number_prefix="AC-")
        assert store.next_invoice_number() == "AC-1001"

    def test_add_product_line_copies_product(self, store):
        """Test later product edits do not reach existing line items."""
        product = store.add_product("Hosting", rate=20, description="Monthly")
        invoice = store.create_empty_invoice()
        item = store.add_product_line(invoice, product.id)
        store.update_product(product.id, rate=35)
        assert item.rate == 20
        assert item.name == "Hosting"
        assert invoice.totals.subtotal == 20

    def test_remove_line_item(self, store):
        invoice = store.create_empty_invoice()
        keep = store.add_line_item(invoice, name="A", quantity=1, rate=1)
        drop = store.add_line_item(invoice, name="B", quantity=1, rate=2)
        store.remove_line_item(invoice, drop.id)
        assert invoice.line_items == [keep]
        with pytest.raises(LedgerLookupError):
            store.remove_line_item(invoice, drop.id)

    def test_select_client_copies_details(self, store):
        client = store.add_client("Acme", address="1 Road")
        invoice = store.create_empty_invoice()
        store.select_client(invoice, client.id)
        assert invoice.client_id == client.id
        assert invoice.client.address == "1 Road"
        store.select_client(invoice, None)
        assert invoice.client_id is None
        assert invoice.client.name == ""

    def test_set_status_allows_any_state(self, store):
        invoice = store.create_empty_invoice()
        store.set_status(invoice, InvoiceStatus.PAID)
        store.set_status(invoice, InvoiceStatus.SENT)
        assert invoice.status == InvoiceStatus.SENT


class TestSaveInvoice:
    """Manual save of the working invoice."""

    def test_save_without_number_is_rejected(self, store):
        """Test a missing number rejects the save before any mutation."""
        invoice = store.create_empty_invoice()
        invoice.client.name = "New Client"
        before = store.ledger.model_dump()
        with pytest.raises(InvoiceValidationError) as exc_info:
            store.save_invoice(invoice)
        assert exc_info.value.issues[0].field == "number"
        assert store.ledger.model_dump() == before

    def test_save_appends_saved_record(self, store, clock):
        invoice = store.create_empty_invoice()
        invoice.number = store.next_invoice_number()
        clock.advance(30)
        saved = store.save_invoice(invoice)
        assert isinstance(saved, SavedInvoice)
        assert saved.updated_at == clock.now()
        assert store.ledger.invoices == [saved]
        assert store.ledger.history_cache[0].invoice_id == invoice.id

    def test_save_snapshot_is_independent(self, store):
        """Test editing the working invoice after a save leaves the record alone."""
        invoice = store.create_empty_invoice()
        invoice.number = "INV-7"
        store.add_line_item(invoice, name="A", quantity=1, rate=10)
        saved = store.save_invoice(invoice)
        invoice.line_items[0].rate = 99
        assert saved.line_items[0].rate == 10

    def test_resave_replaces_in_place(self, store):
        """Test saving the same id twice keeps one record at the same position."""
        first = store.create_empty_invoice()
        first.number = "INV-1"
        store.save_invoice(first)
        second = store.create_empty_invoice()
        second.number = "INV-2"
        store.save_invoice(second)

        first.notes = "edited"
        store.save_invoice(first)
        assert [inv.number for inv in store.ledger.invoices] == ["INV-1", "INV-2"]
        assert store.ledger.invoices[0].notes == "edited"

    def test_save_removes_draft_of_same_id(self, store):
        invoice = store.create_empty_invoice()
        invoice.number = "INV-1"
        store.save_draft(invoice)
        store.save_invoice(invoice)
        assert store.drafts_for(invoice.id) == []
        assert len(store.ledger.invoices) == 1
        assert isinstance(store.ledger.invoices[0], SavedInvoice)

    def test_save_registers_named_client(self, store):
        """Test a typed-in client becomes a directory client linked to the invoice."""
        invoice = store.create_empty_invoice()
        invoice.number = "INV-1"
        invoice.client.name = "Walk-in"
        saved = store.save_invoice(invoice)
        assert len(store.ledger.clients) == 1
        assert saved.client_id == store.ledger.clients[0].id
        assert store.client_invoice_count(saved.client_id) == 1

    def test_save_bumps_client_last_used(self, store, clock):
        client = store.add_client("Acme")
        invoice = store.create_empty_invoice()
        invoice.number = "INV-1"
        store.select_client(invoice, client.id)
        clock.advance(3600)
        store.save_invoice(invoice)
        assert client.last_used == clock.now()

    def test_client_edit_does_not_touch_saved_invoice(self, store):
        client = store.add_client("Acme")
        invoice = store.create_empty_invoice()
        invoice.number = "INV-1"
        store.select_client(invoice, client.id)
        saved = store.save_invoice(invoice)
        store.update_client(client.id, name="Acme Holdings")
        assert saved.client.name == "Acme"

    def test_duplicate_numbers_are_allowed(self, store):
        for _ in range(2):
            invoice = store.create_empty_invoice()
            invoice.number = "INV-1"
            store.save_invoice(invoice)
        assert len(store.ledger.invoices) == 2

    def test_save_with_dangling_client_succeeds(self, store):
        """Test an unknown client id is only a warning."""
        invoice = store.create_empty_invoice()
        invoice.number = "INV-1"
        invoice.client_id = uuid4()
        store.save_invoice(invoice)
        assert len(store.ledger.invoices) == 1


class TestDraftsAndLoading:
    """Draft records and loading records back into the editor."""

    def test_one_draft_per_id(self, store, clock):
        invoice = store.create_empty_invoice()
        for _ in range(5):
            clock.advance(6)
            store.save_draft(invoice)
        drafts = store.drafts_for(invoice.id)
        assert len(drafts) == 1
        assert drafts[0].saved_at == clock.now()
        assert drafts[0].is_draft is True

    def test_draft_next_to_saved_record(self, store):
        """Test a saved record and its newer draft coexist."""
        invoice = store.create_empty_invoice()
        invoice.number = "INV-1"
        store.save_invoice(invoice)
        invoice.notes = "in progress"
        store.save_draft(invoice)
        assert len(store.ledger.invoices) == 2
        assert store.get_invoice(invoice.id).notes == ""
        assert isinstance(store.get_invoice(invoice.id), SavedInvoice)

    def test_get_invoice_falls_back_to_draft(self, store):
        invoice = store.create_empty_invoice()
        store.save_draft(invoice)
        assert store.get_invoice(invoice.id) is None
        assert isinstance(store.get_invoice(invoice.id, include_drafts=True), DraftInvoice)

    def test_load_invoice_is_a_deep_copy(self, store):
        invoice = store.create_empty_invoice()
        invoice.number = "INV-1"
        store.add_line_item(invoice, name="A", quantity=1, rate=10)
        saved = store.save_invoice(invoice)

        working = store.load_invoice(invoice.id)
        assert working.id == saved.id
        assert type(working).__name__ == "Invoice"
        working.line_items[0].rate = 50
        assert saved.line_items[0].rate == 10

    def test_load_unknown_invoice(self, store):
        with pytest.raises(LedgerLookupError):
            store.load_invoice(uuid4())

    def test_invoices_for_display_resolves_status(self, store, clock):
        invoice = store.create_empty_invoice()
        invoice.number = "INV-1"
        invoice.status = InvoiceStatus.SENT
        invoice.due_date = clock.today() - timedelta(days=1)
        store.save_invoice(invoice)
        displayed = store.invoices_for_display()
        assert displayed[0].status == InvoiceStatus.OVERDUE

    def test_replace_ledger(self, store):
        ledger = Ledger(last_invoice_number=2000)
        store.replace_ledger(ledger)
        assert store.ledger is ledger
        assert store.next_invoice_number() == "INV-2001"
