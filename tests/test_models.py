"""
Tests for InvoiceCraft

Test strategy:
1. Unit tests for individual components (models, calculator, resolver)
2. Session flows against in-memory storage and a manual clock
3. No wall-clock sleeps except the background autosave tests
"""

import pytest
from datetime import date, datetime, timezone
from uuid import uuid4

from pydantic import ValidationError

from invoicecraft.models.ledger import (
    Client,
    ClientSnapshot,
    Discount,
    DiscountType,
    DraftInvoice,
    Invoice,
    InvoiceStatus,
    Ledger,
    LineItem,
    Product,
    SavedInvoice,
)
from invoicecraft.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)


class TestLedgerModels:
    """Tests for ledger entity models."""

    def test_client_creation(self):
        """Test Client model creation."""
        client = Client(name="Acme Corp", email="billing@acme.test")
        assert client.name == "Acme Corp"
        assert client.email == "billing@acme.test"
        assert client.address == ""

    def test_client_requires_name(self):
        """Test that an empty client name is rejected."""
        with pytest.raises(ValidationError):
            Client(name="")

    def test_product_rejects_negative_rate(self):
        """Test that negative rates are rejected."""
        with pytest.raises(ValidationError):
            Product(name="Consulting", rate=-10)

    def test_line_item_total_is_derived(self):
        """Test that the line total follows quantity and rate."""
        item = LineItem(name="Design", quantity=3, rate=40)
        assert item.total == 120
        item.quantity = 4
        assert item.total == 160

    def test_line_item_ignores_incoming_total(self):
        """Test that a stored total is recomputed, never trusted."""
        item = LineItem.model_validate({"name": "X", "quantity": 2, "rate": 5, "total": 999})
        assert item.total == 10

    def test_line_item_rejects_negative_quantity(self):
        """Test that negative quantities are rejected on assignment too."""
        item = LineItem(quantity=1, rate=1)
        with pytest.raises(ValidationError):
            item.quantity = -1

    def test_invoice_defaults(self):
        """Test the defaults of a fresh invoice."""
        invoice = Invoice()
        assert invoice.number == ""
        assert invoice.status == InvoiceStatus.DRAFT
        assert (invoice.due_date - invoice.issue_date).days == 14
        assert invoice.totals.total == 0

    def test_invoice_id_is_immutable(self):
        """Test that an invoice id cannot be reassigned."""
        invoice = Invoice()
        with pytest.raises(ValidationError):
            invoice.id = uuid4()

    def test_invoice_totals_follow_inputs(self):
        """Test totals are recomputed after edits."""
        invoice = Invoice(line_items=[LineItem(quantity=2, rate=50)])
        assert invoice.totals.total == 100
        invoice.tax_rate = 10
        assert invoice.totals.total == pytest.approx(110)

    def test_client_snapshot_of(self):
        """Test copying a client into an invoice snapshot."""
        client = Client(name="Globex", phone="555-0100")
        snapshot = ClientSnapshot.of(client)
        assert snapshot.name == "Globex"
        assert snapshot.phone == "555-0100"


class TestInvoiceVariants:
    """Tests for the saved / draft discriminated union."""

    def test_draft_flag_selects_draft(self):
        """Test that a truthy isDraft decodes as DraftInvoice."""
        ledger = Ledger.model_validate({
            "invoices": [
                {"number": "INV-1", "isDraft": True, "savedAt": "2024-01-15T09:00:00"},
                {"number": "INV-2"},
            ]
        })
        assert isinstance(ledger.invoices[0], DraftInvoice)
        assert isinstance(ledger.invoices[1], SavedInvoice)
        assert ledger.invoices[0].saved_at == datetime(2024, 1, 15, 9, 0, 0)

    def test_falsy_draft_flag_is_saved(self):
        """Test that isDraft false is treated as a saved record."""
        ledger = Ledger.model_validate({"invoices": [{"number": "INV-3", "isDraft": False}]})
        assert isinstance(ledger.invoices[0], SavedInvoice)

    def test_saved_record_has_no_draft_fields(self):
        """Test that saved records never serialize draft-only keys."""
        saved = SavedInvoice(number="INV-4")
        dumped = saved.model_dump(by_alias=True)
        assert "isDraft" not in dumped
        assert "savedAt" not in dumped

    def test_wire_keys_are_camel_case(self):
        """Test serialization uses the camelCase document keys."""
        ledger = Ledger()
        dumped = ledger.model_dump(by_alias=True)
        assert dumped["lastInvoiceNumber"] == 1000
        assert "historyCache" in dumped
        assert dumped["settings"]["autoSave"] is True

    def test_missing_settings_fall_back_to_defaults(self):
        """Test that a stored document without settings still loads."""
        ledger = Ledger.model_validate({"lastInvoiceNumber": 1007})
        assert ledger.last_invoice_number == 1007
        assert ledger.settings.accent == "#6366f1"
        assert ledger.settings.currency.code == "USD"

    def test_discount_type_values(self):
        """Test discount type string values."""
        assert DiscountType("flat") is DiscountType.FLAT
        assert Discount(type="percent", value=5).type == DiscountType.PERCENT

    def test_all_statuses_exist(self):
        """Test that expected statuses exist."""
        for status in ["draft", "sent", "overdue", "paid"]:
            assert InvoiceStatus(status) is not None

    def test_issue_date_parsed_from_string(self):
        """Test ISO date strings decode to dates."""
        invoice = Invoice.model_validate({"issueDate": "2024-03-01", "dueDate": "2024-03-15"})
        assert invoice.issue_date == date(2024, 3, 1)

    def test_epoch_millisecond_timestamps_are_local_time(self):
        """Test numeric timestamps from older documents decode as naive local time."""
        client = Client.model_validate(
            {"name": "Acme", "createdAt": 1705309200000, "lastUsed": 1705309200000}
        )
        assert client.created_at.tzinfo is None
        assert client.created_at == datetime.fromtimestamp(1705309200)
        assert client.last_used < datetime.now()

    def test_aware_assignment_is_normalized(self):
        """Test an aware datetime assigned later is stored naive too."""
        client = Client(name="Acme")
        client.last_used = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)
        assert client.last_used.tzinfo is None
        assert client.last_used == datetime.fromtimestamp(1705309200)


class TestActivityModels:
    """Tests for activity-related models."""

    def test_activity_event_creation(self):
        """Test ActivityEvent model creation."""
        event = ActivityEvent(
            event_type=ActivityEventType.CLIENT_SAVED,
            message="Client saved",
        )
        assert event.severity == ActivitySeverity.INFO
        assert event.notify_user is False

    def test_activity_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = ActivityEventBuilder.invoice_saved(uuid4(), "INV-1001", 97.2)
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "invoice_saved"
        assert log_dict["details"]["number"] == "INV-1001"

    def test_save_rejected_message(self):
        """Test the wording shown when a save is rejected."""
        event = ActivityEventBuilder.invoice_save_rejected(uuid4(), [])
        assert event.message == "Invoice number required. Generate or enter manually."
        assert event.notify_user is True
        assert event.severity == ActivitySeverity.WARNING

    def test_local_state_corrupt_is_silent(self):
        """Test that a corrupt local blob is logged but not shown."""
        event = ActivityEventBuilder.local_state_corrupt("bad json")
        assert event.notify_user is False
        assert event.error_message == "bad json"

    def test_shared_link_invalid_notifies(self):
        """Test that a malformed shared link is shown to the user."""
        event = ActivityEventBuilder.shared_link_invalid("bad json")
        assert event.notify_user is True
        assert event.message == "Invalid shared link. Using local data."


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
