"""
Activity Models for InvoiceCraft

Every significant ledger action produces an ActivityEvent. Events are
written to the structured log, and the ones marked `notify_user` are
also surfaced to the user as a short notice (the UI's toast).

This is operational logging, not an accounting audit trail: events are
not persisted inside the ledger.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """Types of events the engine reports."""
    # Invoices
    INVOICE_SAVED = "invoice_saved"
    INVOICE_SAVE_REJECTED = "invoice_save_rejected"
    DRAFT_AUTOSAVED = "draft_autosaved"
    AUTOSAVE_TOGGLED = "autosave_toggled"
    INVOICE_NUMBER_GENERATED = "invoice_number_generated"

    # Directory
    CLIENT_SAVED = "client_saved"
    COMPANY_SAVED = "company_saved"
    PRODUCT_SAVED = "product_saved"

    # Loading
    LEDGER_LOADED = "ledger_loaded"
    LOCAL_STATE_CORRUPT = "local_state_corrupt"
    SHARED_LINK_IMPORTED = "shared_link_imported"
    SHARED_LINK_INVALID = "shared_link_invalid"

    # Import / export
    LEDGER_IMPORTED = "ledger_imported"
    IMPORT_FAILED = "import_failed"
    LEDGER_EXPORTED = "ledger_exported"
    EXPORT_FAILED = "export_failed"

    # System
    STORAGE_ERROR = "storage_error"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single activity event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=datetime.now)

    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO

    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'invoice', 'client', 'ledger')"
    )
    entity_id: Optional[UUID] = None

    message: str = Field(
        ...,
        max_length=500,
        description="Short human-readable description"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    notify_user: bool = Field(
        default=False,
        description="Should the message be shown to the user?"
    )

    def to_log_dict(self) -> dict[str, Any]:
        """Flatten for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "message": self.message,
            "details": self.details,
            "error_message": self.error_message,
            "notify_user": self.notify_user,
        }


class ActivityEventBuilder:
    """
    Helper for building common activity events.

    Keeps event wording in one place so the notices the user sees
    stay consistent.
    """

    @staticmethod
    def invoice_saved(invoice_id: UUID, number: str, total: float) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.INVOICE_SAVED,
            entity_type="invoice",
            entity_id=invoice_id,
            message="Invoice saved",
            details={"number": number, "total": total},
            notify_user=True,
        )

    @staticmethod
    def invoice_save_rejected(invoice_id: UUID, issues: list[dict]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.INVOICE_SAVE_REJECTED,
            severity=ActivitySeverity.WARNING,
            entity_type="invoice",
            entity_id=invoice_id,
            message="Invoice number required. Generate or enter manually.",
            details={"issues": issues},
            notify_user=True,
        )

    @staticmethod
    def draft_autosaved(invoice_id: UUID) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.DRAFT_AUTOSAVED,
            entity_type="invoice",
            entity_id=invoice_id,
            message="Auto-saved draft",
            notify_user=True,
        )

    @staticmethod
    def autosave_toggled(enabled: bool) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.AUTOSAVE_TOGGLED,
            entity_type="settings",
            message=f"Autosave {'enabled' if enabled else 'disabled'}",
            details={"enabled": enabled},
        )

    @staticmethod
    def invoice_number_generated(number: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.INVOICE_NUMBER_GENERATED,
            entity_type="invoice",
            message=f"Generated invoice number {number}",
            details={"number": number},
        )

    @staticmethod
    def client_saved(client_id: UUID, name: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.CLIENT_SAVED,
            entity_type="client",
            entity_id=client_id,
            message="Client saved",
            details={"name": name},
            notify_user=True,
        )

    @staticmethod
    def company_saved(name: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.COMPANY_SAVED,
            entity_type="company",
            message="Company details saved",
            details={"name": name},
            notify_user=True,
        )

    @staticmethod
    def product_saved(product_id: UUID, name: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.PRODUCT_SAVED,
            entity_type="product",
            entity_id=product_id,
            message="Item saved",
            details={"name": name},
            notify_user=True,
        )

    @staticmethod
    def ledger_loaded(source: str, invoice_count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LEDGER_LOADED,
            entity_type="ledger",
            message=f"Ledger loaded from {source}",
            details={"source": source, "invoice_count": invoice_count},
        )

    @staticmethod
    def local_state_corrupt(error_message: str) -> ActivityEvent:
        # logged only, never shown
        return ActivityEvent(
            event_type=ActivityEventType.LOCAL_STATE_CORRUPT,
            severity=ActivitySeverity.WARNING,
            entity_type="ledger",
            message="Failed to parse stored state",
            error_message=error_message,
        )

    @staticmethod
    def shared_link_imported() -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SHARED_LINK_IMPORTED,
            entity_type="ledger",
            message="State restored from link",
            notify_user=True,
        )

    @staticmethod
    def shared_link_invalid(error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SHARED_LINK_INVALID,
            severity=ActivitySeverity.WARNING,
            entity_type="ledger",
            message="Invalid shared link. Using local data.",
            error_message=error_message,
            notify_user=True,
        )

    @staticmethod
    def ledger_imported(encrypted: bool) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LEDGER_IMPORTED,
            entity_type="ledger",
            message="Data imported",
            details={"encrypted": encrypted},
            notify_user=True,
        )

    @staticmethod
    def import_failed(reason: str, error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.IMPORT_FAILED,
            severity=ActivitySeverity.ERROR,
            entity_type="ledger",
            message="Import failed",
            details={"reason": reason},
            error_message=error_message,
            notify_user=True,
        )

    @staticmethod
    def ledger_exported(form: str) -> ActivityEvent:
        messages = {
            "plain": "Data exported",
            "encrypted": "Encrypted export ready",
            "link": "Shareable link created",
            "invoice_json": "Invoice exported as JSON",
            "invoice_csv": "Line items exported as CSV",
        }
        return ActivityEvent(
            event_type=ActivityEventType.LEDGER_EXPORTED,
            entity_type="ledger",
            message=messages.get(form, "Data exported"),
            details={"form": form},
            notify_user=True,
        )

    @staticmethod
    def export_failed(reason: str, error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.EXPORT_FAILED,
            severity=ActivitySeverity.ERROR,
            entity_type="ledger",
            message="Encryption failed",
            details={"reason": reason},
            error_message=error_message,
            notify_user=True,
        )

    @staticmethod
    def storage_error(error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STORAGE_ERROR,
            severity=ActivitySeverity.ERROR,
            entity_type="ledger",
            message="Could not write ledger to storage",
            error_message=error_message,
            notify_user=True,
        )
