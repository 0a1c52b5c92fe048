"""
Data Models Package

This package contains all Pydantic models used by the ledger engine.
Everything stored in or exchanged through the ledger conforms to these schemas.
"""

from invoicecraft.models.ledger import (
    Client,
    ClientSnapshot,
    CompanyProfile,
    Currency,
    Discount,
    DiscountType,
    DraftInvoice,
    HistoryEntry,
    Invoice,
    InvoiceStatus,
    Ledger,
    LedgerInvoice,
    LedgerSettings,
    LineItem,
    Product,
    SavedInvoice,
    Totals,
)
from invoicecraft.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Ledger models
    "Client",
    "ClientSnapshot",
    "CompanyProfile",
    "Currency",
    "Discount",
    "DiscountType",
    "DraftInvoice",
    "HistoryEntry",
    "Invoice",
    "InvoiceStatus",
    "Ledger",
    "LedgerInvoice",
    "LedgerSettings",
    "LineItem",
    "Product",
    "SavedInvoice",
    "Totals",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
]
