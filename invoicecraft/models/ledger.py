"""
Core Data Models for InvoiceCraft

These models define the schema of everything kept in the ledger:
clients, products, invoices, settings and the recent-activity cache.
They are designed to:
1. Enforce value constraints at runtime (no negative rates or quantities)
2. Serialize to the same camelCase JSON document the ledger blob uses
3. Make derived values (line totals, invoice totals) impossible to set by hand
4. Distinguish autosaved drafts from saved invoices by type, not by flags

DESIGN DECISION: Invoices copy their client and sender data at save time.
A later edit of a Client or Product never reaches an already-saved invoice.
"""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    computed_field,
    field_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class InvoiceStatus(str, Enum):
    """
    Invoice lifecycle status.

    draft -> sent -> overdue -> paid. PAID is terminal: the status
    resolver never moves an invoice out of it.
    """
    DRAFT = "draft"
    SENT = "sent"
    OVERDUE = "overdue"
    PAID = "paid"


class DiscountType(str, Enum):
    """How a discount value is interpreted."""
    FLAT = "flat"        # absolute amount
    PERCENT = "percent"  # percentage of the line-item subtotal


class LedgerModel(BaseModel):
    """
    Base for every persisted model.

    Attributes are snake_case in Python and camelCase on the wire.
    Unknown keys are ignored so documents written by older versions
    still load.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    @field_validator("*", mode="after")
    @classmethod
    def normalize_timestamps(cls, value: Any) -> Any:
        """
        Timestamps are naive local time throughout the engine. Older
        documents store epoch milliseconds, which parse as UTC-aware
        datetimes; convert those to local wall time.
        """
        if isinstance(value, datetime) and value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value


# =============================================================================
# DIRECTORY ENTITIES
# =============================================================================

class Client(LedgerModel):
    """A customer the user invoices."""

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(
        ...,
        min_length=1,
        description="Client display name"
    )
    address: str = ""
    phone: str = ""
    email: str = ""
    created_at: datetime = Field(default_factory=datetime.now)
    last_used: datetime = Field(
        default_factory=datetime.now,
        description="Last time the client was attached to a saved invoice"
    )


class Product(LedgerModel):
    """A reusable priced item. Copied into invoices, never referenced."""

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1)
    description: str = ""
    rate: float = Field(default=0.0, ge=0)
    created_at: datetime = Field(default_factory=datetime.now)


class CompanyProfile(LedgerModel):
    """The user's own business details, printed as the invoice sender."""

    name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    logo: str = Field(
        default="",
        description="Logo as a data URL"
    )


class ClientSnapshot(LedgerModel):
    """Denormalized copy of client details embedded in an invoice."""

    name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""

    @classmethod
    def of(cls, client: Client) -> "ClientSnapshot":
        return cls(
            name=client.name,
            address=client.address,
            phone=client.phone,
            email=client.email,
        )


# =============================================================================
# INVOICE
# =============================================================================

class LineItem(LedgerModel):
    """
    One billed line.

    `total` is always quantity x rate. It is serialized for consumers of
    the JSON document but any incoming value is ignored.
    """

    id: UUID = Field(default_factory=uuid4)
    name: str = ""
    description: str = ""
    quantity: float = Field(default=1.0, ge=0)
    rate: float = Field(default=0.0, ge=0)

    @computed_field
    @property
    def total(self) -> float:
        from invoicecraft.ledger.totals import line_total

        return line_total(self.quantity, self.rate)


class Discount(LedgerModel):
    """Invoice-level discount."""

    type: DiscountType = DiscountType.FLAT
    value: float = Field(default=0.0, ge=0)


class Totals(LedgerModel):
    """Derived money figures of an invoice. Unrounded."""

    subtotal: float = 0.0
    discount: float = 0.0
    tax: float = 0.0
    total: float = 0.0


def _default_due_date() -> date:
    return date.today() + timedelta(days=14)


class Invoice(LedgerModel):
    """
    An invoice as edited by the user (the "working invoice").

    Ledger records use the two subclasses below: SavedInvoice for a
    manual save and DraftInvoice for an autosave snapshot.
    """

    id: UUID = Field(default_factory=uuid4, frozen=True)
    number: str = Field(
        default="",
        description="User-visible invoice number (uniqueness not enforced)"
    )
    issue_date: date = Field(default_factory=date.today)
    due_date: date = Field(default_factory=_default_due_date)
    status: InvoiceStatus = InvoiceStatus.DRAFT

    sender: CompanyProfile = Field(default_factory=CompanyProfile)
    client_id: Optional[UUID] = None
    client: ClientSnapshot = Field(default_factory=ClientSnapshot)

    line_items: list[LineItem] = Field(default_factory=list)
    discount: Discount = Field(default_factory=Discount)
    tax_rate: float = Field(
        default=0.0,
        ge=0,
        description="Flat tax rate in percent"
    )
    notes: str = ""

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @computed_field
    @property
    def totals(self) -> Totals:
        """Always consistent with the current line items, discount and tax."""
        from invoicecraft.ledger.totals import compute_totals

        return compute_totals(self.line_items, self.discount, self.tax_rate)

    def core_fields(self) -> dict[str, Any]:
        """Deep copy of the shared invoice fields, without variant tags."""
        return self.model_dump(
            exclude={"totals", "is_draft", "saved_at"},
        )


class SavedInvoice(Invoice):
    """An invoice committed by an explicit save."""


class DraftInvoice(Invoice):
    """An autosaved snapshot of a working invoice."""

    is_draft: Literal[True] = True
    saved_at: datetime = Field(default_factory=datetime.now)


def _invoice_kind(value: Any) -> str:
    """Drafts are the records carrying a truthy isDraft flag."""
    if isinstance(value, dict):
        flag = value.get("isDraft", value.get("is_draft", False))
    else:
        flag = getattr(value, "is_draft", False)
    return "draft" if flag else "saved"


LedgerInvoice = Annotated[
    Union[
        Annotated[SavedInvoice, Tag("saved")],
        Annotated[DraftInvoice, Tag("draft")],
    ],
    Discriminator(_invoice_kind),
]


# =============================================================================
# SETTINGS, HISTORY, LEDGER
# =============================================================================

class Currency(LedgerModel):
    """Currency used for presentation formatting."""

    symbol: str = "$"
    code: str = "USD"
    locale: str = "en-US"


class LedgerSettings(LedgerModel):
    """User preferences stored inside the ledger."""

    accent: str = "#6366f1"
    font: str = "'Inter', sans-serif"
    currency: Currency = Field(default_factory=Currency)
    theme: str = "classic"
    auto_save: bool = True
    footer: str = "Thank you for your business."


class HistoryEntry(LedgerModel):
    """
    One line of the recent-activity cache.

    A denormalized convenience copy; the invoice list is the source of truth.
    """

    invoice_id: UUID
    number: str
    client: str = ""
    total: float = 0.0
    status: InvoiceStatus
    due_date: Optional[date] = None
    updated_at: datetime


class Ledger(LedgerModel):
    """
    The aggregate root: everything the user keeps.

    Array order is meaningful and preserved through serialization.
    """

    last_invoice_number: int = Field(default=1000, ge=0)
    company: CompanyProfile = Field(default_factory=CompanyProfile)
    clients: list[Client] = Field(default_factory=list)
    products: list[Product] = Field(default_factory=list)
    invoices: list[LedgerInvoice] = Field(default_factory=list)
    settings: LedgerSettings = Field(default_factory=LedgerSettings)
    history_cache: list[HistoryEntry] = Field(default_factory=list)
