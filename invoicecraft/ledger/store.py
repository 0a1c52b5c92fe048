"""
Ledger Store

The explicit state container for one user's ledger. Every mutation goes
through a named operation on this class; nothing else writes to the
Ledger object.

The store is purely in-memory. Persistence (write-through after each
mutation) is the session's job, see invoicecraft.orchestrator.
"""

from datetime import timedelta
from typing import Optional, Union
from uuid import UUID

from invoicecraft.clock import Clock, SystemClock
from invoicecraft.ledger.history import (
    DEFAULT_HISTORY_LIMIT,
    history_entry_for,
    push_history,
)
from invoicecraft.ledger.status import refresh_statuses
from invoicecraft.models.ledger import (
    Client,
    ClientSnapshot,
    CompanyProfile,
    DraftInvoice,
    Invoice,
    InvoiceStatus,
    Ledger,
    LineItem,
    Product,
    SavedInvoice,
)
from invoicecraft.validation import InvoiceValidator, ValidationResult


class LedgerLookupError(KeyError):
    """A referenced client, product, line item or invoice does not exist."""
    pass


class LedgerStore:
    """
    Holds a Ledger and exposes the operations allowed on it.

    GUARANTEES:
    - At most one saved record and one draft record per invoice id
    - A manual save removes the draft record of the same id
    - Saved records never carry draft-only fields
    - The history cache never exceeds `history_limit` entries
    """

    def __init__(
        self,
        ledger: Optional[Ledger] = None,
        clock: Optional[Clock] = None,
        validator: Optional[InvoiceValidator] = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        default_due_days: int = 14,
        invoice_number_prefix: str = "INV-",
    ):
        self._ledger = ledger or Ledger()
        self._clock = clock or SystemClock()
        self._validator = validator or InvoiceValidator()
        self._history_limit = history_limit
        self._default_due_days = default_due_days
        self._number_prefix = invoice_number_prefix

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def clock(self) -> Clock:
        return self._clock

    def replace_ledger(self, ledger: Ledger) -> None:
        """Swap in a fully decoded ledger in one assignment (used by import)."""
        self._ledger = ledger

    # -------------------------------------------------------------------------
    # Clients
    # -------------------------------------------------------------------------

    def add_client(
        self,
        name: str,
        email: str = "",
        phone: str = "",
        address: str = "",
    ) -> Client:
        now = self._clock.now()
        client = Client(
            name=name,
            email=email,
            phone=phone,
            address=address,
            created_at=now,
            last_used=now,
        )
        self._ledger.clients.append(client)
        return client

    def update_client(self, client_id: UUID, **changes) -> Client:
        """
        Edit a client's details.

        Invoices already holding a snapshot of this client are not touched.
        """
        client = self._require_client(client_id)
        for field, value in changes.items():
            setattr(client, field, value)
        client.last_used = self._clock.now()
        return client

    def get_client(self, client_id: UUID) -> Optional[Client]:
        for client in self._ledger.clients:
            if client.id == client_id:
                return client
        return None

    def clients_by_recency(self) -> list[Client]:
        """Clients ordered most recently used first."""
        return sorted(self._ledger.clients, key=lambda c: c.last_used, reverse=True)

    def client_invoice_count(self, client_id: UUID) -> int:
        return sum(1 for inv in self._ledger.invoices if inv.client_id == client_id)

    def resolve_client(self, invoice: Invoice) -> Optional[Client]:
        """The invoice's client, or None when unset or dangling (unknown client)."""
        if invoice.client_id is None:
            return None
        return self.get_client(invoice.client_id)

    def save_client_from_invoice(self, invoice: Invoice) -> Optional[Client]:
        """Add the invoice's client snapshot as a client unless one has that name."""
        name = invoice.client.name
        if not name:
            return None
        for client in self._ledger.clients:
            if client.name == name:
                return client
        return self.add_client(
            name=name,
            email=invoice.client.email,
            phone=invoice.client.phone,
            address=invoice.client.address,
        )

    def _require_client(self, client_id: UUID) -> Client:
        client = self.get_client(client_id)
        if client is None:
            raise LedgerLookupError(f"Client not found: {client_id}")
        return client

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    def add_product(self, name: str, rate: float = 0.0, description: str = "") -> Product:
        product = Product(
            name=name,
            rate=rate,
            description=description,
            created_at=self._clock.now(),
        )
        self._ledger.products.append(product)
        return product

    def update_product(self, product_id: UUID, **changes) -> Product:
        """Edit a product. Line items copied from it earlier keep their values."""
        product = self._require_product(product_id)
        for field, value in changes.items():
            setattr(product, field, value)
        return product

    def get_product(self, product_id: UUID) -> Optional[Product]:
        for product in self._ledger.products:
            if product.id == product_id:
                return product
        return None

    def _require_product(self, product_id: UUID) -> Product:
        product = self.get_product(product_id)
        if product is None:
            raise LedgerLookupError(f"Product not found: {product_id}")
        return product

    # -------------------------------------------------------------------------
    # Company profile
    # -------------------------------------------------------------------------

    def update_company(self, **changes) -> CompanyProfile:
        for field, value in changes.items():
            setattr(self._ledger.company, field, value)
        return self._ledger.company

    def update_company_from_invoice(self, invoice: Invoice) -> CompanyProfile:
        self._ledger.company = invoice.sender.model_copy(deep=True)
        return self._ledger.company

    # -------------------------------------------------------------------------
    # Working invoice editing
    # -------------------------------------------------------------------------

    def create_empty_invoice(self) -> Invoice:
        """A fresh working invoice; the sender is a copy of the company profile."""
        now = self._clock.now()
        today = now.date()
        return Invoice(
            issue_date=today,
            due_date=today + timedelta(days=self._default_due_days),
            status=InvoiceStatus.DRAFT,
            sender=self._ledger.company.model_copy(deep=True),
            created_at=now,
            updated_at=now,
        )

    def next_invoice_number(self) -> str:
        """Advance the counter and return the generated number."""
        self._ledger.last_invoice_number += 1
        return f"{self._number_prefix}{self._ledger.last_invoice_number}"

    def add_line_item(
        self,
        invoice: Invoice,
        name: str = "",
        description: str = "",
        quantity: float = 1.0,
        rate: float = 0.0,
    ) -> LineItem:
        item = LineItem(name=name, description=description, quantity=quantity, rate=rate)
        invoice.line_items.append(item)
        return item

    def add_product_line(self, invoice: Invoice, product_id: UUID) -> LineItem:
        """Copy a product into a new line item (later product edits do not follow)."""
        product = self._require_product(product_id)
        return self.add_line_item(
            invoice,
            name=product.name,
            description=product.description,
            quantity=1.0,
            rate=product.rate,
        )

    def remove_line_item(self, invoice: Invoice, item_id: UUID) -> None:
        remaining = [item for item in invoice.line_items if item.id != item_id]
        if len(remaining) == len(invoice.line_items):
            raise LedgerLookupError(f"Line item not found: {item_id}")
        invoice.line_items = remaining

    def select_client(self, invoice: Invoice, client_id: Optional[UUID]) -> None:
        """Attach a stored client (copying its details) or detach with None."""
        if client_id is None:
            invoice.client_id = None
            invoice.client = ClientSnapshot()
            return
        client = self._require_client(client_id)
        invoice.client_id = client.id
        invoice.client = ClientSnapshot.of(client)

    def set_status(self, invoice: Invoice, status: InvoiceStatus) -> None:
        """Explicit user edit of the status; any state may be chosen."""
        invoice.status = status

    # -------------------------------------------------------------------------
    # Ledger records
    # -------------------------------------------------------------------------

    def get_invoice(
        self,
        invoice_id: UUID,
        include_drafts: bool = False,
    ) -> Optional[Union[SavedInvoice, DraftInvoice]]:
        """The saved record for the id, or its draft when asked and no save exists."""
        draft = None
        for record in self._ledger.invoices:
            if record.id != invoice_id:
                continue
            if isinstance(record, SavedInvoice):
                return record
            draft = record
        return draft if include_drafts else None

    def load_invoice(self, invoice_id: UUID) -> Invoice:
        """Deep copy of a record as a new working invoice."""
        record = self.get_invoice(invoice_id, include_drafts=True)
        if record is None:
            raise LedgerLookupError(f"Invoice not found: {invoice_id}")
        return Invoice.model_validate(record.core_fields())

    def save_invoice(self, working: Invoice) -> SavedInvoice:
        """
        Commit the working invoice as a saved record.

        Raises:
            InvoiceValidationError: if the invoice has no number. Nothing
                is mutated in that case.
        """
        self.validate(working)

        now = self._clock.now()
        working.updated_at = now

        # Link or register the client before snapshotting so the record
        # carries the client id.
        if working.client_id is not None:
            client = self.get_client(working.client_id)
            if client is not None:
                client.last_used = now
        elif working.client.name:
            client = self.add_client(
                name=working.client.name,
                email=working.client.email,
                phone=working.client.phone,
                address=working.client.address,
            )
            working.client_id = client.id

        snapshot = SavedInvoice.model_validate(working.core_fields())

        records = [
            record for record in self._ledger.invoices
            if not (isinstance(record, DraftInvoice) and record.id == working.id)
        ]
        for index, record in enumerate(records):
            if record.id == working.id:
                records[index] = snapshot
                break
        else:
            records.append(snapshot)
        self._ledger.invoices = records

        self._ledger.history_cache = push_history(
            self._ledger.history_cache,
            history_entry_for(snapshot),
            limit=self._history_limit,
        )
        return snapshot

    def save_draft(self, working: Invoice) -> DraftInvoice:
        """Store a draft snapshot, replacing any earlier draft of the same id."""
        draft = DraftInvoice.model_validate({
            **working.core_fields(),
            "saved_at": self._clock.now(),
        })
        records = [
            record for record in self._ledger.invoices
            if not (isinstance(record, DraftInvoice) and record.id == working.id)
        ]
        records.append(draft)
        self._ledger.invoices = records
        return draft

    def validate(self, invoice: Invoice) -> ValidationResult:
        return self._validator.ensure_can_save(invoice, self._ledger.clients)

    def drafts_for(self, invoice_id: UUID) -> list[DraftInvoice]:
        return [
            record for record in self._ledger.invoices
            if isinstance(record, DraftInvoice) and record.id == invoice_id
        ]

    def invoices_for_display(self) -> list[Union[SavedInvoice, DraftInvoice]]:
        """All records with their status resolved against the clock."""
        return refresh_statuses(self._ledger.invoices, self._clock.now())
