"""
Session Orchestrator for InvoiceCraft

This module ties together all the components and defines the
user-level flows:
1. Startup (shared link -> local blob -> fresh ledger)
2. Editing and saving the working invoice (manual save, autosave)
3. Import / export (plain, encrypted, shareable link, per-invoice)
4. Read-only reporting for the dashboard

DESIGN DECISION: The session is the ledger's single writer. Every
mutating flow ends with a write-through of the whole ledger blob, and
failures come back as an ActionResult instead of an exception: nothing
in here is fatal to the running session.
"""

import asyncio
from pathlib import Path
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from invoicecraft.activity import ActivityLogger, Notifier, configure_logging
from invoicecraft.clock import Clock, SystemClock
from invoicecraft.config import LedgerEngineSettings, get_settings
from invoicecraft.ledger import AutoSaveTask, LedgerStore
from invoicecraft.models.activity import ActivityEventBuilder
from invoicecraft.models.ledger import (
    Client,
    Invoice,
    InvoiceStatus,
    Ledger,
    Product,
    SavedInvoice,
)
from invoicecraft.reports import (
    DashboardSummary,
    MonthlyBucket,
    dashboard_summary,
    monthly_rollup,
    recent_invoices,
    search_invoices,
)
from invoicecraft.services.codec import (
    PasswordRequiredError,
    SnapshotCodec,
    SnapshotDecodeError,
)
from invoicecraft.services.crypto import DecryptionError, EncryptionError, EnvelopeCipher
from invoicecraft.services.export import invoice_to_json, line_items_to_csv
from invoicecraft.services.storage import (
    FileLedgerStorage,
    LedgerStorageInterface,
    StorageError,
)
from invoicecraft.validation import InvoiceValidationError


class ActionResult(BaseModel):
    """Outcome of a user-facing operation."""

    success: bool
    message: str = ""
    reason: Optional[str] = Field(
        default=None,
        description="Machine-readable failure reason"
    )
    payload: Optional[str] = Field(
        default=None,
        description="Produced document (export text, share link, ...)"
    )
    details: dict[str, Any] = Field(default_factory=dict)


class LoadResult(BaseModel):
    """Where the ledger came from at startup."""

    source: str = Field(..., pattern="^(shared_link|storage|default)$")
    address: Optional[str] = Field(
        default=None,
        description="Address to show after load (share parameter stripped)"
    )


class LedgerSession:
    """
    One user session over one ledger.

    Owns the working invoice, the autosave task, and the write-through
    persistence of the ledger blob.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        codec: Optional[SnapshotCodec] = None,
        activity_logger: Optional[ActivityLogger] = None,
        clock: Optional[Clock] = None,
        engine_settings: Optional[LedgerEngineSettings] = None,
        ledger_key: str = "invoiceCraftData",
        run_autosave_in_background: bool = True,
    ):
        self._storage = storage
        self._codec = codec or SnapshotCodec()
        self._activity = activity_logger or ActivityLogger()
        self._clock = clock or SystemClock()
        self._engine = engine_settings or LedgerEngineSettings()
        self._ledger_key = ledger_key
        self._background = run_autosave_in_background

        self._store = LedgerStore(
            clock=self._clock,
            history_limit=self._engine.history_limit,
            default_due_days=self._engine.default_due_days,
            invoice_number_prefix=self._engine.invoice_number_prefix,
        )
        self.current_invoice: Invoice = self._store.create_empty_invoice()

        self._autosave = AutoSaveTask(
            on_tick=self.autosave_tick,
            interval_seconds=self._engine.autosave_interval_seconds,
            clock=self._clock,
        )
        self._autosave_runner: Optional[asyncio.Task] = None
        self._persist_lock = asyncio.Lock()

    @property
    def store(self) -> LedgerStore:
        return self._store

    @property
    def ledger(self) -> Ledger:
        return self._store.ledger

    @property
    def autosave(self) -> AutoSaveTask:
        return self._autosave

    # -------------------------------------------------------------------------
    # Startup / shutdown
    # -------------------------------------------------------------------------

    async def start(self, address: Optional[str] = None) -> LoadResult:
        """Load the ledger and start autosave if the user has it enabled."""
        result = await self.load(address)
        self._sync_autosave()
        return result

    async def close(self) -> None:
        """Stop autosave and wait for the background runner to wind down."""
        self._autosave.stop()
        if self._autosave_runner is not None:
            await self._autosave_runner
            self._autosave_runner = None

    async def load(self, address: Optional[str] = None) -> LoadResult:
        """
        Load order:
        1. A `state` parameter in `address` fully replaces local data
           (and is persisted); the returned address has it stripped
        2. The stored blob
        3. A fresh empty ledger

        A malformed shared link is reported to the user; a corrupt local
        blob is only logged.
        """
        if address:
            try:
                shared = self._codec.read_shared_state(address)
            except SnapshotDecodeError as e:
                await self._activity.log(ActivityEventBuilder.shared_link_invalid(str(e)))
                shared = None
            if shared is not None:
                self._replace_ledger(shared)
                await self._persist()
                await self._activity.log(ActivityEventBuilder.shared_link_imported())
                return LoadResult(
                    source="shared_link",
                    address=self._codec.strip_shared_state(address),
                )

        ledger = await self._read_local()
        source = "storage" if ledger is not None else "default"
        self._replace_ledger(ledger or Ledger())
        await self._activity.log(
            ActivityEventBuilder.ledger_loaded(source, len(self.ledger.invoices))
        )
        return LoadResult(source=source, address=address)

    async def _read_local(self) -> Optional[Ledger]:
        try:
            text = await self._storage.read_blob(self._ledger_key)
        except StorageError as e:
            await self._activity.log(ActivityEventBuilder.local_state_corrupt(str(e)))
            return None
        if text is None:
            return None
        try:
            return self._codec.decode(text)
        except SnapshotDecodeError as e:
            await self._activity.log(ActivityEventBuilder.local_state_corrupt(str(e)))
            return None

    def _replace_ledger(self, ledger: Ledger) -> None:
        self._store.replace_ledger(ledger)
        self.current_invoice = self._store.create_empty_invoice()

    async def _persist(self) -> bool:
        """Write the whole ledger through to storage. Last write wins."""
        async with self._persist_lock:
            text = self._codec.encode(self.ledger)
            try:
                await self._storage.write_blob(self._ledger_key, text)
            except StorageError as e:
                await self._activity.log(ActivityEventBuilder.storage_error(str(e)))
                return False
        return True

    # -------------------------------------------------------------------------
    # Directory
    # -------------------------------------------------------------------------

    async def add_client(self, name: str, email: str = "", phone: str = "", address: str = "") -> Client:
        client = self._store.add_client(name=name, email=email, phone=phone, address=address)
        await self._persist()
        await self._activity.log(ActivityEventBuilder.client_saved(client.id, client.name))
        return client

    async def update_client(self, client_id: UUID, **changes) -> Client:
        client = self._store.update_client(client_id, **changes)
        await self._persist()
        await self._activity.log(ActivityEventBuilder.client_saved(client.id, client.name))
        return client

    async def add_product(self, name: str, rate: float = 0.0, description: str = "") -> Product:
        product = self._store.add_product(name=name, rate=rate, description=description)
        await self._persist()
        await self._activity.log(ActivityEventBuilder.product_saved(product.id, product.name))
        return product

    async def update_product(self, product_id: UUID, **changes) -> Product:
        product = self._store.update_product(product_id, **changes)
        await self._persist()
        await self._activity.log(ActivityEventBuilder.product_saved(product.id, product.name))
        return product

    async def update_company(self, **changes) -> None:
        """Edit the company profile and the working invoice's sender with it."""
        company = self._store.update_company(**changes)
        for field, value in changes.items():
            setattr(self.current_invoice.sender, field, value)
        await self._persist()
        await self._activity.log(ActivityEventBuilder.company_saved(company.name))

    async def update_company_from_invoice(self) -> None:
        """Make the working invoice's sender the company profile."""
        company = self._store.update_company_from_invoice(self.current_invoice)
        await self._persist()
        await self._activity.log(ActivityEventBuilder.company_saved(company.name))

    async def save_client_from_invoice(self) -> Optional[Client]:
        """
        Add the working invoice's client to the directory.

        Returns the matching client (existing or new), or None when the
        invoice names no client. Nothing is written if the client exists.
        """
        known = len(self.ledger.clients)
        client = self._store.save_client_from_invoice(self.current_invoice)
        if client is None or len(self.ledger.clients) == known:
            return client
        await self._persist()
        await self._activity.log(ActivityEventBuilder.client_saved(client.id, client.name))
        return client

    # -------------------------------------------------------------------------
    # Working invoice
    # -------------------------------------------------------------------------

    def new_invoice(self) -> Invoice:
        self.current_invoice = self._store.create_empty_invoice()
        return self.current_invoice

    def open_invoice(self, invoice_id: UUID) -> Invoice:
        """Load a stored invoice (or its draft) into the editor."""
        self.current_invoice = self._store.load_invoice(invoice_id)
        return self.current_invoice

    async def generate_invoice_number(self) -> str:
        number = self._store.next_invoice_number()
        self.current_invoice.number = number
        await self._persist()
        await self._activity.log(ActivityEventBuilder.invoice_number_generated(number))
        return number

    async def save_current_invoice(self) -> ActionResult:
        """
        Manual save of the working invoice.

        A missing number rejects the save before anything changes.
        """
        try:
            saved: SavedInvoice = self._store.save_invoice(self.current_invoice)
        except InvoiceValidationError as e:
            issues = [issue.model_dump() for issue in e.issues]
            event = ActivityEventBuilder.invoice_save_rejected(self.current_invoice.id, issues)
            await self._activity.log(event)
            return ActionResult(
                success=False,
                message=event.message,
                reason="missing_number",
                details={"issues": issues},
            )

        persisted = await self._persist()
        event = ActivityEventBuilder.invoice_saved(saved.id, saved.number, saved.totals.total)
        await self._activity.log(event)
        return ActionResult(
            success=True,
            message=event.message,
            details={"invoice_id": str(saved.id), "persisted": persisted},
        )

    async def autosave_tick(self) -> None:
        """One autosave tick: snapshot the working invoice as its draft."""
        if not self.ledger.settings.auto_save:
            return
        draft = self._store.save_draft(self.current_invoice)
        await self._persist()
        await self._activity.log(ActivityEventBuilder.draft_autosaved(draft.id))

    async def set_auto_save(self, enabled: bool) -> None:
        """Toggle autosave; disabling stops the timer before this returns."""
        self.ledger.settings.auto_save = enabled
        self._sync_autosave()
        await self._persist()
        await self._activity.log(ActivityEventBuilder.autosave_toggled(enabled))

    def _sync_autosave(self) -> None:
        if not self.ledger.settings.auto_save:
            self._autosave.stop()
            return
        if not self._autosave.is_running:
            self._autosave.start()
        if self._background and (self._autosave_runner is None or self._autosave_runner.done()):
            self._autosave_runner = asyncio.get_running_loop().create_task(self._autosave.run())

    # -------------------------------------------------------------------------
    # Import / export
    # -------------------------------------------------------------------------

    async def export_plain(self) -> ActionResult:
        event = ActivityEventBuilder.ledger_exported("plain")
        await self._activity.log(event)
        return ActionResult(success=True, message=event.message, payload=self._codec.encode(self.ledger))

    async def export_encrypted(self, password: str) -> ActionResult:
        if not password:
            return ActionResult(success=False, message="Password required", reason="password_required")
        try:
            payload = await self._codec.encode_encrypted(self.ledger, password)
        except EncryptionError as e:
            event = ActivityEventBuilder.export_failed(e.reason.value, str(e))
            await self._activity.log(event)
            return ActionResult(success=False, message=event.message, reason=e.reason.value)

        event = ActivityEventBuilder.ledger_exported("encrypted")
        await self._activity.log(event)
        return ActionResult(success=True, message=event.message, payload=payload)

    async def share_link(self, base_url: str) -> ActionResult:
        link = self._codec.share_link(self.ledger, base_url)
        event = ActivityEventBuilder.ledger_exported("link")
        await self._activity.log(event)
        return ActionResult(success=True, message=event.message, payload=link)

    async def import_text(self, text: str, password: Optional[str] = None) -> ActionResult:
        """
        Import a plain or encrypted ledger document.

        All-or-nothing: the current ledger is only replaced after the
        document has been fully decrypted and validated.
        """
        try:
            ledger, encrypted = await self._codec.decode_import(text, password)
        except PasswordRequiredError as e:
            return await self._import_failed("password_required", e)
        except DecryptionError as e:
            return await self._import_failed(e.reason.value, e)
        except SnapshotDecodeError as e:
            return await self._import_failed("invalid_document", e)

        self._replace_ledger(ledger)
        self._sync_autosave()
        await self._persist()
        event = ActivityEventBuilder.ledger_imported(encrypted)
        await self._activity.log(event)
        return ActionResult(
            success=True,
            message=event.message,
            details={
                "encrypted": encrypted,
                "clients": len(ledger.clients),
                "products": len(ledger.products),
                "invoices": len(ledger.invoices),
            },
        )

    async def import_file(self, path: Union[str, Path], password: Optional[str] = None) -> ActionResult:
        try:
            text = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return await self._import_failed("unreadable_file", e)
        return await self.import_text(text, password)

    async def _import_failed(self, reason: str, error: Exception) -> ActionResult:
        event = ActivityEventBuilder.import_failed(reason, str(error))
        await self._activity.log(event)
        return ActionResult(success=False, message=event.message, reason=reason)

    async def export_invoice_json(self) -> ActionResult:
        event = ActivityEventBuilder.ledger_exported("invoice_json")
        await self._activity.log(event)
        return ActionResult(success=True, message=event.message, payload=invoice_to_json(self.current_invoice))

    async def export_invoice_csv(self) -> ActionResult:
        event = ActivityEventBuilder.ledger_exported("invoice_csv")
        await self._activity.log(event)
        return ActionResult(success=True, message=event.message, payload=line_items_to_csv(self.current_invoice))

    # -------------------------------------------------------------------------
    # Reporting (statuses are resolved on every read)
    # -------------------------------------------------------------------------

    def dashboard(self) -> DashboardSummary:
        invoices = self._store.invoices_for_display()
        return dashboard_summary(invoices, self._clock.now())

    def monthly_report(self) -> list[MonthlyBucket]:
        invoices = self._store.invoices_for_display()
        return monthly_rollup(invoices, self._clock.now().date(), self._engine.report_months)

    def recent(self) -> list:
        return recent_invoices(self._store.invoices_for_display(), self._engine.recent_limit)

    def history(self, status: Optional[InvoiceStatus] = None, text: str = "") -> list:
        return search_invoices(self._store.invoices_for_display(), self._clock.now(), status, text)


def create_app_components(
    notifier: Optional[Notifier] = None,
    storage: Optional[LedgerStorageInterface] = None,
) -> LedgerSession:
    """
    Factory function to create a session from configuration.

    Args:
        notifier: Receives user-facing messages (toasts)
        storage: Override the configured file storage (e.g. in-memory)
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)

    crypto = settings.crypto
    codec = SnapshotCodec(
        cipher=EnvelopeCipher(
            iterations=crypto.pbkdf2_iterations,
            salt_bytes=crypto.salt_bytes,
            iv_bytes=crypto.iv_bytes,
        ),
        share_param=settings.share.query_param,
    )

    return LedgerSession(
        storage=storage or FileLedgerStorage(settings.storage.data_dir),
        codec=codec,
        activity_logger=ActivityLogger(notifier),
        engine_settings=settings.ledger,
        ledger_key=settings.storage.ledger_key,
    )
