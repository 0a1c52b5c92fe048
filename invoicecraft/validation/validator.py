"""
Invoice Validation

Runs before an invoice is committed to the ledger.

DESIGN DECISION: Only a missing invoice number blocks a save. Everything
else (due date before issue date, empty invoice, a client id that no
longer resolves) is reported as a warning and the save goes ahead.
Invoice-number uniqueness is NOT checked; two invoices may share one.

IMPORTANT: Validation NEVER silently fixes issues and NEVER mutates the
invoice or the ledger.
"""

from typing import Iterable, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from invoicecraft.models.ledger import Client, Invoice, Ledger


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'inconsistent', 'dangling_reference')"
    )
    message: str
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """Outcome of validating one invoice."""

    invoice_id: UUID
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "error"]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]


class InvoiceValidationError(Exception):
    """An invoice failed save-time validation."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(issue.message for issue in result.errors)
        super().__init__(messages or "Invoice failed validation")

    @property
    def issues(self) -> list[ValidationIssue]:
        return self.result.issues


class InvoiceValidator:
    """Checks an invoice against the ledger it is about to be saved into."""

    def validate_for_save(
        self,
        invoice: Invoice,
        clients: Iterable[Client] = (),
    ) -> ValidationResult:
        issues: list[ValidationIssue] = []

        if not invoice.number.strip():
            issues.append(ValidationIssue(
                field="number",
                issue_type="missing",
                message="Invoice number is required",
                severity="error",
                suggested_fix="Generate a number or enter one manually",
            ))

        if invoice.due_date < invoice.issue_date:
            issues.append(ValidationIssue(
                field="due_date",
                issue_type="inconsistent",
                message="Due date is before issue date",
                severity="warning",
                suggested_fix="Please verify both dates",
            ))

        if not invoice.line_items:
            issues.append(ValidationIssue(
                field="line_items",
                issue_type="empty",
                message="Invoice has no line items",
                severity="warning",
            ))

        if invoice.client_id is not None:
            known = {client.id for client in clients}
            if invoice.client_id not in known:
                issues.append(self._dangling_client_issue(invoice.client_id))

        return ValidationResult(invoice_id=invoice.id, issues=issues)

    def ensure_can_save(
        self,
        invoice: Invoice,
        clients: Iterable[Client] = (),
    ) -> ValidationResult:
        """Validate and raise InvoiceValidationError on any error-level issue."""
        result = self.validate_for_save(invoice, clients)
        if result.has_errors:
            raise InvoiceValidationError(result)
        return result

    def check_references(self, ledger: Ledger) -> list[ValidationIssue]:
        """
        Report invoices whose client id does not resolve.

        Dangling references are tolerated by every read path; this is
        for diagnostics only.
        """
        known = {client.id for client in ledger.clients}
        return [
            self._dangling_client_issue(invoice.client_id, invoice.number)
            for invoice in ledger.invoices
            if invoice.client_id is not None and invoice.client_id not in known
        ]

    @staticmethod
    def _dangling_client_issue(client_id: UUID, number: str = "") -> ValidationIssue:
        where = f" on invoice {number}" if number else ""
        return ValidationIssue(
            field="client_id",
            issue_type="dangling_reference",
            message=f"Client {client_id}{where} does not exist (unknown client)",
            severity="warning",
        )
