"""Validation package."""

from invoicecraft.validation.validator import (
    InvoiceValidationError,
    InvoiceValidator,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "InvoiceValidationError",
    "InvoiceValidator",
    "ValidationIssue",
    "ValidationResult",
]
