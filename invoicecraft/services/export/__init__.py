"""Per-invoice export package."""

from invoicecraft.services.export.invoice_export import (
    CSV_HEADERS,
    export_filename,
    invoice_to_json,
    line_items_to_csv,
)

__all__ = [
    "CSV_HEADERS",
    "export_filename",
    "invoice_to_json",
    "line_items_to_csv",
]
