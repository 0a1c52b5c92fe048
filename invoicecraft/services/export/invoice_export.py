"""
Per-Invoice Export

Single-invoice JSON and a flat CSV of its line items. The CSV uses
minimal RFC 4180 quoting: a field is quoted only when it contains a
comma, a quote or a line break, and embedded quotes are doubled.
"""

import csv
import io

from invoicecraft.models.ledger import Invoice

CSV_HEADERS = ["Item", "Description", "Quantity", "Rate", "Total"]


def _format_number(value: float) -> str:
    """2.0 -> '2', 2.5 -> '2.5'."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def invoice_to_json(invoice: Invoice) -> str:
    return invoice.model_dump_json(by_alias=True, indent=2)


def line_items_to_csv(invoice: Invoice) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for item in invoice.line_items:
        writer.writerow([
            item.name,
            item.description,
            _format_number(item.quantity),
            _format_number(item.rate),
            _format_number(item.total),
        ])
    return buffer.getvalue().rstrip("\n")


def export_filename(invoice: Invoice, suffix: str) -> str:
    """e.g. ('INV-1001', '.json') -> 'INV-1001.json'; falls back to 'invoice'."""
    return f"{invoice.number or 'invoice'}{suffix}"
