"""
Totals Calculator

Pure projection from (line items, discount, tax rate) to the invoice's
money figures. No rounding happens here; that is a presentation concern.

INVARIANT: the effective discount is clamped to the subtotal, so the
taxable amount is never negative.
"""

from typing import Iterable

from invoicecraft.models.ledger import Discount, DiscountType, LineItem, Totals


def line_total(quantity: float, rate: float) -> float:
    """Total of a single line."""
    return quantity * rate


def compute_totals(
    line_items: Iterable[LineItem],
    discount: Discount,
    tax_rate: float,
) -> Totals:
    """
    Compute subtotal, discount, tax and grand total.

    Args:
        line_items: Lines in display order
        discount: Flat amount or percentage of the subtotal
        tax_rate: Flat tax rate in percent, applied after the discount

    Returns:
        Totals for the given inputs
    """
    subtotal = sum((item.total for item in line_items), 0.0)

    if discount.type == DiscountType.PERCENT:
        raw_discount = subtotal * (discount.value / 100)
    else:
        raw_discount = discount.value
    effective_discount = min(raw_discount, subtotal)

    taxable = subtotal - effective_discount
    tax = taxable * (tax_rate / 100)

    return Totals(
        subtotal=subtotal,
        discount=effective_discount,
        tax=tax,
        total=taxable + tax,
    )
