"""
Monetary computations for invoices.

Pure functions over items and invoice-level extended info entries. Nothing
here is cached: invoice totals are always derived from the current items,
taxes and discounts at the moment they are read.

All values are Decimal and stay unrounded; round_money() exists for display
boundaries only.
"""

from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, NamedTuple, TYPE_CHECKING

if TYPE_CHECKING:
    from core.models.invoice import ExtendedInfo, InvoiceItem

HUNDRED = Decimal(100)
ONE = Decimal(1)
CENT = Decimal("0.01")

DEFAULT_PAYMENT_TERM_DAYS = 1


class Adjustment(NamedTuple):
    """Aggregated invoice-level taxes or discounts."""

    percentage: Decimal  # fraction, 19% -> 0.19
    absolute: Decimal


def percent(value: Decimal) -> Decimal:
    """Convert a percentage (19) to a fraction (0.19)."""
    return Decimal(value) / HUNDRED


def item_amount(item: "InvoiceItem") -> Decimal:
    """Quantity times unit price, before any tax or discount."""
    return Decimal(item.quantity) * Decimal(item.price)


def item_vat_amount(item: "InvoiceItem") -> Decimal:
    return item_amount(item) * percent(item.vat_tax_value)


def item_discount_amount(item: "InvoiceItem") -> Decimal:
    return item_amount(item) * percent(item.discount_value)


def item_other_taxes_amount(item: "InvoiceItem") -> Decimal:
    return item_amount(item) * percent(item.other_tax_value)


def item_total(item: "InvoiceItem") -> Decimal:
    """
    Line total: amount x (1 + VAT%) x (1 + other tax%) x (1 - discount%).

    Taxes compound on each other and the discount applies to the taxed amount.
    """
    return (
        item_amount(item)
        * (ONE + percent(item.vat_tax_value))
        * (ONE + percent(item.other_tax_value))
        * (ONE - percent(item.discount_value))
    )


def subtotal(items: Iterable["InvoiceItem"]) -> Decimal:
    """Sum of line totals."""
    return sum((item_total(item) for item in items), Decimal(0))


def aggregate_adjustment(entries: Iterable["ExtendedInfo"]) -> Adjustment:
    """
    Fold extended info entries into (percentage fraction, absolute value).

    Percentages of all entries are added together, as are absolute values.
    """
    percentage = Decimal(0)
    absolute = Decimal(0)
    for entry in entries:
        if entry.is_percentage:
            percentage += Decimal(entry.value)
        else:
            absolute += Decimal(entry.value)
    return Adjustment(percentage=percentage / HUNDRED, absolute=absolute)


def grand_total(
    items: Iterable["InvoiceItem"],
    taxes: Iterable["ExtendedInfo"],
    discounts: Iterable["ExtendedInfo"],
) -> Decimal:
    """
    Invoice total.

    subtotal x (1 + tax%) x (1 - discount%) + tax absolute - discount absolute

    Percentages apply multiplicatively to the subtotal first, absolute values
    are a final additive correction. The order matters with mixed entries.
    """
    tax = aggregate_adjustment(taxes)
    discount = aggregate_adjustment(discounts)
    return (
        subtotal(items) * (ONE + tax.percentage) * (ONE - discount.percentage)
        + tax.absolute
        - discount.absolute
    )


def parse_payment_term(payment_term: str | None, fallback_days: int = DEFAULT_PAYMENT_TERM_DAYS) -> int:
    """Payment term in days. Anything that isn't an integer falls back, never raises."""
    if payment_term is None:
        return fallback_days
    try:
        return int(str(payment_term).strip())
    except ValueError:
        return fallback_days


def due_date(issue_date: date, payment_term: str | None, fallback_days: int = DEFAULT_PAYMENT_TERM_DAYS) -> date:
    """Issue date plus the payment term in days."""
    try:
        return issue_date + timedelta(days=parse_payment_term(payment_term, fallback_days))
    except OverflowError:
        # term parses but lands outside the calendar
        return issue_date + timedelta(days=fallback_days)


def round_money(value: Decimal) -> Decimal:
    """Quantize to cents, half up. Display only."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
