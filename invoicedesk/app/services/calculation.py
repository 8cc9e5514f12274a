"""Invoice calculation engine.

Pure functions over line items and rates. ``compute_*`` are exact ``Decimal``
arithmetic; ``calculate_invoice_totals`` rounds to cents for persistence and
derives the total from the rounded parts so ``total == subtotal + tax - discount``
holds on the stored values.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Decimal | float | int | str | None) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal | float | int) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _field(item: Any, name: str):
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name)


def line_total(quantity, rate) -> Decimal:
    return to_decimal(quantity) * to_decimal(rate)


def compute_subtotal(items: Iterable[Any]) -> Decimal:
    """Sum of quantity * rate over items (mappings or objects)."""
    return sum((line_total(_field(item, "quantity"), _field(item, "rate")) for item in items), ZERO)


def compute_tax(subtotal, tax_rate) -> Decimal:
    return to_decimal(subtotal) * to_decimal(tax_rate)


def compute_total(subtotal, tax, discount) -> Decimal:
    return to_decimal(subtotal) + to_decimal(tax) - to_decimal(discount)


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total: Decimal


def calculate_invoice_totals(items: Iterable[Any], tax_rate, discount=ZERO) -> InvoiceTotals:
    subtotal = sum(
        (round_money(line_total(_field(item, "quantity"), _field(item, "rate"))) for item in items),
        Decimal("0.00"),
    )
    tax_amount = round_money(compute_tax(subtotal, tax_rate))
    discount_amount = round_money(discount)
    total = compute_total(subtotal, tax_amount, discount_amount)
    return InvoiceTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        total=total,
    )
