"""Supported currencies and money display helpers."""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    CAD = "CAD"
    AUD = "AUD"


def currency_symbol(code: str | None) -> str:
    """``$`` for US dollars, otherwise the ISO code itself."""
    code = (code or "").upper()
    return "$" if code == Currency.USD.value else code


def format_money(amount, code: str | None) -> str:
    value = Decimal(str(amount if amount is not None else 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{currency_symbol(code)}{value}"
