from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol


Number = Decimal | int | float | str

CENT = Decimal("0.01")


class HasTotals(Protocol):
    subtotal: Decimal
    tax: Decimal
    total: Decimal


@dataclass(frozen=True, slots=True)
class Totals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round2(value: Number) -> Decimal:
    """Round half away from zero to whole cents."""

    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_item_totals(quantity: Number, price: Number, tax_rate: Number) -> Totals:
    subtotal = round2(to_decimal(quantity) * to_decimal(price))
    tax = round2(subtotal * to_decimal(tax_rate))
    return Totals(subtotal=subtotal, tax=tax, total=round2(subtotal + tax))


def calculate_quote_totals(items: Iterable[HasTotals]) -> Totals:
    """Sum already-rounded item totals field by field.

    Each sum is rounded on its own; stored quotes were totalled this way, so
    rounding a single raw sum instead would change existing figures.
    """

    subtotal = tax = total = Decimal("0")
    for item in items:
        subtotal += to_decimal(item.subtotal)
        tax += to_decimal(item.tax)
        total += to_decimal(item.total)
    return Totals(subtotal=round2(subtotal), tax=round2(tax), total=round2(total))
