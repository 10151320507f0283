"""
Checkout total computation.

All arithmetic is done on Decimal. Only the tax line is rounded (half-up to
cents); subtotal and discount are carried at full precision so rounding
never compounds.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Optional, Union

from core.config import settings

CENTS = Decimal("0.01")
ZERO = Decimal("0")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Optional[Number]) -> Decimal:
    """Convert to Decimal via str() so floats keep their printed value."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Number) -> int:
    """Dollars to cents, rounded half-up rather than truncated."""
    return int((to_decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _line_value(item: Any, name: str):
    if isinstance(item, dict):
        return item[name]
    return getattr(item, name)


def calculate_subtotal(items: Iterable[Any]) -> Decimal:
    """Sum of price x quantity over line items (objects or dicts)."""
    subtotal = ZERO
    for item in items:
        subtotal += to_decimal(_line_value(item, "price")) * int(_line_value(item, "quantity"))
    return subtotal


@dataclass(frozen=True)
class ComputedTotals:
    subtotal: Decimal
    shipping_cost: Decimal
    discount_value: Decimal
    taxable_amount: Decimal
    tax: Decimal
    total: Decimal

    @property
    def amount_in_cents(self) -> int:
        return to_minor_units(self.total)


def calculate_totals(
    items: Iterable[Any],
    shipping_cost: Optional[Number] = None,
    discount_value: Optional[Number] = None,
    tax_rate: Optional[Number] = None,
) -> ComputedTotals:
    """
    subtotal = sum(price * quantity)
    taxable  = max(0, subtotal - discount)
    tax      = round(taxable * rate, 2)
    total    = max(0, subtotal + shipping + tax - discount)
    """
    rate = to_decimal(settings.TAX_RATE if tax_rate is None else tax_rate)
    shipping = to_decimal(shipping_cost)
    discount = to_decimal(discount_value)

    subtotal = calculate_subtotal(items)
    taxable_amount = max(ZERO, subtotal - discount)
    tax = round_money(taxable_amount * rate)

    total = subtotal + shipping + tax - discount
    if total < ZERO:
        total = ZERO

    return ComputedTotals(
        subtotal=subtotal,
        shipping_cost=shipping,
        discount_value=discount,
        taxable_amount=taxable_amount,
        tax=tax,
        total=total,
    )
