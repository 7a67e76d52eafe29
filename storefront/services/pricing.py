"""Order totals.

All money is ``Decimal`` rounded half-up to whole cents. Each figure is
rounded on its own so ``total == subtotal + shipping + tax`` holds exactly.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from storefront.config import settings

CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    shipping_cost: Decimal
    tax: Decimal
    total: Decimal


def shipping_for(subtotal: Decimal) -> Decimal:
    if subtotal >= to_money(settings.free_shipping_threshold):
        return to_money(0)
    return to_money(settings.shipping_flat_rate)


def calculate_totals(lines: Iterable) -> PriceBreakdown:
    """``lines`` are objects or dicts exposing ``price`` and ``quantity``."""
    subtotal = Decimal("0")
    for line in lines:
        if isinstance(line, dict):
            price, quantity = line["price"], line["quantity"]
        else:
            price, quantity = line.price, line.quantity
        subtotal += to_money(price) * int(quantity)

    subtotal = to_money(subtotal)
    shipping_cost = shipping_for(subtotal)
    tax = to_money(subtotal * Decimal(str(settings.tax_rate)))

    return PriceBreakdown(
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        tax=tax,
        total=to_money(subtotal + shipping_cost + tax),
    )
