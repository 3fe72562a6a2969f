"""Shared helpers for order totals and the delivery fee."""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from storefront.core.constants import DELIVERY_FEE, FREE_DELIVERY_FROM

Amount = Decimal | int | float


class PricedLine(Protocol):
    @property
    def line_total(self) -> Decimal: ...


@dataclass(frozen=True)
class PricingPolicy:
    delivery_fee: Decimal | int = DELIVERY_FEE
    free_delivery_from: Decimal | int = FREE_DELIVERY_FROM


DEFAULT_POLICY = PricingPolicy()


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    delivery_fee: Decimal
    grand_total: Decimal

    @property
    def free_delivery(self) -> bool:
        return self.subtotal > 0 and self.delivery_fee == 0


def _to_decimal(value: Amount) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def calc_subtotal(entries: Iterable[PricedLine]) -> Decimal:
    return sum((entry.line_total for entry in entries), Decimal(0))


def calc_delivery_fee(subtotal: Amount, policy: PricingPolicy = DEFAULT_POLICY) -> Decimal:
    """Fixed fee for non-empty carts below the free-delivery threshold.

    An empty cart pays nothing; the threshold itself is already free.
    """
    amount = _to_decimal(subtotal)
    if amount <= 0:
        return Decimal(0)
    if amount < policy.free_delivery_from:
        return Decimal(policy.delivery_fee)
    return Decimal(0)


def calc_grand_total(subtotal: Amount, delivery_fee: Amount) -> Decimal:
    return _to_decimal(subtotal) + _to_decimal(delivery_fee)


def calc_totals(entries: Iterable[PricedLine], policy: PricingPolicy = DEFAULT_POLICY) -> CartTotals:
    subtotal = calc_subtotal(entries)
    fee = calc_delivery_fee(subtotal, policy)
    return CartTotals(subtotal=subtotal, delivery_fee=fee, grand_total=calc_grand_total(subtotal, fee))


def amount_to_free_delivery(subtotal: Amount, policy: PricingPolicy = DEFAULT_POLICY) -> Decimal:
    """How much more the customer must add to get free delivery."""
    amount = _to_decimal(subtotal)
    if amount <= 0 or amount >= policy.free_delivery_from:
        return Decimal(0)
    return Decimal(policy.free_delivery_from) - amount
