"""
Order submission - single entry point for placing an order.

This service handles:
- Re-validating the checkout form against the cart
- Building the immutable order payload with computed totals
- Sending it once and classifying the outcome
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from storefront.core.exceptions import CheckoutValidationError, SubmitError
from storefront.core.order_math import DEFAULT_POLICY, CartTotals, PricingPolicy, calc_totals
from storefront.core.sanitize import clean_text
from storefront.domain.checkout_rules import validate_checkout
from storefront.domain.order import (
    ANONYMOUS_USER,
    CheckoutFields,
    LineItem,
    OrderConfirmation,
    OrderPayload,
    PlatformUser,
)
from storefront.logging_config import logger
from storefront.services.cart import CartEntry, CartStore


class OrderGateway(Protocol):
    """What the submitter needs from the API client."""

    @property
    def token(self) -> str: ...

    async def place_order(self, payload: dict[str, Any]) -> OrderConfirmation: ...

    async def close(self) -> None: ...


@dataclass
class OrderResult:
    """Result of an order submission."""

    success: bool
    totals: CartTotals
    confirmation: OrderConfirmation | None = None
    error: CheckoutValidationError | SubmitError | None = None

    @property
    def error_message(self) -> str | None:
        return self.error.message if self.error else None


def build_line_items(entries: Iterable[CartEntry]) -> tuple[LineItem, ...]:
    return tuple(
        LineItem(
            id=entry.product.id,
            name=entry.product.name,
            unit=entry.product.unit,
            price=entry.product.price,
            qty=entry.quantity,
        )
        for entry in entries
    )


def build_order_payload(
    fields: CheckoutFields,
    cart: CartStore,
    user: PlatformUser | None = None,
    token: str = "",
    policy: PricingPolicy = DEFAULT_POLICY,
) -> OrderPayload:
    """Snapshot the cart and form into a fresh payload."""
    entries = cart.items()
    totals = calc_totals(entries, policy)
    return OrderPayload(
        name=clean_text(fields.name),
        phone=clean_text(fields.phone),
        address=clean_text(fields.address),
        comment=clean_text(fields.comment),
        items=build_line_items(entries),
        subtotal=totals.subtotal,
        delivery_fee=totals.delivery_fee,
        grand_total=totals.grand_total,
        user=user or ANONYMOUS_USER,
        token=token,
    )


class OrderSubmitter:
    """Validates, builds and sends orders. Never touches the cart."""

    def __init__(self, gateway: OrderGateway, policy: PricingPolicy = DEFAULT_POLICY):
        self.gateway = gateway
        self.policy = policy

    async def submit(
        self,
        fields: CheckoutFields,
        cart: CartStore,
        user: PlatformUser = ANONYMOUS_USER,
    ) -> OrderResult:
        totals = calc_totals(cart.items(), self.policy)

        validation_error = validate_checkout(fields, cart)
        if validation_error is not None:
            logger.info("Order not sent: %s", validation_error.code.value)
            return OrderResult(success=False, totals=totals, error=validation_error)

        payload = build_order_payload(fields, cart, user, self.gateway.token, self.policy)
        logger.info(
            "Placing order: %d items, grand total %s, user %s",
            len(payload.items),
            payload.grand_total,
            user.id if not user.is_anonymous else "anonymous",
        )

        try:
            confirmation = await self.gateway.place_order(payload.to_dict())
        except SubmitError as exc:
            return OrderResult(success=False, totals=totals, error=exc)

        logger.info("Order accepted (id=%s)", confirmation.order_id)
        return OrderResult(success=True, totals=totals, confirmation=confirmation)

    async def close(self) -> None:
        await self.gateway.close()
