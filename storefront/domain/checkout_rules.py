"""Checkout validation rules.

Rules are checked in a fixed order and the first failure is the one shown
to the customer. Nothing here touches the network or mutates state.
"""
from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from storefront.core.constants import MIN_ADDRESS_LENGTH, MIN_NAME_LENGTH, MIN_PHONE_LENGTH
from storefront.core.exceptions import CheckoutValidationError, ValidationCode
from storefront.core.sanitize import clean_text
from storefront.domain.order import CheckoutFields


class CartLike(Protocol):
    def is_empty(self) -> bool: ...


MESSAGES: dict[ValidationCode, str] = {
    ValidationCode.NAME_TOO_SHORT: f"Укажи имя (минимум {MIN_NAME_LENGTH} символа).",
    ValidationCode.PHONE_TOO_SHORT: f"Укажи телефон (минимум {MIN_PHONE_LENGTH} символов).",
    ValidationCode.ADDRESS_TOO_SHORT: f"Укажи адрес доставки (минимум {MIN_ADDRESS_LENGTH} символов).",
    ValidationCode.CART_EMPTY: "Корзина пустая.",
}

Rule = Callable[[CheckoutFields, CartLike], bool]

_RULES: tuple[tuple[ValidationCode, Rule], ...] = (
    (ValidationCode.NAME_TOO_SHORT, lambda f, _c: len(clean_text(f.name)) >= MIN_NAME_LENGTH),
    # Length only; international formats vary too much for a pattern.
    (ValidationCode.PHONE_TOO_SHORT, lambda f, _c: len(clean_text(f.phone)) >= MIN_PHONE_LENGTH),
    (ValidationCode.ADDRESS_TOO_SHORT, lambda f, _c: len(clean_text(f.address)) >= MIN_ADDRESS_LENGTH),
    (ValidationCode.CART_EMPTY, lambda _f, c: not c.is_empty()),
)


def make_error(code: ValidationCode) -> CheckoutValidationError:
    return CheckoutValidationError(code, MESSAGES[code])


def collect_checkout_errors(fields: CheckoutFields, cart: CartLike) -> list[CheckoutValidationError]:
    """Every failing rule, in check order."""
    return [make_error(code) for code, passes in _RULES if not passes(fields, cart)]


def validate_checkout(fields: CheckoutFields, cart: CartLike) -> CheckoutValidationError | None:
    """Return the first failing rule, or ``None`` if the order may be sent."""
    for code, passes in _RULES:
        if not passes(fields, cart):
            return make_error(code)
    return None
