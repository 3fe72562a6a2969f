"""Order domain types: customer fields, line items and the wire payload."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any


def json_number(value: Decimal | int | float) -> int | float:
    """Emit integral amounts as JSON integers, everything else as floats."""
    if isinstance(value, int):
        return value
    dec = Decimal(str(value)) if not isinstance(value, Decimal) else value
    if dec == dec.to_integral_value():
        return int(dec)
    return float(dec)


@dataclass(frozen=True)
class PlatformUser:
    """Telegram user who opened the Mini App; all fields optional."""

    id: int | None = None
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None

    @property
    def is_anonymous(self) -> bool:
        return self.id is None and not (self.username or self.first_name or self.last_name)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> PlatformUser:
        if not data:
            return ANONYMOUS_USER
        raw_id = data.get("id")
        try:
            user_id = int(raw_id) if raw_id is not None else None
        except (TypeError, ValueError):
            user_id = None
        user = cls(
            id=user_id,
            username=data.get("username") or None,
            first_name=data.get("first_name") or None,
            last_name=data.get("last_name") or None,
        )
        return ANONYMOUS_USER if user.is_anonymous else user

    def to_payload(self) -> dict[str, Any]:
        if self.is_anonymous:
            return {}
        return {
            "id": self.id,
            "username": self.username,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }


ANONYMOUS_USER = PlatformUser()


@dataclass
class CheckoutFields:
    """Customer input exactly as typed into the checkout form."""

    name: str = ""
    phone: str = ""
    address: str = ""
    comment: str = ""


@dataclass(frozen=True)
class LineItem:
    """Single product line in an order."""

    id: str
    name: str
    unit: str
    price: Decimal
    qty: int

    @property
    def sum(self) -> Decimal:
        return self.price * self.qty

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "unit": self.unit,
            "price": json_number(self.price),
            "qty": self.qty,
            "sum": json_number(self.sum),
        }


@dataclass(frozen=True)
class OrderPayload:
    """Immutable snapshot sent to the order endpoint.

    Built fresh for every submission attempt from the cart and the form.
    """

    name: str
    phone: str
    address: str
    comment: str
    items: tuple[LineItem, ...]
    subtotal: Decimal
    delivery_fee: Decimal
    grand_total: Decimal
    user: PlatformUser = ANONYMOUS_USER
    token: str = field(default="", repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "name": self.name,
            "phone": self.phone,
            "address": self.address,
            "comment": self.comment,
            "items": [item.to_dict() for item in self.items],
            "total": json_number(self.subtotal),
            "delivery": json_number(self.delivery_fee),
            "grandTotal": json_number(self.grand_total),
            "tg": self.user.to_payload(),
        }


@dataclass(frozen=True)
class OrderConfirmation:
    """Successful response of the order endpoint."""

    order_id: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)
