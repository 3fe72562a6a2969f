"""Domain package."""

from .entities import Product
from .order import (
    ANONYMOUS_USER,
    CheckoutFields,
    LineItem,
    OrderConfirmation,
    OrderPayload,
    PlatformUser,
)

__all__ = [
    # Entities
    "Product",
    # Order types
    "ANONYMOUS_USER",
    "CheckoutFields",
    "LineItem",
    "OrderConfirmation",
    "OrderPayload",
    "PlatformUser",
]
