"""Business services orchestrating domain logic."""

from .cart import CartEntry, CartStore
from .catalog_service import CatalogLoadResult, CatalogService
from .checkout import CheckoutSession
from .order_service import OrderResult, OrderSubmitter, build_order_payload

__all__ = [
    "CartEntry",
    "CartStore",
    "CatalogLoadResult",
    "CatalogService",
    "CheckoutSession",
    "OrderResult",
    "OrderSubmitter",
    "build_order_payload",
]
