"""Cart store - selected products and quantities for one shopping session.

One instance per session, injected into the checkout session. Optionally
mirrors its contents into a key/value store so a reopened Mini App finds
the same cart.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Protocol

from pydantic import ValidationError

from storefront.core.constants import CART_SNAPSHOT_TTL_SECONDS, CART_STORAGE_KEY
from storefront.domain.entities.product import Product
from storefront.logging_config import logger


class SnapshotStore(Protocol):
    """Subset of the key/value API the cart needs for persistence."""

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any, ttl: int | None = None) -> None: ...

    def delete(self, key: str) -> None: ...


@dataclass
class CartEntry:
    """Single product in the cart. ``quantity`` is always >= 1."""

    product: Product
    quantity: int

    @property
    def product_id(self) -> str:
        return self.product.id

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {"product": self.product.to_dict(), "quantity": self.quantity}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CartEntry:
        return cls(
            product=Product.model_validate(data["product"]),
            quantity=int(data["quantity"]),
        )


class CartStore:
    """Quantity-keyed collection of products.

    Every mutation goes through :meth:`set_quantity` or removes the entry
    outright, so a stored entry never has a quantity below one.
    """

    def __init__(self, snapshots: SnapshotStore | None = None, key: str = CART_STORAGE_KEY):
        self._entries: dict[str, CartEntry] = {}
        self._snapshots = snapshots
        self._key = key

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._entries

    def add(self, product: Product) -> CartEntry:
        """Add one unit of ``product``; creates the entry on first add."""
        current = self.quantity_of(product.id)
        self.set_quantity(product.id, current + 1, product=product)
        return self._entries[product.id]

    def set_quantity(self, product_id: str, quantity: int, product: Product | None = None) -> bool:
        """Set the quantity for ``product_id``; ``quantity <= 0`` removes it.

        Creating an entry that is not in the cart yet needs ``product``.
        Returns True if the cart changed.
        """
        if quantity <= 0:
            return self.remove(product_id)

        existing = self._entries.get(product_id)
        snapshot = product or (existing.product if existing else None)
        if snapshot is None:
            logger.debug("set_quantity ignored for unknown product %s", product_id)
            return False

        self._entries[product_id] = CartEntry(product=snapshot, quantity=int(quantity))
        self._save()
        return True

    def increment(self, product_id: str) -> bool:
        if product_id not in self._entries:
            return False
        return self.set_quantity(product_id, self.quantity_of(product_id) + 1)

    def decrement(self, product_id: str) -> bool:
        if product_id not in self._entries:
            return False
        return self.set_quantity(product_id, self.quantity_of(product_id) - 1)

    def remove(self, product_id: str) -> bool:
        if self._entries.pop(product_id, None) is None:
            return False
        self._save()
        return True

    def clear(self) -> None:
        self._entries.clear()
        self._save()

    def get(self, product_id: str) -> CartEntry | None:
        return self._entries.get(product_id)

    def quantity_of(self, product_id: str) -> int:
        entry = self._entries.get(product_id)
        return entry.quantity if entry else 0

    def items(self) -> list[CartEntry]:
        return list(self._entries.values())

    def count(self) -> int:
        """Total number of units, shown on the cart badge."""
        return sum(entry.quantity for entry in self._entries.values())

    def is_empty(self) -> bool:
        return not self._entries

    def _save(self) -> None:
        if self._snapshots is None:
            return
        try:
            if self._entries:
                self._snapshots.set(
                    self._key,
                    [entry.to_dict() for entry in self._entries.values()],
                    ttl=CART_SNAPSHOT_TTL_SECONDS,
                )
            else:
                self._snapshots.delete(self._key)
        except Exception as exc:
            logger.warning("Failed to persist cart snapshot: %s", exc)

    def restore(self) -> int:
        """Reload entries from the snapshot store; returns how many were kept."""
        if self._snapshots is None:
            return 0
        try:
            raw = self._snapshots.get(self._key)
        except Exception as exc:
            logger.warning("Failed to load cart snapshot: %s", exc)
            return 0
        if not isinstance(raw, list):
            return 0

        restored: dict[str, CartEntry] = {}
        for item in raw:
            try:
                entry = CartEntry.from_dict(item)
            except (KeyError, TypeError, ValueError, ValidationError) as exc:
                logger.warning("Skipping malformed cart snapshot entry: %s", exc)
                continue
            if entry.quantity <= 0:
                continue
            restored[entry.product_id] = entry

        self._entries = restored
        return len(restored)
