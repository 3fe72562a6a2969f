"""Time-boxed local snapshot of the product catalog."""
from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from pydantic import ValidationError

from storefront.core.constants import CATALOG_CACHE_KEY, CATALOG_CACHE_TTL_SECONDS
from storefront.domain.entities.product import Product
from storefront.logging_config import logger


class CacheStoreProto(Protocol):
    """Subset of the key/value API required by the catalog cache."""

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any, ttl: int | None = None) -> None: ...


@dataclass(frozen=True)
class CachedCatalog:
    timestamp: float
    products: tuple[Product, ...]

    def age(self, now: float) -> float:
        return now - self.timestamp


class CatalogCache:
    """Stale-but-fast product list shown while a refresh is in flight."""

    def __init__(
        self,
        store: CacheStoreProto,
        ttl: float = CATALOG_CACHE_TTL_SECONDS,
        key: str = CATALOG_CACHE_KEY,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self._ttl = ttl
        self._key = key
        self._clock = clock

    @property
    def ttl(self) -> float:
        return self._ttl

    def is_fresh(self, cached: CachedCatalog) -> bool:
        return self._clock() - cached.timestamp < self._ttl

    def _load(self) -> CachedCatalog | None:
        raw = self._store.get(self._key)
        if not isinstance(raw, dict):
            return None
        try:
            timestamp = float(raw["ts"])
            products = tuple(Product.model_validate(item) for item in raw["products"])
        except (KeyError, TypeError, ValueError, ValidationError) as exc:
            logger.warning("Ignoring unreadable catalog cache: %s", exc)
            return None
        return CachedCatalog(timestamp=timestamp, products=products)

    def read(self) -> CachedCatalog | None:
        """Return the cached catalog if it is still fresh."""
        cached = self._load()
        if cached is None or not self.is_fresh(cached):
            return None
        return cached

    def write(self, products: Iterable[Product]) -> CachedCatalog:
        """Overwrite the snapshot with ``products`` stamped now."""
        snapshot = CachedCatalog(timestamp=self._clock(), products=tuple(products))
        self._store.set(
            self._key,
            {
                "ts": snapshot.timestamp,
                "products": [product.to_dict() for product in snapshot.products],
            },
        )
        return snapshot
