"""Catalog loading: cached snapshot first, network refresh always."""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from storefront.core.cache import CatalogCache
from storefront.core.constants import ALL_CATEGORIES
from storefront.core.exceptions import CatalogLoadError
from storefront.domain.entities.product import Product

logger = logging.getLogger(__name__)

CATALOG_LOAD_MESSAGE = "Не удалось загрузить ассортимент."

ProductsCallback = Callable[[list[Product]], None]


class CatalogSource(Protocol):
    async def fetch_products(self) -> list[Product]: ...


@dataclass(frozen=True)
class CatalogLoadResult:
    products: list[Product]
    from_cache: bool
    error: str | None = None


def sort_products(products: Iterable[Product]) -> list[Product]:
    return sorted(products, key=lambda p: (p.sort, p.name))


def categories(products: Iterable[Product]) -> list[str]:
    """Category tabs: the catch-all first, then every category once, sorted."""
    unique = {p.category for p in products if p.category}
    return [ALL_CATEGORIES, *sorted(unique, key=str.casefold)]


def filter_by_category(products: Sequence[Product], category: str) -> list[Product]:
    if not category or category == ALL_CATEGORIES:
        return list(products)
    return [p for p in products if p.category == category]


class CatalogService:
    """Shows a fresh cached catalog immediately, then replaces it from the API.

    A failed refresh is hidden when a fresh cache was already shown and
    raised as :class:`CatalogLoadError` otherwise.
    """

    def __init__(self, source: CatalogSource, cache: CatalogCache):
        self._source = source
        self._cache = cache

    async def load(self, on_products: ProductsCallback | None = None) -> CatalogLoadResult:
        cached = self._cache.read()
        cached_products: list[Product] | None = None
        if cached is not None:
            cached_products = sort_products(cached.products)
            if on_products:
                on_products(cached_products)

        try:
            fetched = await self._source.fetch_products()
        except CatalogLoadError as exc:
            if cached_products is not None:
                logger.warning("Catalog refresh failed, keeping cached list: %s", exc)
                return CatalogLoadResult(products=cached_products, from_cache=True, error=exc.message)
            logger.error("Catalog load failed with no cache to fall back on: %s", exc)
            raise

        products = sort_products(fetched)
        self._cache.write(products)
        if on_products:
            on_products(products)
        return CatalogLoadResult(products=products, from_cache=False)
