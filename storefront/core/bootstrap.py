"""Wiring helpers that assemble a storefront session from settings."""
from __future__ import annotations

from dataclasses import dataclass

from storefront.core.cache import CatalogCache
from storefront.core.config import Settings
from storefront.core.constants import CART_STORAGE_KEY
from storefront.core.order_math import PricingPolicy
from storefront.core.telegram_auth import user_from_init_data
from storefront.domain.order import PlatformUser
from storefront.integrations.redis_store import RedisStore
from storefront.integrations.sheets_client import SheetsApiClient, SheetsApiConfig
from storefront.services.cart import CartStore
from storefront.services.catalog_service import CatalogService
from storefront.services.checkout import CheckoutSession
from storefront.services.order_service import OrderSubmitter


@dataclass
class Storefront:
    client: SheetsApiClient
    catalog: CatalogService
    session: CheckoutSession

    async def close(self) -> None:
        await self.session.close()


def build_application(
    settings: Settings,
    user: PlatformUser | None = None,
    store: RedisStore | None = None,
    init_data: str | None = None,
) -> Storefront:
    """Create the API client, catalog service and checkout session.

    Without an explicit ``user`` the shopper is taken from Telegram
    ``init_data``, verified with ``TELEGRAM_BOT_TOKEN`` when it is set.
    The cart is restored from the snapshot store for that user.
    """
    if user is None:
        user = user_from_init_data(init_data, settings.telegram_bot_token)
    store = store or RedisStore(settings.redis_url)
    client = SheetsApiClient(SheetsApiConfig.from_settings(settings))
    policy = PricingPolicy(
        delivery_fee=settings.delivery_fee,
        free_delivery_from=settings.free_delivery_from,
    )

    cart_key = f"{CART_STORAGE_KEY}:{user.id if user.id is not None else 'anonymous'}"
    cart = CartStore(snapshots=store, key=cart_key)
    cart.restore()

    catalog = CatalogService(client, CatalogCache(store, ttl=settings.catalog_cache_ttl))
    session = CheckoutSession(cart, OrderSubmitter(client, policy), user)
    return Storefront(client=client, catalog=catalog, session=session)
