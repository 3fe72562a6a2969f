"""Shared pytest fixtures: products, settings and a fake spreadsheet API."""
from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer

from storefront.core.config import ServerConfig, Settings
from storefront.domain.entities.product import Product
from storefront.domain.order import CheckoutFields
from storefront.integrations.sheets_client import SheetsApiClient, SheetsApiConfig


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch) -> None:
    """Keep a developer's .env / shell from leaking into settings tests."""
    for name in (
        "GS_API_URL",
        "GS_API_TOKEN",
        "STOREFRONT_PROXY_URL",
        "ORDER_TIMEOUT_SECONDS",
        "CATALOG_TIMEOUT_SECONDS",
        "CATALOG_CACHE_TTL_SECONDS",
        "DELIVERY_FEE",
        "FREE_DELIVERY_FROM",
        "SEND_TOKEN_HEADER",
        "REDIS_URL",
        "TELEGRAM_BOT_TOKEN",
        "PORT",
        "HOST",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("storefront.core.config.load_dotenv", lambda *a, **kw: False)


def make_product(
    product_id: str = "P1",
    price: int | str = 500,
    name: str = "Молоко",
    category: str = "Молочка",
    unit: str = "л",
    sort: float = 0,
) -> Product:
    return Product(
        id=product_id,
        category=category,
        name=name,
        unit=unit,
        price=Decimal(str(price)),
        sort=sort,
    )


@pytest.fixture()
def milk() -> Product:
    return make_product("P1", 500, "Молоко")


@pytest.fixture()
def cheese() -> Product:
    return make_product("P2", 1500, "Сыр", unit="кг", sort=2)


@pytest.fixture()
def valid_fields() -> CheckoutFields:
    return CheckoutFields(
        name="  Анна ",
        phone=" +7 900 123-45-67 ",
        address=" ул. Полевая, 5 ",
        comment=" позвонить заранее ",
    )


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "api_url": "http://sheets.invalid/exec",
        "api_token": "secret-token",
        "proxy_url": "",
        "order_timeout": 15,
        "catalog_timeout": 15,
        "catalog_cache_ttl": 600,
        "delivery_fee": 200,
        "free_delivery_from": 2000,
        "send_token_header": False,
        "redis_url": None,
        "telegram_bot_token": None,
        "log_level": "INFO",
        "server": ServerConfig(host="127.0.0.1", port=8080),
    }
    values.update(overrides)
    return Settings(**values)


@dataclass
class FakeSheetsApi:
    """In-process stand-in for the Apps Script endpoint."""

    products_status: int = 200
    products_body: Any = field(
        default_factory=lambda: {
            "products": [
                {"id": 1, "category": "Овощи", "name": "Картофель", "unit": "кг", "price": 60, "sort": 2},
                {"id": "P2", "category": "Молочка", "name": "Молоко", "unit": "л", "price": 120, "sort": 1},
            ]
        }
    )
    order_status: int = 200
    order_body: Any = field(default_factory=lambda: {"ok": True, "orderId": "A-1"})
    order_delay: float = 0.0
    orders: list[dict[str, Any]] = field(default_factory=list)
    product_requests: int = 0

    async def handle(self, request: web.Request) -> web.Response:
        action = request.query.get("action")
        if request.method == "GET" and action == "products":
            self.product_requests += 1
            return self._reply(self.products_status, self.products_body)
        if request.method == "POST" and action == "order":
            raw = await request.text()
            self.orders.append(
                {
                    "body": json.loads(raw) if raw else None,
                    "content_type": request.headers.get("Content-Type", ""),
                    "token_header": request.headers.get("X-Api-Token"),
                }
            )
            if self.order_delay:
                await asyncio.sleep(self.order_delay)
            return self._reply(self.order_status, self.order_body)
        return web.json_response({"error": "unknown action"}, status=400)

    @staticmethod
    def _reply(status: int, body: Any) -> web.Response:
        if isinstance(body, bytes):
            return web.Response(body=body, status=status, content_type="application/json", charset="utf-8")
        if isinstance(body, str):
            return web.Response(text=body, status=status)
        return web.json_response(body, status=status)


@pytest.fixture()
async def sheets_api():
    """Start a fake spreadsheet API; yields (fake, url)."""
    fake = FakeSheetsApi()
    app = web.Application()
    app.router.add_route("*", "/exec", fake.handle)
    server = TestServer(app)
    await server.start_server()
    try:
        yield fake, str(server.make_url("/exec"))
    finally:
        await server.close()


@pytest.fixture()
async def sheets_client(sheets_api):
    _fake, url = sheets_api
    client = SheetsApiClient(SheetsApiConfig(api_url=url, token="secret-token"))
    try:
        yield client
    finally:
        await client.close()


@pytest.fixture()
async def aiohttp_client():
    """Minimal aiohttp_client fixture to avoid pytest-aiohttp dependency."""
    clients: list[TestClient] = []

    async def _make_client(app: web.Application) -> TestClient:
        client = TestClient(TestServer(app))
        await client.start_server()
        clients.append(client)
        return client

    try:
        yield _make_client
    finally:
        for client in clients:
            await client.close()
