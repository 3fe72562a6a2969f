"""
Spreadsheet API client - the remote service behind the storefront.

Two logical operations:
- GET  ?action=products  -> {"products": [...]} or {"error": "..."}
- POST ?action=order     -> {"ok": true} / {"ok": false, "error": "..."}

Direct topology talks to the Apps Script URL and carries the token in the
payload. Proxy topology talks to ``<proxy>/products`` and ``<proxy>/order``;
the proxy injects the real token, request and response shapes are unchanged.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any

import aiohttp
from pydantic import ValidationError

from storefront.core.config import Settings
from storefront.core.constants import CATALOG_TIMEOUT_SECONDS, ORDER_TIMEOUT_SECONDS
from storefront.core.exceptions import (
    CatalogLoadError,
    ConfigurationException,
    SubmitError,
    SubmitErrorKind,
)
from storefront.domain.entities.product import Product
from storefront.domain.order import OrderConfirmation
from storefront.logging_config import logger

NETWORK_ERROR_MESSAGE = "Failed to fetch"
TIMEOUT_MESSAGE = "Сервер не ответил вовремя"


@dataclass
class SheetsApiConfig:
    """Where and how to reach the spreadsheet API."""

    api_url: str = ""
    token: str = ""
    proxy_url: str = ""
    order_timeout: float = ORDER_TIMEOUT_SECONDS
    catalog_timeout: float = CATALOG_TIMEOUT_SECONDS
    send_token_header: bool = False
    # Apps Script rejects the CORS preflight that application/json triggers
    plain_text_body: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> SheetsApiConfig:
        return cls(
            api_url=settings.api_url,
            token=settings.api_token,
            proxy_url=settings.proxy_url,
            order_timeout=settings.order_timeout,
            catalog_timeout=settings.catalog_timeout,
            send_token_header=settings.send_token_header,
        )

    @property
    def uses_proxy(self) -> bool:
        return bool(self.proxy_url)


class SheetsApiClient:
    """
    aiohttp client for the catalog and order endpoints.

    Пример использования:
    ```python
    client = SheetsApiClient(SheetsApiConfig(api_url=url, token=token))
    products = await client.fetch_products()
    await client.close()
    ```
    """

    def __init__(self, config: SheetsApiConfig):
        if not config.api_url and not config.proxy_url:
            raise ConfigurationException("Spreadsheet API URL is not configured")
        if not config.uses_proxy and not config.token:
            raise ConfigurationException(
                "GS_API_TOKEN is not set; orders cannot be sent without it"
            )
        self.config = config
        self._session: aiohttp.ClientSession | None = None

    @property
    def token(self) -> str:
        return self.config.token

    async def _get_session(self) -> aiohttp.ClientSession:
        """Получить или создать HTTP сессию."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers={"Accept": "application/json"})
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    def _endpoint(self, action: str) -> tuple[str, dict[str, str]]:
        if self.config.uses_proxy:
            return f"{self.config.proxy_url.rstrip('/')}/{action}", {}
        return self.config.api_url, {"action": action}

    @staticmethod
    async def _read_text(response: aiohttp.ClientResponse) -> str:
        """Response body as text; undecodable bytes become U+FFFD."""
        raw = await response.read()
        try:
            return raw.decode(response.charset or "utf-8", errors="replace")
        except LookupError:
            return raw.decode("utf-8", errors="replace")

    @staticmethod
    def _decode(text: str) -> dict[str, Any]:
        try:
            data = json.loads(text) if text else {}
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    async def fetch_products(self) -> list[Product]:
        """Fetch the product list; malformed rows are skipped."""
        url, params = self._endpoint("products")
        timeout = aiohttp.ClientTimeout(total=self.config.catalog_timeout)
        session = await self._get_session()

        try:
            async with session.get(url, params=params, timeout=timeout) as response:
                text = await self._read_text(response)
                status = response.status
        except asyncio.TimeoutError as exc:
            raise CatalogLoadError("Catalog request timed out") from exc
        except aiohttp.ClientError as exc:
            raise CatalogLoadError(f"Catalog request failed: {exc}") from exc

        data = self._decode(text)
        if status >= 400 or data.get("error"):
            raise CatalogLoadError(str(data.get("error") or f"HTTP {status}"))

        rows = data.get("products")
        if not isinstance(rows, list):
            raise CatalogLoadError("Catalog response has no product list")

        products: list[Product] = []
        for row in rows:
            try:
                products.append(Product.model_validate(row))
            except ValidationError as exc:
                logger.warning("Skipping malformed product row %r: %s", row, exc)
        logger.info("Fetched %d products", len(products))
        return products

    async def place_order(self, payload: dict[str, Any]) -> OrderConfirmation:
        """Send one order. Raises :class:`SubmitError`; never retries."""
        url, params = self._endpoint("order")
        timeout = aiohttp.ClientTimeout(total=self.config.order_timeout)
        headers = {
            "Content-Type": (
                "text/plain;charset=UTF-8" if self.config.plain_text_body else "application/json"
            ),
        }
        if self.config.send_token_header and self.config.token:
            headers["X-Api-Token"] = self.config.token
        body = json.dumps(payload, ensure_ascii=False)
        session = await self._get_session()

        try:
            async with session.post(
                url, params=params, data=body.encode("utf-8"), headers=headers, timeout=timeout
            ) as response:
                text = await self._read_text(response)
                status = response.status
        except asyncio.TimeoutError as exc:
            logger.warning("Order request timed out after %ss", self.config.order_timeout)
            raise SubmitError(SubmitErrorKind.TIMEOUT, TIMEOUT_MESSAGE) from exc
        except aiohttp.ClientError as exc:
            logger.warning("Order request failed: %s", exc)
            raise SubmitError(SubmitErrorKind.NETWORK_ERROR, NETWORK_ERROR_MESSAGE) from exc

        data = self._decode(text)
        if status >= 400 or data.get("error") or data.get("ok") is False:
            reason = str(data.get("error") or f"HTTP {status}")
            logger.warning("Order rejected by server: %s", reason)
            raise SubmitError(SubmitErrorKind.SERVER_REJECTED, reason, status=status)

        order_id = data.get("orderId") or data.get("id")
        return OrderConfirmation(order_id=str(order_id) if order_id else None, raw=data)
