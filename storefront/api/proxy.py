"""Same-origin proxy for the spreadsheet API.

The Mini App calls ``/api/products`` and ``/api/order`` on its own origin;
the proxy forwards to Apps Script and adds the secret token server-side so
it never ships to the browser.
"""
from __future__ import annotations

import json
from collections.abc import AsyncIterator

import aiohttp
from aiohttp import web

from storefront.core.config import Settings
from storefront.logging_config import logger

SETTINGS_KEY = web.AppKey("settings", Settings)
SESSION_KEY = web.AppKey("upstream_session", aiohttp.ClientSession)

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
}


def add_cors_headers(response: web.StreamResponse, methods: str) -> web.StreamResponse:
    """Add CORS headers to response."""
    response.headers.update(_CORS_HEADERS)
    response.headers["Access-Control-Allow-Methods"] = methods
    return response


def _json_error(message: str, status: int, methods: str) -> web.StreamResponse:
    return add_cors_headers(web.json_response({"error": message}, status=status), methods)


async def _relay(upstream: aiohttp.ClientResponse, methods: str) -> web.StreamResponse:
    text = await upstream.text()
    response = web.Response(text=text, status=upstream.status, content_type="application/json")
    return add_cors_headers(response, methods)


async def products_handler(request: web.Request) -> web.StreamResponse:
    """GET /api/products - forward to ?action=products."""
    methods = "GET,OPTIONS"
    if request.method == "OPTIONS":
        return add_cors_headers(web.Response(text="ok"), methods)

    settings = request.app[SETTINGS_KEY]
    if not settings.api_url:
        return _json_error("Missing GS_API_URL env var", 500, methods)

    session = request.app[SESSION_KEY]
    try:
        async with session.get(
            settings.api_url,
            params={"action": "products"},
            headers={"Accept": "application/json"},
            timeout=aiohttp.ClientTimeout(total=settings.catalog_timeout),
        ) as upstream:
            return await _relay(upstream, methods)
    except Exception as exc:
        logger.error("Products proxy error: %s", exc)
        return _json_error(str(exc) or exc.__class__.__name__, 500, methods)


async def order_handler(request: web.Request) -> web.StreamResponse:
    """POST /api/order - inject the token and forward to ?action=order."""
    methods = "POST,OPTIONS"
    settings = request.app[SETTINGS_KEY]
    if not settings.api_url:
        return _json_error("Missing GS_API_URL env var", 500, methods)
    if not settings.api_token:
        return _json_error("Missing GS_API_TOKEN env var", 500, methods)

    if request.method == "OPTIONS":
        return add_cors_headers(web.Response(text="ok"), methods)
    if request.method != "POST":
        return _json_error("Method not allowed", 405, methods)

    raw = await request.text()
    try:
        body = json.loads(raw) if raw.strip() else {}
    except ValueError:
        return _json_error("Request body is not valid JSON", 400, methods)
    if not isinstance(body, dict):
        return _json_error("Request body must be a JSON object", 400, methods)

    body["token"] = settings.api_token

    session = request.app[SESSION_KEY]
    try:
        async with session.post(
            settings.api_url,
            params={"action": "order"},
            data=json.dumps(body, ensure_ascii=False).encode("utf-8"),
            headers={
                "Content-Type": "text/plain;charset=UTF-8",
                "Accept": "application/json",
            },
            timeout=aiohttp.ClientTimeout(total=settings.order_timeout),
        ) as upstream:
            logger.info("Order forwarded, upstream status %s", upstream.status)
            return await _relay(upstream, methods)
    except Exception as exc:
        logger.error("Order proxy error: %s", exc)
        return _json_error(str(exc) or exc.__class__.__name__, 500, methods)


async def _upstream_session(app: web.Application) -> AsyncIterator[None]:
    session = aiohttp.ClientSession()
    app[SESSION_KEY] = session
    yield
    await session.close()


def create_proxy_app(settings: Settings) -> web.Application:
    app = web.Application()
    app[SETTINGS_KEY] = settings
    app.cleanup_ctx.append(_upstream_session)

    app.router.add_get("/api/products", products_handler)
    app.router.add_options("/api/products", products_handler)
    app.router.add_route("*", "/api/order", order_handler)
    return app


def run_proxy_server(settings: Settings) -> None:
    logger.info("Starting storefront proxy on %s:%s", settings.server.host, settings.server.port)
    web.run_app(
        create_proxy_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        print=None,
    )
