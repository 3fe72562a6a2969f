"""Environment-driven configuration objects for the storefront."""
from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv

from storefront.core import constants
from storefront.core.exceptions import ConfigurationException


def _str_to_bool(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"true", "1", "yes", "y", "on"}


def _env_number(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationException(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigurationException(f"{name} must not be negative")
    return value


def _env_amount(name: str, default: int) -> Decimal:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return Decimal(default)
    try:
        value = Decimal(raw.strip())
    except InvalidOperation as exc:
        raise ConfigurationException(f"{name} must be a number, got {raw!r}") from exc
    if not value.is_finite() or value < 0:
        raise ConfigurationException(f"{name} must be a non-negative amount")
    return value


@dataclass(slots=True)
class ServerConfig:
    host: str
    port: int


@dataclass(slots=True)
class Settings:
    api_url: str
    api_token: str
    proxy_url: str
    order_timeout: float
    catalog_timeout: float
    catalog_cache_ttl: float
    delivery_fee: Decimal
    free_delivery_from: Decimal
    send_token_header: bool
    redis_url: str | None
    telegram_bot_token: str | None
    log_level: str
    server: ServerConfig

    @property
    def uses_proxy(self) -> bool:
        """Client calls go through the same-origin proxy."""
        return bool(self.proxy_url)


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    api_url = os.getenv("GS_API_URL", "").strip()
    proxy_url = os.getenv("STOREFRONT_PROXY_URL", "").strip().rstrip("/")
    if not api_url and not proxy_url:
        raise ConfigurationException(
            "GS_API_URL environment variable is not set (or set STOREFRONT_PROXY_URL)"
        )

    try:
        port = int(os.getenv("PORT", "8080"))
    except ValueError as exc:
        raise ConfigurationException("PORT must be an integer") from exc

    return Settings(
        api_url=api_url,
        api_token=os.getenv("GS_API_TOKEN", "").strip(),
        proxy_url=proxy_url,
        order_timeout=_env_number("ORDER_TIMEOUT_SECONDS", constants.ORDER_TIMEOUT_SECONDS),
        catalog_timeout=_env_number("CATALOG_TIMEOUT_SECONDS", constants.CATALOG_TIMEOUT_SECONDS),
        catalog_cache_ttl=_env_number(
            "CATALOG_CACHE_TTL_SECONDS", constants.CATALOG_CACHE_TTL_SECONDS
        ),
        delivery_fee=_env_amount("DELIVERY_FEE", constants.DELIVERY_FEE),
        free_delivery_from=_env_amount("FREE_DELIVERY_FROM", constants.FREE_DELIVERY_FROM),
        send_token_header=_str_to_bool(os.getenv("SEND_TOKEN_HEADER")),
        redis_url=os.getenv("REDIS_URL") or None,
        telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN") or None,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        server=ServerConfig(
            host=os.getenv("HOST", "0.0.0.0"),
            port=port,
        ),
    )
