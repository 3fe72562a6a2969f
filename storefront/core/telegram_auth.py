"""
Telegram Mini App identity.

Turns ``window.Telegram.WebApp.initData`` into a :class:`PlatformUser`,
checking the signature when the bot token is known.
"""
from __future__ import annotations

import hashlib
import hmac
import json
import logging
from typing import Any
from urllib.parse import parse_qsl

from storefront.domain.order import ANONYMOUS_USER, PlatformUser

logger = logging.getLogger(__name__)


def _data_check_string(fields: dict[str, str]) -> str:
    return "\n".join(f"{k}={v}" for k, v in sorted(fields.items()))


def sign_init_data(fields: dict[str, str], bot_token: str) -> str:
    """Compute the ``hash`` Telegram attaches to initData."""
    secret_key = hmac.new(
        key=b"WebAppData",
        msg=bot_token.encode(),
        digestmod=hashlib.sha256,
    ).digest()
    return hmac.new(
        key=secret_key,
        msg=_data_check_string(fields).encode(),
        digestmod=hashlib.sha256,
    ).hexdigest()


def validate_telegram_webapp_data(init_data: str, bot_token: str) -> dict[str, Any] | None:
    """
    Validate Telegram WebApp initData signature.

    Based on: https://core.telegram.org/bots/webapps#validating-data-received-via-the-mini-app

    Args:
        init_data: Raw initData from window.Telegram.WebApp.initData
        bot_token: Telegram Bot Token

    Returns:
        Parsed data if valid, None otherwise
    """
    parsed_data = dict(parse_qsl(init_data))
    received_hash = parsed_data.pop("hash", None)
    if not received_hash:
        return None

    computed_hash = sign_init_data(parsed_data, bot_token)
    if not hmac.compare_digest(computed_hash, received_hash):
        return None

    if "user" in parsed_data:
        try:
            parsed_data["user"] = json.loads(parsed_data["user"])
        except ValueError:
            return None
    return parsed_data


def user_from_init_data(init_data: str | None, bot_token: str | None = None) -> PlatformUser:
    """Best-effort identity; anything missing or invalid is anonymous."""
    if not init_data:
        return ANONYMOUS_USER

    if bot_token:
        data = validate_telegram_webapp_data(init_data, bot_token)
        if data is None:
            logger.warning("Rejected Telegram initData with a bad signature")
            return ANONYMOUS_USER
        user = data.get("user")
    else:
        raw_user = dict(parse_qsl(init_data)).get("user")
        try:
            user = json.loads(raw_user) if raw_user else None
        except ValueError:
            user = None

    return PlatformUser.from_dict(user if isinstance(user, dict) else None)
