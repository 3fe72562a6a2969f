"""Redis-backed JSON key/value store with TTL and in-memory fallback."""
from __future__ import annotations

import json
import os
import time
from typing import Any

import redis

from storefront.logging_config import logger


class RedisStore:
    """JSON documents persisted in Redis; falls back to process memory.

    The fallback kicks in when ``REDIS_URL`` is not set, when the initial
    ping fails, or on the first Redis error at runtime.
    """

    def __init__(self, redis_url: str | None = None, prefix: str = "storefront"):
        self._redis_url = redis_url or os.getenv("REDIS_URL")
        self._prefix = prefix
        self._client = self._init_client()
        self._memory: dict[str, tuple[str, float | None]] = {}

    @property
    def is_redis(self) -> bool:
        return self._client is not None

    def _switch_to_memory_fallback(self, reason: Exception | str) -> None:
        logger.warning("Redis store fallback to memory mode: %s", reason)
        self._client = None

    def _init_client(self):
        if not self._redis_url:
            logger.debug("REDIS_URL is not set; store uses in-memory fallback")
            return None

        try:
            client = redis.from_url(
                self._redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            client.ping()
            logger.info("Redis store enabled")
            return client
        except Exception as exc:
            logger.warning("Redis store init failed, fallback to in-memory: %s", exc)
            return None

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    def _memory_get(self, key: str) -> str | None:
        entry = self._memory.get(key)
        if entry is None:
            return None
        raw, expires = entry
        if expires is not None and time.time() > expires:
            self._memory.pop(key, None)
            return None
        return raw

    def _memory_set(self, key: str, raw: str, ttl: int | None) -> None:
        expires = time.time() + ttl if ttl else None
        self._memory[key] = (raw, expires)

    def get(self, key: str) -> Any:
        """Return the decoded document or ``None`` if missing or corrupt."""
        full_key = self._key(key)
        raw: str | None
        if self._client:
            try:
                raw = self._client.get(full_key)
            except Exception as exc:
                self._switch_to_memory_fallback(exc)
                raw = self._memory_get(full_key)
        else:
            raw = self._memory_get(full_key)

        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding corrupt value under %s", full_key)
            return None

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        full_key = self._key(key)
        serialized = json.dumps(value, ensure_ascii=False)
        if self._client:
            try:
                if ttl:
                    self._client.setex(full_key, int(ttl), serialized)
                else:
                    self._client.set(full_key, serialized)
                return
            except Exception as exc:
                self._switch_to_memory_fallback(exc)
        self._memory_set(full_key, serialized, ttl)

    def delete(self, key: str) -> None:
        full_key = self._key(key)
        if self._client:
            try:
                self._client.delete(full_key)
            except Exception as exc:
                self._switch_to_memory_fallback(exc)
        self._memory.pop(full_key, None)
