"""
Token Store — server-side home of the signed-in user's Graph tokens.

Access and refresh tokens from Azure AD easily exceed the ~4 KB a browser
keeps for one cookie, so the Flask session only carries a random key and
the entry itself lives here:

  - Redis when TOKEN_STORE_URL (or REDIS_URL) is a redis:// URL
  - an in-process dict otherwise (development, tests, single worker)

Entries expire after TOKEN_STORE_TTL_SECONDS; an expired entry reads as a
signed-out user.
"""

import json
import logging
import secrets
import time

import redis
from flask import current_app

logger = logging.getLogger(__name__)

_KEY_PREFIX = "graph_token:"


class _MemoryBackend:
    """Dict with per-key expiry, same calls as the redis client uses here."""

    def __init__(self):
        self._store: dict[str, tuple[str, float]] = {}

    def get(self, key):
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires = entry
        if time.time() > expires:
            self._store.pop(key, None)
            return None
        return value

    def setex(self, key, ttl_seconds, value):
        self._store[key] = (value, time.time() + ttl_seconds)

    def delete(self, *keys):
        for key in keys:
            self._store.pop(key, None)

    def flushdb(self):
        self._store.clear()


# One backend per store URL for the life of the process
_backends: dict[str, object] = {}


def _get_backend():
    url = current_app.config.get("TOKEN_STORE_URL") or "memory://"
    backend = _backends.get(url)
    if backend is not None:
        return backend

    if url.startswith("memory://"):
        backend = _MemoryBackend()
    else:
        try:
            backend = redis.from_url(url, decode_responses=True)
            backend.ping()
            logger.info("Token store: using Redis at %s", url.split("@")[-1])
        except redis.RedisError as exc:
            logger.warning("Redis unavailable (%s); token store falls back to memory", exc)
            backend = _MemoryBackend()
    _backends[url] = backend
    return backend


def new_key() -> str:
    return secrets.token_urlsafe(24)


def save(key: str, entry: dict) -> None:
    ttl = int(current_app.config.get("TOKEN_STORE_TTL_SECONDS", 12 * 3600))
    _get_backend().setex(_KEY_PREFIX + key, ttl, json.dumps(entry))


def load(key: str | None) -> dict | None:
    if not key:
        return None
    raw = _get_backend().get(_KEY_PREFIX + key)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return None


def delete(key: str | None) -> None:
    if key:
        _get_backend().delete(_KEY_PREFIX + key)


def clear() -> None:
    """Drop every entry of the current app's store (tests)."""
    _get_backend().flushdb()
