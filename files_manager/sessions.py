"""
Session store abstraction.

Maps opaque session keys to user ids with an expiry. Supports an in-memory
fallback for tests/local runs and a Redis-backed implementation for
production.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Optional, Protocol

import redis
from redis import exceptions as redis_exceptions

logger = logging.getLogger(__name__)

CONNECTION_ERRORS = (redis_exceptions.ConnectionError, redis_exceptions.TimeoutError)


class SessionStore(Protocol):
    """Key-value operations the API needs from the session store."""

    def is_alive(self) -> bool:
        ...

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def close(self) -> None:
        ...


@dataclass
class InMemorySessionStore:
    """Dictionary-backed store with lazy expiry, for testing/dev."""

    items: dict[str, tuple[str, float]] = field(default_factory=dict)

    def is_alive(self) -> bool:
        return True

    def get(self, key: str) -> Optional[str]:
        entry = self.items.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if time.time() >= expires_at:
            del self.items[key]
            return None
        return value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self.items[key] = (value, time.time() + ttl_seconds)

    def delete(self, key: str) -> None:
        self.items.pop(key, None)

    def close(self) -> None:
        self.items.clear()


@dataclass
class RedisSessionStore:
    """Redis-backed store using SET with EX for expiry."""

    url: str
    timeout_seconds: float = 5.0

    def __post_init__(self):
        self.client = redis.Redis.from_url(
            self.url,
            socket_timeout=self.timeout_seconds,
            socket_connect_timeout=self.timeout_seconds,
            decode_responses=True,
        )
        self._connected = False
        try:
            self.client.ping()
            self._connected = True
            logger.info("Connected to Redis at %s", self.url)
        except CONNECTION_ERRORS as e:
            logger.error("Failed to connect to Redis: %s", e)

    @contextmanager
    def _connection_state(self):
        try:
            yield
        except CONNECTION_ERRORS:
            self._connected = False
            raise
        self._connected = True

    def is_alive(self) -> bool:
        return self._connected

    def get(self, key: str) -> Optional[str]:
        with self._connection_state():
            return self.client.get(key)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._connection_state():
            self.client.set(key, value, ex=ttl_seconds)

    def delete(self, key: str) -> None:
        with self._connection_state():
            self.client.delete(key)

    def close(self) -> None:
        self.client.close()
        self._connected = False
        logger.info("Redis connection closed")
