"""Redis binding for the short link key-value store.

Every conditional write is a single redis command, so the existence check
and the write cannot interleave with another request:

    put_if_absent   -> SET key value NX
    put_if_present  -> SET key value XX
    delete          -> DEL key   (returns the number of keys removed)
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any, TypeVar

import redis

from ..errors import DataStoreError

F = TypeVar("F", bound=Callable[..., Any])


def handle_redis_connection_error(method: F) -> F:
    """Wrap redis-interacting methods so connectivity issues raise DataStoreError."""

    @functools.wraps(method)
    def wrapper(self: RedisKeyValueStore, *args: Any, **kwargs: Any) -> Any:
        try:
            return method(self, *args, **kwargs)
        except redis.exceptions.ConnectionError as e:
            info = self.redis.connection_pool.connection_kwargs
            raise DataStoreError(
                f"Can't connect to Redis at {info.get('host')}:{info.get('port')}/{info.get('db')}."
            ) from e

    return wrapper  # type: ignore[return-value]


class RedisKeyValueStore:
    """Redis-backed KeyValueStore.

    Example:
        ```python
        store = RedisKeyValueStore.from_url("redis://localhost:6379/0", prefix="links:")
        store.put_if_absent("docs", '{"url": "https://example.com"}')
        ```

    Attributes:
        redis: Redis client instance (from redis package, or any compatible stub).
        prefix: Namespace prepended to every key.
    """

    def __init__(self, redis_client: Any, prefix: str = "") -> None:
        self.redis = redis_client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "") -> RedisKeyValueStore:
        return cls(redis.Redis.from_url(url, decode_responses=True), prefix=prefix)

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    @handle_redis_connection_error
    def get(self, key: str) -> str | None:
        value = self.redis.get(self._key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    @handle_redis_connection_error
    def put_if_absent(self, key: str, value: str) -> bool:
        return bool(self.redis.set(self._key(key), value, nx=True))

    @handle_redis_connection_error
    def put_if_present(self, key: str, value: str) -> bool:
        return bool(self.redis.set(self._key(key), value, xx=True))

    @handle_redis_connection_error
    def delete(self, key: str) -> bool:
        return self.redis.delete(self._key(key)) > 0
