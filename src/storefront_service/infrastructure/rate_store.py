from typing import TYPE_CHECKING

import structlog
from redis.exceptions import RedisError


if TYPE_CHECKING:
    import redis.asyncio as redis

logger = structlog.get_logger()


class RedisKeyValueStore:
    """
    String key-value store on Redis, shared by every worker process.

    Values cached here are advisory. A Redis outage is logged and reads behave
    like a cache miss, so callers fall through to their source of truth.
    """

    def __init__(
        self,
        redis_client: "redis.Redis",
        key_prefix: str = "storefront:",
        expire_seconds: int | None = None,
    ) -> None:
        self._redis = redis_client
        self._key_prefix = key_prefix
        self._expire_seconds = expire_seconds

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    async def get(self, key: str) -> str | None:
        try:
            value = await self._redis.get(self._key(key))
        except RedisError as e:
            logger.warning("kv_store_read_failed", key=key, error=str(e))
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        try:
            await self._redis.set(self._key(key), value, ex=self._expire_seconds)
        except RedisError as e:
            logger.warning("kv_store_write_failed", key=key, error=str(e))

    async def delete(self, *keys: str) -> None:
        if not keys:
            return
        try:
            await self._redis.delete(*(self._key(key) for key in keys))
        except RedisError as e:
            logger.warning("kv_store_delete_failed", keys=list(keys), error=str(e))


class InMemoryKeyValueStore:
    """Process-local store used when Redis is disabled."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)
