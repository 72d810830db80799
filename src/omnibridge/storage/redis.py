"""
Redis storage backend.

Each collection is one Redis hash (field = record key, value = JSON), so the
deposit journal survives restarts and can be shared between processes.
Locks are plain keys set with NX and an expiry.

Requires the `redis` extra: pip install "omnibridge[redis]"
"""

from __future__ import annotations

import json
import os
import uuid
from collections.abc import Mapping
from typing import Any

from omnibridge.core.exceptions import ConfigurationError
from omnibridge.core.logging import get_logger
from omnibridge.storage.base import StorageBackend, matches, register_storage_backend

logger = get_logger("storage.redis")

DEFAULT_REDIS_URL = "redis://localhost:6379/0"

# Delete the lock only while the caller's token still owns it
_COMPARE_AND_DELETE = """
if redis.call("GET", KEYS[1]) == ARGV[1] then
    return redis.call("DEL", KEYS[1])
end
return 0
"""


class RedisStorage(StorageBackend):
    """
    Example:
        >>> storage = RedisStorage("redis://localhost:6379/0")
        >>> bridge = OmniBridge(storage=storage)
    """

    def __init__(
        self,
        redis_url: str | None = None,
        prefix: str = "omnibridge",
        client: Any = None,
    ) -> None:
        self._redis_url = redis_url or os.environ.get("OMNIBRIDGE_REDIS_URL", DEFAULT_REDIS_URL)
        self._prefix = prefix
        self._client = client

    def _connection(self) -> Any:
        if self._client is None:
            try:
                from redis.asyncio import Redis
            except ImportError as e:
                raise ConfigurationError(
                    'RedisStorage needs the redis package: pip install "omnibridge[redis]"'
                ) from e
            self._client = Redis.from_url(self._redis_url, decode_responses=True)
        return self._client

    def _hash(self, collection: str) -> str:
        return f"{self._prefix}:{collection}"

    def _lock(self, key: str) -> str:
        return f"{self._prefix}:lock:{key}"

    async def save(self, collection: str, key: str, record: dict[str, Any]) -> None:
        await self._connection().hset(self._hash(collection), key, json.dumps(record))

    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        raw = await self._connection().hget(self._hash(collection), key)
        return json.loads(raw) if raw is not None else None

    async def update(self, collection: str, key: str, changes: dict[str, Any]) -> bool:
        record = await self.get(collection, key)
        if record is None:
            return False
        record.update(changes)
        await self.save(collection, key, record)
        return True

    async def find(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        raw = await self._connection().hgetall(self._hash(collection))
        records = (json.loads(raw[key]) for key in sorted(raw))
        return [record for record in records if matches(record, filters)]

    async def acquire_lock(self, key: str, ttl: int = 30) -> str | None:
        token = uuid.uuid4().hex
        acquired = await self._connection().set(self._lock(key), token, nx=True, ex=ttl)
        return token if acquired else None

    async def release_lock(self, key: str, token: str) -> bool:
        released = await self._connection().eval(_COMPARE_AND_DELETE, 1, self._lock(key), token)
        return bool(released)

    async def health_check(self) -> bool:
        try:
            return bool(await self._connection().ping())
        except Exception as e:
            logger.warning(f"Redis health check failed: {e}")
            return False

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


register_storage_backend("redis", RedisStorage)
