"""
In-process storage backend (the default).

Nothing survives a restart: a deposit journaled here can only be resumed by
the same process.
"""

from __future__ import annotations

import time
import uuid
from collections import defaultdict
from collections.abc import Mapping
from copy import deepcopy
from typing import Any, Callable

from omnibridge.storage.base import StorageBackend, matches, register_storage_backend


class InMemoryStorage(StorageBackend):
    """Records and locks in dicts; lock expiry uses a monotonic clock."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._collections: defaultdict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        # lock key -> (owner token, expires at)
        self._locks: dict[str, tuple[str, float]] = {}
        self._clock = clock

    async def save(self, collection: str, key: str, record: dict[str, Any]) -> None:
        self._collections[collection][key] = deepcopy(record)

    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        record = self._collections[collection].get(key)
        return deepcopy(record) if record is not None else None

    async def update(self, collection: str, key: str, changes: dict[str, Any]) -> bool:
        records = self._collections[collection]
        if key not in records:
            return False
        records[key] = {**records[key], **deepcopy(changes)}
        return True

    async def find(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        records = self._collections[collection]
        return [
            deepcopy(records[key]) for key in sorted(records) if matches(records[key], filters)
        ]

    async def acquire_lock(self, key: str, ttl: int = 30) -> str | None:
        now = self._clock()
        held = self._locks.get(key)
        if held is not None and held[1] > now:
            return None

        token = uuid.uuid4().hex
        self._locks[key] = (token, now + ttl)
        return token

    async def release_lock(self, key: str, token: str) -> bool:
        held = self._locks.get(key)
        if held is None or held[0] != token:
            return False
        del self._locks[key]
        return True


register_storage_backend("memory", InMemoryStorage)
