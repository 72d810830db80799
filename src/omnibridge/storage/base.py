"""
Storage backend interface.

The bridge keeps two kinds of state outside process memory: journal records
(JSON-serializable dicts grouped by collection) and short-lived locks owned
by a random token.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any


def matches(record: Mapping[str, Any], filters: Mapping[str, Any] | None) -> bool:
    """True if every filter field equals the record's value."""
    return all(record.get(field) == value for field, value in (filters or {}).items())


class StorageBackend(ABC):
    """
    Records keyed by (collection, key) plus token-owned locks with a TTL.
    """

    @abstractmethod
    async def save(self, collection: str, key: str, record: dict[str, Any]) -> None:
        """Insert or replace a record."""
        ...

    @abstractmethod
    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        """A copy of the record, or None."""
        ...

    @abstractmethod
    async def update(self, collection: str, key: str, changes: dict[str, Any]) -> bool:
        """
        Merge `changes` into an existing record.

        Returns:
            False if there is no such record
        """
        ...

    @abstractmethod
    async def find(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Records matching every filter (exact equality), ordered by key."""
        ...

    @abstractmethod
    async def acquire_lock(self, key: str, ttl: int = 30) -> str | None:
        """
        Take the lock for `ttl` seconds.

        Returns:
            The ownership token, or None if someone else holds it
        """
        ...

    @abstractmethod
    async def release_lock(self, key: str, token: str) -> bool:
        """Release the lock if `token` still owns it."""
        ...

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        """Release connections held by the backend."""
        return None


_STORAGE_BACKENDS: dict[str, type[StorageBackend]] = {}


def register_storage_backend(name: str, backend_class: type[StorageBackend]) -> None:
    """Register a storage backend by name."""
    _STORAGE_BACKENDS[name] = backend_class


def get_storage_backend(name: str) -> type[StorageBackend] | None:
    return _STORAGE_BACKENDS.get(name)


def list_storage_backends() -> list[str]:
    return sorted(_STORAGE_BACKENDS)
