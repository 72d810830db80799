"""
Storage backends for the deposit journal and the in-flight operation guard.

Configuration via environment:
    OMNIBRIDGE_STORAGE_BACKEND=memory  # or 'redis'
    OMNIBRIDGE_REDIS_URL=redis://localhost:6379/0
"""

from __future__ import annotations

import os
from typing import Any

from omnibridge.core.exceptions import ConfigurationError
from omnibridge.storage.base import (
    StorageBackend,
    get_storage_backend,
    list_storage_backends,
    register_storage_backend,
)
from omnibridge.storage.memory import InMemoryStorage
from omnibridge.storage.redis import RedisStorage


def get_storage(backend_name: str | None = None, **options: Any) -> StorageBackend:
    """
    Instantiate a registered backend.

    Args:
        backend_name: Backend name, or None to read OMNIBRIDGE_STORAGE_BACKEND
        **options: Passed to the backend constructor (e.g. redis_url)

    Raises:
        ConfigurationError: If the name is not registered
    """
    name = backend_name or os.environ.get("OMNIBRIDGE_STORAGE_BACKEND", "memory")
    backend_class = get_storage_backend(name)
    if backend_class is None:
        raise ConfigurationError(
            f"Unknown storage backend: '{name}'. Available: {', '.join(list_storage_backends())}"
        )
    return backend_class(**options)


__all__ = [
    "StorageBackend",
    "InMemoryStorage",
    "RedisStorage",
    "get_storage",
    "get_storage_backend",
    "list_storage_backends",
    "register_storage_backend",
]
