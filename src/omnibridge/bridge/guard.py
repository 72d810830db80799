"""
In-flight guard for write operations.

Serializes transfer / claim per (signer, chain, operation) so a second
invocation while one is pending is rejected instead of producing two
concurrent on-chain submissions.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from omnibridge.core.exceptions import OperationInProgressError
from omnibridge.core.logging import get_logger

if TYPE_CHECKING:
    from omnibridge.storage.base import StorageBackend

logger = get_logger("bridge.guard")


class OperationGuard:
    """
    Storage-backed mutex per (signer address, chain id, operation).

    The TTL bounds how long a crashed holder can block the key.
    """

    def __init__(self, storage: StorageBackend, ttl: int = 600) -> None:
        self._storage = storage
        self._ttl = ttl

    @staticmethod
    def lock_key(signer_address: str, chain_id: int, operation: str) -> str:
        return f"lock:op:{signer_address.lower()}:{chain_id}:{operation}"

    @asynccontextmanager
    async def hold(
        self,
        signer_address: str,
        chain_id: int,
        operation: str,
    ) -> AsyncIterator[str]:
        """
        Hold the lock for the duration of the block.

        Raises:
            OperationInProgressError: If the same operation is already running
        """
        key = self.lock_key(signer_address, chain_id, operation)
        token = await self._storage.acquire_lock(key, self._ttl)
        if not token:
            logger.warning(f"Rejected concurrent {operation} for {signer_address} on {chain_id}")
            raise OperationInProgressError(
                f"A {operation} is already in progress for this wallet", key=key
            )

        logger.debug(f"Acquired {key} (token: {token[:8]}...)")
        try:
            yield token
        finally:
            await self._storage.release_lock(key, token)
            logger.debug(f"Released {key}")
