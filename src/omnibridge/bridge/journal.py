"""
Transfer journal (two-phase saga).

Phase 1 (deposit) ends with a mined deposit event; that event is the
completion token recorded here. Phase 2 (claim) consumes it and can be run
or re-run from the journal alone, without repeating the deposit. With the
Redis backend the journal survives a crash between the two phases.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

from omnibridge.core.logging import get_logger
from omnibridge.core.types import DepositEvent

if TYPE_CHECKING:
    from omnibridge.storage.base import StorageBackend

logger = get_logger("bridge.journal")


class TransferStatus(str, Enum):
    DEPOSITED = "deposited"
    CLAIMED = "claimed"


class TransferJournal:
    """Records mined deposits and their claim status."""

    COLLECTION = "deposits"

    def __init__(self, storage: StorageBackend) -> None:
        self._storage = storage

    async def record_deposit(self, deposit: DepositEvent) -> str:
        """
        Store a mined deposit. Recording the same event twice keeps the first entry.

        Returns:
            The journal key (transaction hash and log index)
        """
        existing = await self._storage.get(self.COLLECTION, deposit.key)
        if existing is not None:
            return deposit.key

        await self._storage.save(
            self.COLLECTION,
            deposit.key,
            {
                "deposit": deposit.to_dict(),
                "status": TransferStatus.DEPOSITED.value,
                "destination_chain_id": deposit.destination_chain_id,
                "recipient": deposit.recipient.lower(),
                "claim_transaction_hash": None,
                "recorded_at": datetime.now(timezone.utc).isoformat(),
            },
        )
        logger.info(f"Journaled deposit {deposit.key}")
        return deposit.key

    async def mark_claimed(self, key: str, claim_transaction_hash: str | None) -> bool:
        """Returns False if the deposit was never journaled."""
        updated = await self._storage.update(
            self.COLLECTION,
            key,
            {
                "status": TransferStatus.CLAIMED.value,
                "claim_transaction_hash": claim_transaction_hash,
            },
        )
        if updated:
            logger.info(f"Deposit {key} claimed in {claim_transaction_hash}")
        return updated

    async def get_status(self, key: str) -> TransferStatus | None:
        record = await self._storage.get(self.COLLECTION, key)
        if record is None:
            return None
        return TransferStatus(record["status"])

    async def pending(
        self,
        destination_chain_id: int | None = None,
        recipient: str | None = None,
    ) -> list[DepositEvent]:
        """Deposits not yet claimed, optionally for one destination chain / recipient."""
        filters: dict[str, object] = {"status": TransferStatus.DEPOSITED.value}
        if destination_chain_id is not None:
            filters["destination_chain_id"] = destination_chain_id
        if recipient is not None:
            filters["recipient"] = recipient.lower()

        records = await self._storage.find(self.COLLECTION, filters)
        return [DepositEvent.from_dict(record["deposit"]) for record in records]
