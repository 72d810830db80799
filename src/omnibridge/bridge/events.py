"""Decoding of the bridge's deposit events from a mined receipt."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from web3.logs import DISCARD

from omnibridge.core.abi import DEPOSIT_EVENT_NAMES
from omnibridge.core.exceptions import ValidationError
from omnibridge.core.types import DepositEvent, DepositEventKind, to_hex

if TYPE_CHECKING:
    from omnibridge.chain.session import BridgeHandle


def deposit_event_from_log(log: Any) -> DepositEvent:
    """Build a DepositEvent from one decoded web3 event log."""
    args = {
        name: (to_hex(value) if isinstance(value, (bytes, bytearray)) else value)
        for name, value in dict(log["args"]).items()
    }
    return DepositEvent(
        kind=DepositEventKind.from_string(log["event"]),
        args=args,
        transaction_hash=to_hex(log["transactionHash"]),
        block_hash=to_hex(log["blockHash"]),
        log_index=int(log["logIndex"]),
    )


def decode_deposit_event(bridge: BridgeHandle, receipt: Any) -> DepositEvent:
    """
    Find the LockOriginalToken / BurnWrappedToken event the bridge emitted.

    Raises:
        ValidationError: If the receipt holds no deposit event from this bridge
    """
    bridge_address = bridge.address.lower()
    for name in DEPOSIT_EVENT_NAMES:
        logs = bridge.contract.events[name]().process_receipt(receipt, errors=DISCARD)
        for log in logs:
            if str(log["address"]).lower() == bridge_address:
                return deposit_event_from_log(log)
    raise ValidationError(
        "Receipt contains no bridge deposit event",
        details={"transaction_hash": to_hex(receipt.get("transactionHash"))},
    )
