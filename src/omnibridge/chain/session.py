"""
Bridge contract handle and the session state machine that owns it.

The handle is derived from two independent signals, the active signer and
the active chain. It is never mutated: any change to either produces a new
handle (or none, when the chain has no bridge deployment).

States:
    UNINITIALIZED --bind(signer on a bridged chain)--> READY(handle)
    READY(handle) --bind(other signer or chain)-->     READY(new handle) | UNINITIALIZED
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from omnibridge.core.abi import BRIDGE_ABI
from omnibridge.core.exceptions import PreconditionError
from omnibridge.core.logging import get_logger

if TYPE_CHECKING:
    from omnibridge.core.registry import ChainRegistry
    from omnibridge.wallet.signer import WalletSigner

logger = get_logger("chain.session")


@dataclass(frozen=True)
class BridgeHandle:
    """The bridge contract on one chain, bound to one signer."""

    address: str
    chain_id: int
    signer: WalletSigner
    contract: Any

    @classmethod
    def create(cls, signer: WalletSigner, address: str) -> BridgeHandle:
        return cls(
            address=address,
            chain_id=signer.chain_id,
            signer=signer,
            contract=signer.contract(address, BRIDGE_ABI),
        )


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class BridgeSession:
    """
    Holds the current BridgeHandle for the active (signer, chain) pair.
    """

    def __init__(self, registry: ChainRegistry) -> None:
        self._registry = registry
        self._handle: BridgeHandle | None = None

    @property
    def state(self) -> SessionState:
        return SessionState.READY if self._handle is not None else SessionState.UNINITIALIZED

    @property
    def handle(self) -> BridgeHandle | None:
        return self._handle

    def bind(self, signer: WalletSigner | None) -> bool:
        """
        Recompute the handle for a new signer (and the chain it is on).

        Returns:
            True if the handle was replaced, False if the pair is unchanged
        """
        current = self._handle
        if (
            current is not None
            and signer is not None
            and current.signer is signer
            and current.chain_id == signer.chain_id
        ):
            return False

        if signer is None or not self._registry.is_supported(signer.chain_id):
            if signer is not None:
                logger.warning(f"No bridge deployed on chain {signer.chain_id}")
            changed = current is not None
            self._handle = None
            return changed

        self._handle = BridgeHandle.create(signer, self._registry.bridge_address(signer.chain_id))
        logger.info(f"Bridge ready on chain {signer.chain_id} at {self._handle.address}")
        return True

    def require(self) -> BridgeHandle:
        """
        Raises:
            PreconditionError: If no signer/bridge pair is ready
        """
        if self._handle is None:
            raise PreconditionError("Connect a wallet on a supported chain first")
        return self._handle
