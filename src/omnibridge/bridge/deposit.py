"""
Phase 1 of a bridge transfer: deposit on the source chain.

Two mutually exclusive paths, chosen only by the authorization probe:
- permit:  depositWithPermit(payload with permit signature)
- approve: approve(bridge, amount), then deposit(payload with zero signature)

Every write is simulated before it is sent. A failure at any step aborts the
rest of the path; nothing is retried or rolled back (an approve that
succeeded before a failed deposit stays on chain, and repeating it is
harmless).
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Callable

from web3 import AsyncWeb3

from omnibridge.bridge.authorization import AuthorizationNegotiator
from omnibridge.core.abi import PERMIT_ERC20_ABI
from omnibridge.core.exceptions import ValidationError
from omnibridge.core.logging import get_logger
from omnibridge.core.types import DepositPayload, PartyRef, Permit, Signature, Token

if TYPE_CHECKING:
    from omnibridge.chain.session import BridgeHandle

logger = get_logger("bridge.deposit")

DEFAULT_DEPOSIT_WINDOW = 60 * 60


def checksum_address(address: str, field: str = "address") -> str:
    """Return the EIP-55 form of `address`; web3 rejects anything else in calls."""
    try:
        return AsyncWeb3.to_checksum_address(address)
    except (TypeError, ValueError) as e:
        raise ValidationError(
            f"Invalid {field} address: {address!r}", details={field: address}
        ) from e


def build_deposit_payload(
    bridge: BridgeHandle,
    token: str,
    amount: int,
    destination_chain_id: int,
    deadline: int,
    recipient: str | None = None,
    signature: Signature | None = None,
) -> DepositPayload:
    """Assemble the deposit struct; the signature defaults to the zero signature."""
    owner = checksum_address(bridge.signer.address, "owner")
    return DepositPayload(
        from_party=PartyRef(address=owner, chain_id=bridge.chain_id),
        to_party=PartyRef(
            address=checksum_address(recipient, "recipient") if recipient else owner,
            chain_id=destination_chain_id,
        ),
        spender=checksum_address(bridge.address, "bridge"),
        token=checksum_address(token, "token"),
        value=amount,
        deadline=deadline,
        approve_token_transfer_sig=signature or Signature.zero(),
    )


class DepositOrchestrator:
    """Runs the source-chain half of a transfer and returns the mined receipt."""

    def __init__(
        self,
        negotiator: AuthorizationNegotiator | None = None,
        deposit_window_seconds: int = DEFAULT_DEPOSIT_WINDOW,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._negotiator = negotiator or AuthorizationNegotiator()
        self._deposit_window = deposit_window_seconds
        self._clock = clock

    def deadline(self) -> int:
        """A coarse validity window in unix seconds, strictly after now."""
        return int(self._clock()) + self._deposit_window

    async def transfer(
        self,
        bridge: BridgeHandle,
        token: Token | str,
        amount: int,
        destination_chain_id: int,
        recipient: str | None = None,
    ) -> Any:
        """
        Deposit `amount` of `token` for release on `destination_chain_id`.

        Args:
            bridge: Bridge handle on the source chain
            token: Token (or its address) being bridged
            amount: Amount in the token's smallest unit
            destination_chain_id: Chain the claim will run on
            recipient: Receiving address (defaults to the signer)

        Returns:
            The mined deposit receipt

        Raises:
            ValidationError: On a malformed address, a non-positive amount, or
                a same-chain destination
            CapabilityProbeError: If permit support cannot be determined
            SimulationError: If any dry run reverts
            SubmissionError: If any transaction fails to be sent or mined
        """
        token_address = checksum_address(
            token.address if isinstance(token, Token) else token, "token"
        )
        if recipient is not None:
            recipient = checksum_address(recipient, "recipient")
        if amount <= 0:
            raise ValidationError("Amount must be positive", details={"amount": amount})
        if destination_chain_id == bridge.chain_id:
            raise ValidationError("Destination chain must differ from the source chain")

        signer = bridge.signer
        spender = checksum_address(bridge.address, "bridge")
        deadline = self.deadline()
        outcome = await self._negotiator.negotiate(
            token=token_address,
            signer=signer,
            spender=spender,
            amount=amount,
            deadline=deadline,
            chain_id=bridge.chain_id,
        )

        if isinstance(outcome, Permit):
            payload = build_deposit_payload(
                bridge,
                token_address,
                amount,
                destination_chain_id,
                deadline,
                recipient=recipient,
                signature=outcome.signature,
            )
            logger.info(f"Depositing {amount} of {token_address} with permit")
            return await signer.execute(
                bridge.contract.functions.depositWithPermit(payload.as_contract_args()),
                "depositWithPermit",
            )

        token_contract = signer.contract(token_address, PERMIT_ERC20_ABI)
        logger.info(f"Approving {amount} of {token_address} for bridge {spender}")
        await signer.execute(
            token_contract.functions.approve(spender, amount),
            "approve",
        )

        payload = build_deposit_payload(
            bridge, token_address, amount, destination_chain_id, deadline, recipient=recipient
        )
        logger.info(f"Depositing {amount} of {token_address}")
        return await signer.execute(
            bridge.contract.functions.deposit(payload.as_contract_args()),
            "deposit",
        )
