"""
Phase 2 of a bridge transfer: claim on the destination chain.

`reconstruct_claim` rebuilds the claim payload from the mined deposit event
and a token-metadata index. It is a pure function of its inputs. Three cases:

- LockOriginalToken: an original was locked; a wrapped token is minted on
  the destination (target = zero address, "Wrapped <name>" / "W<symbol>").
- BurnWrappedToken, destination is the token's home chain: the original is
  released (target = original address, original metadata).
- BurnWrappedToken, any other destination: another wrapped representation
  is minted (target = zero address, metadata of the burned wrapped token).

Claims never expire (deadline = 2**256 - 1), and `source_tx_data` is copied
verbatim from the deposit event.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from omnibridge.core.exceptions import TokenLookupError, ValidationError
from omnibridge.core.logging import get_logger
from omnibridge.core.types import (
    MAX_UINT256,
    ZERO_ADDRESS,
    ClaimPayload,
    ClaimToken,
    DepositEvent,
    DepositEventKind,
    PartyRef,
    Signature,
    SourceTxData,
    Token,
    TokenIndex,
)

if TYPE_CHECKING:
    from omnibridge.chain.session import BridgeHandle

logger = get_logger("bridge.claim")

WRAPPED_NAME_PREFIX = "Wrapped "
WRAPPED_SYMBOL_PREFIX = "W"

CLAIM_TYPES = {
    "EIP712Domain": [
        {"name": "name", "type": "string"},
        {"name": "version", "type": "string"},
        {"name": "chainId", "type": "uint256"},
        {"name": "verifyingContract", "type": "address"},
    ],
    "Party": [
        {"name": "_address", "type": "address"},
        {"name": "chainId", "type": "uint256"},
    ],
    "TokenData": [
        {"name": "tokenAddress", "type": "address"},
        {"name": "originChainId", "type": "uint256"},
    ],
    "SourceTxData": [
        {"name": "transactionHash", "type": "bytes32"},
        {"name": "blockHash", "type": "bytes32"},
        {"name": "logIndex", "type": "uint256"},
    ],
    "Claim": [
        {"name": "from", "type": "Party"},
        {"name": "to", "type": "Party"},
        {"name": "value", "type": "uint256"},
        {"name": "token", "type": "TokenData"},
        {"name": "depositTxSourceToken", "type": "address"},
        {"name": "targetTokenAddress", "type": "address"},
        {"name": "targetTokenName", "type": "string"},
        {"name": "targetTokenSymbol", "type": "string"},
        {"name": "deadline", "type": "uint256"},
        {"name": "sourceTxData", "type": "SourceTxData"},
    ],
}


def _lookup(index: TokenIndex, chain_id: int, address: str) -> Token:
    tokens = index.get(chain_id)
    if tokens is not None:
        token = tokens.get(address) or tokens.get(address.lower())
        if token is not None:
            return token
        for key, candidate in tokens.items():
            if key.lower() == address.lower():
                return candidate
    raise TokenLookupError(
        f"No token metadata for {address} on chain {chain_id}",
        chain_id=chain_id,
        address=address,
    )


def reconstruct_claim(deposit: DepositEvent, token_index: TokenIndex) -> ClaimPayload:
    """
    Rebuild the destination-chain claim for a mined deposit.

    Args:
        deposit: The decoded deposit event
        token_index: chain id -> token address -> Token metadata

    Returns:
        The claim payload

    Raises:
        TokenLookupError: If the required token metadata is not in the index
        ValidationError: If the event kind is not a deposit event
    """
    args = deposit.args
    source_chain_id = int(args["sourceChainId"])
    to_chain_id = int(args["toChainId"])

    if deposit.kind == DepositEventKind.LOCK_ORIGINAL:
        locked = args["lockedTokenAddress"]
        source_token = _lookup(token_index, source_chain_id, locked)
        claim_token = ClaimToken(token_address=locked, origin_chain_id=source_chain_id)
        deposit_source_token = locked
        target_address = ZERO_ADDRESS
        target_name = WRAPPED_NAME_PREFIX + source_token.name
        target_symbol = WRAPPED_SYMBOL_PREFIX + source_token.symbol

    elif deposit.kind == DepositEventKind.BURN_WRAPPED:
        original = args["originalTokenAddress"]
        original_chain_id = int(args["originalTokenChainId"])
        burned = args["burnedWrappedTokenAddress"]
        if original_chain_id == to_chain_id:
            metadata = _lookup(token_index, original_chain_id, original)
            target_address = original
        else:
            metadata = _lookup(token_index, source_chain_id, burned)
            target_address = ZERO_ADDRESS
        claim_token = ClaimToken(token_address=original, origin_chain_id=original_chain_id)
        deposit_source_token = burned
        target_name = metadata.name
        target_symbol = metadata.symbol

    else:
        raise ValidationError(f"Unsupported deposit event: {deposit.kind}")

    return ClaimPayload(
        from_party=PartyRef(address=args["sender"], chain_id=source_chain_id),
        to_party=PartyRef(address=args["recepient"], chain_id=to_chain_id),
        value=int(args["value"]),
        token=claim_token,
        deposit_tx_source_token=deposit_source_token,
        target_token_address=target_address,
        target_token_name=target_name,
        target_token_symbol=target_symbol,
        deadline=MAX_UINT256,
        source_tx_data=SourceTxData(
            transaction_hash=deposit.transaction_hash,
            block_hash=deposit.block_hash,
            log_index=deposit.log_index,
        ),
    )


def claim_typed_data(
    payload: ClaimPayload,
    chain_id: int,
    bridge_address: str,
    domain_name: str = "Bridge",
    domain_version: str = "1",
) -> dict[str, Any]:
    """EIP-712 message over the claim, scoped to the destination chain."""
    return {
        "types": CLAIM_TYPES,
        "primaryType": "Claim",
        "domain": {
            "name": domain_name,
            "version": domain_version,
            "chainId": chain_id,
            "verifyingContract": bridge_address,
        },
        "message": {
            "from": {
                "_address": payload.from_party.address,
                "chainId": payload.from_party.chain_id,
            },
            "to": {
                "_address": payload.to_party.address,
                "chainId": payload.to_party.chain_id,
            },
            "value": payload.value,
            "token": {
                "tokenAddress": payload.token.token_address,
                "originChainId": payload.token.origin_chain_id,
            },
            "depositTxSourceToken": payload.deposit_tx_source_token,
            "targetTokenAddress": payload.target_token_address,
            "targetTokenName": payload.target_token_name,
            "targetTokenSymbol": payload.target_token_symbol,
            "deadline": payload.deadline,
            "sourceTxData": {
                "transactionHash": payload.source_tx_data.transaction_hash,
                "blockHash": payload.source_tx_data.block_hash,
                "logIndex": payload.source_tx_data.log_index,
            },
        },
    }


class ClaimSubmitter:
    """Signs a claim payload and submits it to the destination bridge."""

    def __init__(self, domain_name: str = "Bridge", domain_version: str = "1") -> None:
        self._domain_name = domain_name
        self._domain_version = domain_version

    def sign(self, bridge: BridgeHandle, payload: ClaimPayload) -> Signature:
        message = claim_typed_data(
            payload,
            chain_id=bridge.chain_id,
            bridge_address=bridge.address,
            domain_name=self._domain_name,
            domain_version=self._domain_version,
        )
        return bridge.signer.sign_typed_data(message)

    async def claim(
        self,
        bridge: BridgeHandle,
        payload: ClaimPayload,
        signature: Signature | None = None,
    ) -> Any:
        """
        Sign (unless a signature is given), simulate and submit the claim.

        Returns:
            The mined claim receipt

        Raises:
            ValidationError: If the bridge is not on the payload's destination chain
            SimulationError: If the dry run reverts
            SubmissionError: If the transaction fails to be sent or mined
        """
        if payload.to_party.chain_id != bridge.chain_id:
            raise ValidationError(
                f"Claim targets chain {payload.to_party.chain_id}, "
                f"but the bridge is on chain {bridge.chain_id}"
            )

        signature = signature or self.sign(bridge, payload)
        logger.info(
            f"Claiming {payload.value} on chain {bridge.chain_id} "
            f"for deposit {payload.source_tx_data.transaction_hash}"
        )
        return await bridge.signer.execute(
            bridge.contract.functions.claim(
                payload.as_contract_args(), signature.as_contract_args()
            ),
            "claim",
        )
