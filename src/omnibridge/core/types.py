"""
Type definitions for OmniBridge.

This module contains the enums, data classes, and constants shared by the
read path (token catalog) and both write phases (deposit, claim).

All payload types are frozen: they are built fresh per call and never
mutated. `as_contract_args()` returns the nested tuple shape that web3
expects for the corresponding Solidity struct.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeAlias

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
HASH_ZERO = b"\x00" * 32
MAX_UINT256 = 2**256 - 1


def to_hex(value: Any) -> str:
    """Render bytes-like values as 0x-prefixed hex; pass strings through."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)


def from_hex(value: str | bytes) -> bytes:
    """Inverse of `to_hex`: 0x-prefixed hex (or raw bytes) to bytes."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return bytes.fromhex(value[2:] if value.startswith("0x") else value)


@dataclass(frozen=True)
class Token:
    """A bridgeable token with the connected account's balance (smallest unit)."""

    name: str
    symbol: str
    address: str
    balance: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "address": self.address,
            "balance": self.balance,
        }


@dataclass(frozen=True)
class PartyRef:
    """A sender or recipient plus the chain they act on."""

    address: str
    chain_id: int

    def as_contract_args(self) -> tuple[str, int]:
        return (self.address, self.chain_id)


@dataclass(frozen=True)
class Signature:
    """An ECDSA signature split into v, r, s."""

    v: int
    r: bytes
    s: bytes

    @classmethod
    def zero(cls) -> Signature:
        """The placeholder signature sent when no permit was produced."""
        return cls(v=0, r=HASH_ZERO, s=HASH_ZERO)

    def is_zero(self) -> bool:
        return self.v == 0 and self.r == HASH_ZERO and self.s == HASH_ZERO

    def as_contract_args(self) -> tuple[int, bytes, bytes]:
        return (self.v, self.r, self.s)


@dataclass(frozen=True)
class DepositPayload:
    """Arguments of the bridge's `deposit` / `depositWithPermit` call."""

    from_party: PartyRef
    to_party: PartyRef
    spender: str
    token: str
    value: int
    deadline: int
    approve_token_transfer_sig: Signature = field(default_factory=Signature.zero)

    def as_contract_args(self) -> tuple[Any, ...]:
        return (
            self.from_party.as_contract_args(),
            self.to_party.as_contract_args(),
            self.spender,
            self.token,
            self.value,
            self.deadline,
            self.approve_token_transfer_sig.as_contract_args(),
        )


@dataclass(frozen=True)
class ClaimToken:
    """The canonical (original) token, regardless of where the claim runs."""

    token_address: str
    origin_chain_id: int

    def as_contract_args(self) -> tuple[str, int]:
        return (self.token_address, self.origin_chain_id)


@dataclass(frozen=True)
class SourceTxData:
    """Location of the deposit event; the destination's anti-replay key."""

    transaction_hash: str
    block_hash: str
    log_index: int

    def as_contract_args(self) -> tuple[bytes, bytes, int]:
        return (from_hex(self.transaction_hash), from_hex(self.block_hash), self.log_index)


@dataclass(frozen=True)
class ClaimPayload:
    """Arguments of the bridge's `claim` call on the destination chain."""

    from_party: PartyRef
    to_party: PartyRef
    value: int
    token: ClaimToken
    deposit_tx_source_token: str
    target_token_address: str
    target_token_name: str
    target_token_symbol: str
    deadline: int
    source_tx_data: SourceTxData

    @property
    def mints_wrapped(self) -> bool:
        """True when the claim mints a wrapped token instead of releasing one."""
        return self.target_token_address == ZERO_ADDRESS

    def as_contract_args(self) -> tuple[Any, ...]:
        return (
            self.from_party.as_contract_args(),
            self.to_party.as_contract_args(),
            self.value,
            self.token.as_contract_args(),
            self.deposit_tx_source_token,
            self.target_token_address,
            self.target_token_name,
            self.target_token_symbol,
            self.deadline,
            self.source_tx_data.as_contract_args(),
        )


class DepositEventKind(str, Enum):
    """Event emitted by the bridge when a deposit is mined."""

    LOCK_ORIGINAL = "LockOriginalToken"
    BURN_WRAPPED = "BurnWrappedToken"

    @classmethod
    def from_string(cls, value: str) -> DepositEventKind:
        for member in cls:
            if member.value == value:
                return member
        raise ValueError(f"Unknown deposit event: {value}. Supported: {[k.value for k in cls]}")


@dataclass(frozen=True)
class DepositEvent:
    """
    A mined deposit: the decoded bridge event plus where it was emitted.

    This is the phase-1 completion token. It is journaled so the claim can
    be resumed without re-running the deposit.
    """

    kind: DepositEventKind
    args: Mapping[str, Any]
    transaction_hash: str
    block_hash: str
    log_index: int

    @property
    def key(self) -> str:
        return f"{self.transaction_hash}:{self.log_index}"

    @property
    def destination_chain_id(self) -> int:
        return int(self.args["toChainId"])

    @property
    def recipient(self) -> str:
        return str(self.args["recepient"])

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "args": dict(self.args),
            "transaction_hash": self.transaction_hash,
            "block_hash": self.block_hash,
            "log_index": self.log_index,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DepositEvent:
        return cls(
            kind=DepositEventKind.from_string(data["kind"]),
            args=dict(data["args"]),
            transaction_hash=data["transaction_hash"],
            block_hash=data["block_hash"],
            log_index=int(data["log_index"]),
        )


@dataclass(frozen=True)
class Permit:
    """The token supports EIP-2612; the deposit carries this signature."""

    signature: Signature


@dataclass(frozen=True)
class Approve:
    """The token has no permit; a separate approve transaction is needed."""


AuthorizationOutcome: TypeAlias = Permit | Approve

# chain id -> token address -> Token
TokenIndex: TypeAlias = Mapping[int, Mapping[str, Token]]


class BridgeOperation(str, Enum):
    """Operations exposed by the client."""

    REFRESH = "refresh"
    TRANSFER = "transfer"
    RECEIVE = "receive"
    CLAIM = "claim"


@dataclass
class BridgeResult:
    """Outcome of a client operation, returned instead of raising."""

    success: bool
    operation: BridgeOperation
    transaction_hash: str | None = None
    receipt: Any = None
    deposit: DepositEvent | None = None
    claim: ClaimPayload | None = None
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
