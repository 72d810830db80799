"""
OmniBridge - Client orchestrator for a lock/mint/burn/claim token bridge.

Usage:
    >>> from omnibridge import OmniBridge, ChainRegistry
    >>>
    >>> bridge = OmniBridge(registry=ChainRegistry.from_file("chains.json"))
    >>> await bridge.connect(private_key="0x...", rpc_url="https://rpc-amoy.polygon.technology")
    >>> result = await bridge.transfer(bridge.token_list[0], 10**18, destination_chain_id=11155111)
    >>> print(result.deposit.key)
"""

from omnibridge.bridge import (
    AuthorizationNegotiator,
    ClaimSubmitter,
    DepositOrchestrator,
    OperationGuard,
    TokenCatalog,
    TransferJournal,
    TransferStatus,
    build_deposit_payload,
    build_token_index,
    decode_deposit_event,
    reconstruct_claim,
)
from omnibridge.chain import BridgeHandle, BridgeSession, MulticallReader, SessionState
from omnibridge.client import OmniBridge
from omnibridge.core.config import Config
from omnibridge.core.exceptions import (
    CapabilityProbeError,
    ConfigurationError,
    ConnectivityError,
    NetworkError,
    OmniBridgeError,
    OperationInProgressError,
    PreconditionError,
    SimulationError,
    SubmissionError,
    TokenLookupError,
    ValidationError,
    user_message,
)
from omnibridge.core.registry import ChainConfig, ChainRegistry
from omnibridge.core.types import (
    Approve,
    BridgeOperation,
    BridgeResult,
    ClaimPayload,
    ClaimToken,
    DepositEvent,
    DepositEventKind,
    DepositPayload,
    PartyRef,
    Permit,
    Signature,
    SourceTxData,
    Token,
)
from omnibridge.history import HistoryClient
from omnibridge.wallet import WalletSigner

__version__ = "0.1.0"
__all__ = [
    # Main Client
    "OmniBridge",
    # Config
    "Config",
    "ChainConfig",
    "ChainRegistry",
    # Types
    "Token",
    "PartyRef",
    "Signature",
    "DepositPayload",
    "ClaimToken",
    "SourceTxData",
    "ClaimPayload",
    "DepositEvent",
    "DepositEventKind",
    "Permit",
    "Approve",
    "BridgeOperation",
    "BridgeResult",
    # Components
    "WalletSigner",
    "BridgeHandle",
    "BridgeSession",
    "SessionState",
    "MulticallReader",
    "TokenCatalog",
    "AuthorizationNegotiator",
    "DepositOrchestrator",
    "ClaimSubmitter",
    "TransferJournal",
    "TransferStatus",
    "OperationGuard",
    "HistoryClient",
    "build_token_index",
    "build_deposit_payload",
    "decode_deposit_event",
    "reconstruct_claim",
    # Exceptions
    "OmniBridgeError",
    "ConfigurationError",
    "ValidationError",
    "ConnectivityError",
    "CapabilityProbeError",
    "SimulationError",
    "SubmissionError",
    "TokenLookupError",
    "PreconditionError",
    "OperationInProgressError",
    "NetworkError",
    "user_message",
]
