"""Bridge protocol: token catalog, deposit (phase 1) and claim (phase 2)."""

from omnibridge.bridge.authorization import AuthorizationNegotiator, permit_typed_data
from omnibridge.bridge.catalog import TokenCatalog, build_token_index
from omnibridge.bridge.claim import ClaimSubmitter, claim_typed_data, reconstruct_claim
from omnibridge.bridge.deposit import DepositOrchestrator, build_deposit_payload
from omnibridge.bridge.events import decode_deposit_event
from omnibridge.bridge.guard import OperationGuard
from omnibridge.bridge.journal import TransferJournal, TransferStatus

__all__ = [
    "AuthorizationNegotiator",
    "ClaimSubmitter",
    "DepositOrchestrator",
    "OperationGuard",
    "TokenCatalog",
    "TransferJournal",
    "TransferStatus",
    "build_deposit_payload",
    "build_token_index",
    "claim_typed_data",
    "decode_deposit_event",
    "permit_typed_data",
    "reconstruct_claim",
]
