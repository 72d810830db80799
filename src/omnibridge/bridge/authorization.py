"""
Token movement authorization: EIP-2612 permit when the token supports it,
otherwise a classic approve transaction.

Capability detection reads the permit interface's view functions
(`nonces(owner)` and `DOMAIN_SEPARATOR()`) and classifies the outcome by
exception type:

- empty return data (BadFunctionCallOutput) or a bare revert with no data
  means the function is not there → Approve
- a bare revert from `nonces` while `DOMAIN_SEPARATOR` answers is a permit
  token with a guarded view, not a missing one → CapabilityProbeError
- a revert carrying data, or any transport failure, is ambiguous →
  CapabilityProbeError (never a silent fallback to Approve)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from omnibridge.core.abi import PERMIT_ERC20_ABI
from omnibridge.core.exceptions import CapabilityProbeError
from omnibridge.core.logging import get_logger
from omnibridge.core.types import Approve, AuthorizationOutcome, Permit

if TYPE_CHECKING:
    from omnibridge.wallet.signer import WalletSigner

logger = get_logger("bridge.authorization")

DEFAULT_PERMIT_VERSION = "1"

PERMIT_TYPES = {
    "EIP712Domain": [
        {"name": "name", "type": "string"},
        {"name": "version", "type": "string"},
        {"name": "chainId", "type": "uint256"},
        {"name": "verifyingContract", "type": "address"},
    ],
    "Permit": [
        {"name": "owner", "type": "address"},
        {"name": "spender", "type": "address"},
        {"name": "value", "type": "uint256"},
        {"name": "nonce", "type": "uint256"},
        {"name": "deadline", "type": "uint256"},
    ],
}


def _is_missing_function(error: Exception) -> bool:
    if isinstance(error, BadFunctionCallOutput):
        return True
    if isinstance(error, ContractLogicError):
        return not error.data or error.data in ("0x", b"")
    return False


def permit_typed_data(
    token_name: str,
    version: str,
    chain_id: int,
    token: str,
    owner: str,
    spender: str,
    value: int,
    nonce: int,
    deadline: int,
) -> dict[str, Any]:
    """EIP-712 message for an EIP-2612 permit, scoped to `chain_id`."""
    return {
        "types": PERMIT_TYPES,
        "primaryType": "Permit",
        "domain": {
            "name": token_name,
            "version": version,
            "chainId": chain_id,
            "verifyingContract": token,
        },
        "message": {
            "owner": owner,
            "spender": spender,
            "value": value,
            "nonce": nonce,
            "deadline": deadline,
        },
    }


class AuthorizationNegotiator:
    """Chooses between Permit and Approve for a token and signs the permit."""

    async def negotiate(
        self,
        token: str,
        signer: WalletSigner,
        spender: str,
        amount: int,
        deadline: int,
        chain_id: int,
    ) -> AuthorizationOutcome:
        """
        Probe `token` for permit support and, if present, sign a permit.

        Returns:
            Permit(signature) or Approve()

        Raises:
            CapabilityProbeError: If the probe fails for a reason other than
                the permit interface being absent
        """
        contract = signer.contract(token, PERMIT_ERC20_ABI)
        nonce = await self._probe(contract, token, signer.address)
        if nonce is None:
            logger.info(f"Token {token} has no permit; using approve")
            return Approve()

        token_name = await self._read(contract.functions.name(), token, "name")
        version = await self._domain_version(contract, token)
        message = permit_typed_data(
            token_name=token_name,
            version=version,
            chain_id=chain_id,
            token=token,
            owner=signer.address,
            spender=spender,
            value=amount,
            nonce=nonce,
            deadline=deadline,
        )
        signature = signer.sign_typed_data(message)
        logger.info(f"Signed permit for {token} (nonce {nonce})")
        return Permit(signature)

    async def _probe(self, contract: Any, token: str, owner: str) -> int | None:
        """Return the owner's permit nonce, or None if the token has no permit."""
        try:
            nonce = await contract.functions.nonces(owner).call()
        except Exception as e:
            if not _is_missing_function(e):
                raise CapabilityProbeError(
                    f"Could not determine permit support: {e}", token=token
                ) from e
            # A bare revert may also be a guarded nonces(); DOMAIN_SEPARATOR decides
            if isinstance(e, ContractLogicError) and await self._has_domain_separator(
                contract, token
            ):
                raise CapabilityProbeError(
                    "nonces() reverted without data but DOMAIN_SEPARATOR() is present",
                    token=token,
                ) from e
            return None

        if not await self._has_domain_separator(contract, token):
            return None
        return int(nonce)

    async def _has_domain_separator(self, contract: Any, token: str) -> bool:
        try:
            await contract.functions.DOMAIN_SEPARATOR().call()
        except Exception as e:
            if _is_missing_function(e):
                return False
            raise CapabilityProbeError(
                f"Could not determine permit support: {e}", token=token
            ) from e
        return True

    async def _domain_version(self, contract: Any, token: str) -> str:
        try:
            return await contract.functions.version().call()
        except Exception as e:
            if _is_missing_function(e):
                return DEFAULT_PERMIT_VERSION
            raise CapabilityProbeError(
                f"Could not read permit domain version: {e}", token=token
            ) from e

    async def _read(self, contract_fn: Any, token: str, field: str) -> Any:
        try:
            return await contract_fn.call()
        except Exception as e:
            raise CapabilityProbeError(
                f"Could not read token {field}: {e}", token=token
            ) from e
