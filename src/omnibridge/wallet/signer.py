"""
Wallet signer capability.

Wraps an eth-account LocalAccount bound to an AsyncWeb3 provider. The rest
of the bridge only sees this surface: an account address, the chain it is
connected to, typed-data signing, and simulate / send / wait for contract
calls.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from eth_account import Account
from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from omnibridge.core.exceptions import ConfigurationError, SimulationError, SubmissionError
from omnibridge.core.logging import get_logger
from omnibridge.core.types import Signature, to_hex

if TYPE_CHECKING:
    from eth_account.signers.local import LocalAccount

logger = get_logger("wallet.signer")


def _revert_reason(error: ContractLogicError) -> str | None:
    message = getattr(error, "message", None) or (str(error.args[0]) if error.args else None)
    if not message:
        return None
    return message.removeprefix("execution reverted: ").removeprefix("execution reverted") or None


class WalletSigner:
    """
    Signs typed data and sends transactions for one account on one chain.

    Create with `await WalletSigner.connect(rpc_url, private_key)`, which
    reads the chain id from the node once.

    Example:
        >>> signer = await WalletSigner.connect("https://rpc.sepolia.org", "0x...")
        >>> tx_hash = await signer.send(token.functions.approve(bridge, 10**18), "approve")
        >>> receipt = await signer.wait(tx_hash, "approve")
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        account: LocalAccount,
        chain_id: int,
        receipt_timeout: float = 120.0,
    ) -> None:
        self._w3 = w3
        self._account = account
        self._chain_id = chain_id
        self._receipt_timeout = receipt_timeout

    @classmethod
    async def connect(
        cls,
        rpc_url: str,
        private_key: str,
        request_timeout: float = 30.0,
        receipt_timeout: float = 120.0,
    ) -> WalletSigner:
        """Open a provider for `rpc_url` and bind `private_key` to it."""
        if not rpc_url:
            raise ConfigurationError("rpc_url is required to connect a signer")
        if not private_key:
            raise ConfigurationError("private_key is required to connect a signer")

        w3 = AsyncWeb3(
            AsyncWeb3.AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout})
        )
        account = Account.from_key(private_key)
        chain_id = await w3.eth.chain_id
        logger.info(f"Connected signer {account.address} on chain {chain_id}")
        return cls(w3, account, chain_id, receipt_timeout=receipt_timeout)

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def chain_id(self) -> int:
        return self._chain_id

    @property
    def w3(self) -> AsyncWeb3:
        return self._w3

    def contract(self, address: str, abi: list[dict[str, Any]]) -> Any:
        """Bind a contract at `address` to this signer's provider."""
        return self._w3.eth.contract(address=AsyncWeb3.to_checksum_address(address), abi=abi)

    def sign_typed_data(self, full_message: dict[str, Any]) -> Signature:
        """
        Sign an EIP-712 message.

        Args:
            full_message: {"types", "primaryType", "domain", "message"}

        Returns:
            The v, r, s split of the signature
        """
        signed = self._account.sign_typed_data(full_message=full_message)
        return Signature(
            v=signed.v,
            r=signed.r.to_bytes(32, "big"),
            s=signed.s.to_bytes(32, "big"),
        )

    async def simulate(self, contract_fn: Any, operation: str) -> Any:
        """
        Dry-run a state-changing call with eth_call from this account.

        Raises:
            SimulationError: If the call reverts
        """
        try:
            return await contract_fn.call({"from": self.address})
        except ContractLogicError as e:
            reason = _revert_reason(e)
            logger.warning(f"Simulation of {operation} reverted: {reason}")
            raise SimulationError(
                "Transaction would revert", operation=operation, reason=reason
            ) from e

    async def send(self, contract_fn: Any, operation: str) -> str:
        """
        Build, sign and broadcast a contract call.

        Returns:
            The transaction hash as 0x-prefixed hex

        Raises:
            SubmissionError: If building, signing or broadcasting fails
        """
        try:
            nonce = await self._w3.eth.get_transaction_count(self.address, "pending")
            tx_params = {
                "from": self.address,
                "nonce": nonce,
                "chainId": self._chain_id,
            }
            built_tx = await contract_fn.build_transaction(tx_params)
            signed = self._account.sign_transaction(built_tx)
            tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        except ContractLogicError as e:
            raise SubmissionError(
                f"{operation} rejected during gas estimation: {_revert_reason(e)}",
                operation=operation,
            ) from e
        except (Web3Exception, ValueError, OSError) as e:
            raise SubmissionError(f"{operation} submission failed: {e}", operation=operation) from e

        hex_hash = to_hex(tx_hash)
        logger.info(f"Submitted {operation}: {hex_hash}")
        return hex_hash

    async def wait(self, tx_hash: str, operation: str) -> Any:
        """
        Wait for a transaction to be mined.

        Raises:
            SubmissionError: On timeout or if the receipt reports a revert
        """
        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._receipt_timeout
            )
        except TimeExhausted as e:
            raise SubmissionError(
                f"{operation} was not mined within {self._receipt_timeout}s",
                operation=operation,
                transaction_hash=tx_hash,
            ) from e

        if receipt["status"] == 0:
            raise SubmissionError(
                f"{operation} reverted on chain",
                operation=operation,
                transaction_hash=tx_hash,
                details={"gas_used": receipt.get("gasUsed")},
            )

        logger.info(f"{operation} mined in block {receipt['blockNumber']}: {tx_hash}")
        return receipt

    async def execute(self, contract_fn: Any, operation: str) -> Any:
        """Simulate, send and wait; the standard path for every write."""
        await self.simulate(contract_fn, operation)
        tx_hash = await self.send(contract_fn, operation)
        return await self.wait(tx_hash, operation)
