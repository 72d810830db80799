"""OmniBridge - Main client entry point."""

from __future__ import annotations

from typing import Any

from omnibridge.bridge.catalog import TokenCatalog
from omnibridge.bridge.claim import ClaimSubmitter, reconstruct_claim
from omnibridge.bridge.deposit import DepositOrchestrator
from omnibridge.bridge.events import decode_deposit_event
from omnibridge.bridge.guard import OperationGuard
from omnibridge.bridge.journal import TransferJournal
from omnibridge.chain.multicall import MulticallReader
from omnibridge.chain.session import BridgeHandle, BridgeSession, SessionState
from omnibridge.core.config import Config
from omnibridge.core.exceptions import user_message
from omnibridge.core.logging import configure_logging, get_logger
from omnibridge.core.registry import ChainRegistry
from omnibridge.core.types import (
    BridgeOperation,
    BridgeResult,
    ClaimPayload,
    DepositEvent,
    Signature,
    Token,
    TokenIndex,
    to_hex,
)
from omnibridge.history.client import HistoryClient
from omnibridge.storage import StorageBackend, get_storage
from omnibridge.wallet.signer import WalletSigner


class OmniBridge:
    """
    Main client for the lock/mint/burn/claim bridge.

    Holds the state a wallet UI needs (bridge handle, token list, last
    transaction, last error) and exposes the bridge operations. Each
    operation catches its own failures and reports them as a
    `BridgeResult` with a user-facing error message.

    Example:
        >>> bridge = OmniBridge(registry=ChainRegistry.from_file("chains.json"))
        >>> await bridge.connect(private_key="0x...", rpc_url="https://...")
        >>> result = await bridge.transfer(bridge.token_list[0], 10**18, 80002)
        >>> # later, connected to chain 80002:
        >>> await bridge.receive(result.deposit, token_index)
    """

    def __init__(
        self,
        registry: ChainRegistry | None = None,
        config: Config | None = None,
        storage: StorageBackend | None = None,
        log_level: int | str | None = None,
    ) -> None:
        """
        Initialize the bridge client.

        Args:
            registry: Chain registry (or loaded from config / OMNIBRIDGE_REGISTRY_PATH)
            config: Configuration (or loaded from OMNIBRIDGE_* env)
            storage: Storage backend for the journal and operation locks
            log_level: Logging level (default from config)
        """
        self._config = config or Config.from_env()

        configure_logging(level=log_level or self._config.log_level)
        self._logger = get_logger("client")

        if registry is None:
            registry = (
                ChainRegistry.from_file(self._config.registry_path)
                if self._config.registry_path
                else ChainRegistry.from_env()
            )
        self._registry = registry
        self._logger.info(f"Initializing OmniBridge ({len(registry)} chain(s) configured)")

        if storage is None:
            options = {}
            if self._config.storage_backend == "redis" and self._config.redis_url:
                options["redis_url"] = self._config.redis_url
            storage = get_storage(self._config.storage_backend, **options)
        self._storage = storage

        self._session = BridgeSession(registry)
        self._catalog = TokenCatalog(registry, reader_factory=self._make_reader)
        self._depositor = DepositOrchestrator(
            deposit_window_seconds=self._config.deposit_window_seconds
        )
        self._submitter = ClaimSubmitter(
            domain_name=self._config.claim_domain_name,
            domain_version=self._config.claim_domain_version,
        )
        self._journal = TransferJournal(storage)
        self._guard = OperationGuard(storage, ttl=self._config.operation_lock_ttl)
        self._history = HistoryClient(
            self._config.history_api_url, timeout=self._config.request_timeout
        )

        self._token_list: list[Token] = []
        self._is_loading = False
        self._last_error = ""
        self._last_transaction: Any = None

    def _make_reader(self, w3: Any) -> MulticallReader:
        return MulticallReader(
            w3,
            multicall_address=self._config.multicall_address,
            batch_size=self._config.multicall_batch_size,
        )

    @property
    def config(self) -> Config:
        return self._config

    @property
    def registry(self) -> ChainRegistry:
        return self._registry

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def bridge(self) -> BridgeHandle | None:
        """The active bridge handle, or None until a supported chain is bound."""
        return self._session.handle

    @property
    def token_list(self) -> list[Token]:
        return self._token_list

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def last_error(self) -> str:
        return self._last_error

    @property
    def last_transaction(self) -> Any:
        return self._last_transaction

    @property
    def journal(self) -> TransferJournal:
        return self._journal

    @property
    def history(self) -> HistoryClient:
        return self._history

    def reset_error(self) -> None:
        self._last_error = ""

    def reset_transaction_data(self) -> None:
        self._last_transaction = None

    # ── Session ──────────────────────────────────────────────────────

    async def connect(
        self,
        private_key: str | None = None,
        rpc_url: str | None = None,
    ) -> SessionState:
        """Connect a local-key signer and bind it."""
        signer = await WalletSigner.connect(
            rpc_url or self._config.rpc_url,  # type: ignore[arg-type]
            private_key or self._config.private_key,  # type: ignore[arg-type]
            request_timeout=self._config.request_timeout,
            receipt_timeout=self._config.receipt_timeout,
        )
        return await self.bind(signer)

    async def bind(self, signer: WalletSigner | None) -> SessionState:
        """
        Rebind to a new signer or chain. A changed handle replaces the
        token list wholesale.
        """
        if self._session.bind(signer):
            self._token_list = []
            if self._session.handle is not None:
                await self.refresh_tokens()
        return self._session.state

    # ── Operations ───────────────────────────────────────────────────

    def _fail(self, operation: BridgeOperation, error: Exception) -> BridgeResult:
        message = user_message(error)
        self._logger.error(f"{operation.value} failed: {error}")
        self._last_error = message
        return BridgeResult(success=False, operation=operation, error=message)

    async def refresh_tokens(self) -> BridgeResult:
        """Reload the token list for the active bridge handle."""
        self._is_loading = True
        handle = self._session.handle
        try:
            handle = self._session.require()
            tokens = await self._catalog.refresh(handle.chain_id, handle.signer, handle)
        except Exception as e:
            # A rebind during the refresh makes this outcome stale
            if self._session.handle is not handle:
                self._logger.debug(f"Ignoring failed refresh for a replaced handle: {e}")
                return BridgeResult(
                    success=False,
                    operation=BridgeOperation.REFRESH,
                    error=user_message(e),
                    metadata={"stale": True},
                )
            return self._fail(BridgeOperation.REFRESH, e)
        finally:
            self._is_loading = False

        if self._session.handle is handle:
            self._token_list = tokens
        return BridgeResult(
            success=True,
            operation=BridgeOperation.REFRESH,
            metadata={"chain_id": handle.chain_id, "tokens": len(tokens)},
        )

    async def transfer(
        self,
        token: Token | str,
        amount: int,
        destination_chain_id: int,
        recipient: str | None = None,
    ) -> BridgeResult:
        """
        Phase 1: deposit on the active chain for claiming on `destination_chain_id`.

        On success the mined deposit event is journaled and returned in
        `result.deposit`; pass it to `receive()` on the destination chain.

        Once the deposit is mined the result is a success even if the event
        cannot be decoded or journaled. The receipt is still returned, and
        `result.error` plus `metadata["journaled"] == False` flag the
        problem; re-invoking would deposit a second time.
        """
        self._is_loading = True
        try:
            handle = self._session.require()
            async with self._guard.hold(
                handle.signer.address, handle.chain_id, BridgeOperation.TRANSFER.value
            ):
                receipt = await self._depositor.transfer(
                    handle, token, amount, destination_chain_id, recipient=recipient
                )
                self._last_transaction = receipt
                deposit, journal_error = await self._journal_deposit(handle, receipt)
        except Exception as e:
            return self._fail(BridgeOperation.TRANSFER, e)
        finally:
            self._is_loading = False

        self._last_error = journal_error or ""
        return BridgeResult(
            success=True,
            operation=BridgeOperation.TRANSFER,
            transaction_hash=to_hex(receipt["transactionHash"]),
            receipt=receipt,
            deposit=deposit,
            error=journal_error,
            metadata={"journaled": journal_error is None},
        )

    async def _journal_deposit(
        self, handle: BridgeHandle, receipt: Any
    ) -> tuple[DepositEvent | None, str | None]:
        """Decode and journal a mined deposit without failing the transfer."""
        tx_hash = to_hex(receipt["transactionHash"])
        try:
            deposit = decode_deposit_event(handle, receipt)
        except Exception as e:
            self._logger.error(f"Deposit {tx_hash} mined but its event could not be decoded: {e}")
            return None, f"Deposit {tx_hash} was mined but its event could not be read"

        try:
            await self._journal.record_deposit(deposit)
        except Exception as e:
            self._logger.error(f"Deposit {deposit.key} mined but not journaled: {e}")
            return deposit, f"Deposit {tx_hash} was mined but could not be saved for claiming"
        return deposit, None

    async def receive(self, deposit: DepositEvent, token_index: TokenIndex) -> BridgeResult:
        """
        Phase 2: rebuild, sign and submit the claim for a mined deposit.

        Must be bound to the deposit's destination chain.
        """
        self._is_loading = True
        try:
            handle = self._session.require()
            async with self._guard.hold(
                handle.signer.address, handle.chain_id, BridgeOperation.CLAIM.value
            ):
                payload = reconstruct_claim(deposit, token_index)
                receipt = await self._submitter.claim(handle, payload)
                tx_hash = to_hex(receipt["transactionHash"])
                await self._journal.mark_claimed(deposit.key, tx_hash)
        except Exception as e:
            return self._fail(BridgeOperation.RECEIVE, e)
        finally:
            self._is_loading = False

        self._last_transaction = receipt
        self._last_error = ""
        return BridgeResult(
            success=True,
            operation=BridgeOperation.RECEIVE,
            transaction_hash=tx_hash,
            receipt=receipt,
            deposit=deposit,
            claim=payload,
        )

    async def claim(
        self,
        payload: ClaimPayload,
        signature: Signature | None = None,
    ) -> BridgeResult:
        """Submit an already-built claim payload (signing it unless a signature is given)."""
        self._is_loading = True
        try:
            handle = self._session.require()
            async with self._guard.hold(
                handle.signer.address, handle.chain_id, BridgeOperation.CLAIM.value
            ):
                receipt = await self._submitter.claim(handle, payload, signature=signature)
        except Exception as e:
            return self._fail(BridgeOperation.CLAIM, e)
        finally:
            self._is_loading = False

        self._last_transaction = receipt
        self._last_error = ""
        return BridgeResult(
            success=True,
            operation=BridgeOperation.CLAIM,
            transaction_hash=to_hex(receipt["transactionHash"]),
            receipt=receipt,
            claim=payload,
        )

    async def pending_claims(self) -> list[DepositEvent]:
        """Journaled deposits waiting to be claimed by this signer on this chain."""
        handle = self._session.handle
        if handle is None:
            return []
        return await self._journal.pending(
            destination_chain_id=handle.chain_id, recipient=handle.signer.address
        )

    async def resume_pending_claims(self, token_index: TokenIndex) -> list[BridgeResult]:
        """Claim every journaled deposit destined for the active signer and chain."""
        results = []
        for deposit in await self.pending_claims():
            self._logger.info(f"Resuming claim for deposit {deposit.key}")
            results.append(await self.receive(deposit, token_index))
        return results

    async def close(self) -> None:
        """Release HTTP and storage connections."""
        await self._history.close()
        await self._storage.close()
