"""Tests for WalletSigner with a real local account and a mocked provider."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_account import Account
from web3.exceptions import ContractLogicError, TimeExhausted

from conftest import SEPOLIA, make_receipt
from omnibridge.bridge.authorization import permit_typed_data
from omnibridge.core.exceptions import ConfigurationError, SimulationError, SubmissionError
from omnibridge.wallet.signer import WalletSigner

PRIVATE_KEY = "0x" + "4c" * 32
TX_HASH = b"\x12" * 32


@pytest.fixture
def w3():
    w3 = MagicMock()
    w3.eth.get_transaction_count = AsyncMock(return_value=7)
    w3.eth.send_raw_transaction = AsyncMock(return_value=TX_HASH)
    w3.eth.wait_for_transaction_receipt = AsyncMock(return_value=make_receipt())
    return w3


@pytest.fixture
def wallet(w3) -> WalletSigner:
    return WalletSigner(w3, Account.from_key(PRIVATE_KEY), SEPOLIA, receipt_timeout=5)


def contract_fn(call=None, build=None):
    fn = MagicMock()
    fn.call = call or AsyncMock(return_value=True)
    fn.build_transaction = build or AsyncMock(
        return_value={
            "to": "0x" + "b" * 40,
            "data": "0x",
            "value": 0,
            "gas": 100_000,
            "maxFeePerGas": 2_000_000_000,
            "maxPriorityFeePerGas": 1_000_000_000,
            "nonce": 7,
            "chainId": SEPOLIA,
        }
    )
    return fn


class TestSigning:
    def test_address_from_key(self, wallet) -> None:
        assert wallet.address == Account.from_key(PRIVATE_KEY).address
        assert wallet.chain_id == SEPOLIA

    def test_sign_typed_data_recovers_to_signer(self, wallet) -> None:
        message = permit_typed_data(
            token_name="Test Token",
            version="1",
            chain_id=SEPOLIA,
            token="0x" + "a" * 40,
            owner=wallet.address,
            spender="0x" + "b" * 40,
            value=100,
            nonce=0,
            deadline=1_700_003_600,
        )

        signature = wallet.sign_typed_data(message)

        assert signature.v in (27, 28)
        assert len(signature.r) == 32
        assert len(signature.s) == 32
        assert not signature.is_zero()

    @pytest.mark.asyncio
    async def test_connect_requires_key_and_url(self) -> None:
        with pytest.raises(ConfigurationError, match="rpc_url"):
            await WalletSigner.connect("", PRIVATE_KEY)
        with pytest.raises(ConfigurationError, match="private_key"):
            await WalletSigner.connect("https://rpc.sepolia.org", "")


class TestSimulate:
    @pytest.mark.asyncio
    async def test_calls_from_signer(self, wallet) -> None:
        fn = contract_fn()

        assert await wallet.simulate(fn, "deposit") is True
        fn.call.assert_awaited_once_with({"from": wallet.address})

    @pytest.mark.asyncio
    async def test_revert_becomes_simulation_error(self, wallet) -> None:
        fn = contract_fn(call=AsyncMock(side_effect=ContractLogicError("execution reverted: Deadline passed")))

        with pytest.raises(SimulationError) as exc_info:
            await wallet.simulate(fn, "deposit")

        assert exc_info.value.operation == "deposit"
        assert exc_info.value.reason == "Deadline passed"


class TestSend:
    @pytest.mark.asyncio
    async def test_signs_and_broadcasts(self, wallet, w3) -> None:
        fn = contract_fn()

        tx_hash = await wallet.send(fn, "approve")

        assert tx_hash == "0x" + "12" * 32
        params = fn.build_transaction.await_args.args[0]
        assert params == {"from": wallet.address, "nonce": 7, "chainId": SEPOLIA}
        w3.eth.send_raw_transaction.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_node_rejection_becomes_submission_error(self, wallet, w3) -> None:
        w3.eth.send_raw_transaction.side_effect = ValueError("nonce too low")

        with pytest.raises(SubmissionError, match="nonce too low"):
            await wallet.send(contract_fn(), "approve")

    @pytest.mark.asyncio
    async def test_gas_estimation_revert(self, wallet) -> None:
        fn = contract_fn(build=AsyncMock(side_effect=ContractLogicError("execution reverted: paused")))

        with pytest.raises(SubmissionError, match="paused"):
            await wallet.send(fn, "deposit")


class TestWait:
    @pytest.mark.asyncio
    async def test_returns_receipt(self, wallet) -> None:
        receipt = await wallet.wait("0xabc", "deposit")
        assert receipt["status"] == 1

    @pytest.mark.asyncio
    async def test_reverted_receipt(self, wallet, w3) -> None:
        w3.eth.wait_for_transaction_receipt.return_value = make_receipt(status=0)

        with pytest.raises(SubmissionError, match="reverted on chain") as exc_info:
            await wallet.wait("0xabc", "deposit")

        assert exc_info.value.transaction_hash == "0xabc"

    @pytest.mark.asyncio
    async def test_timeout(self, wallet, w3) -> None:
        w3.eth.wait_for_transaction_receipt.side_effect = TimeExhausted("slow")

        with pytest.raises(SubmissionError, match="not mined"):
            await wallet.wait("0xabc", "deposit")


class TestExecute:
    @pytest.mark.asyncio
    async def test_simulation_failure_sends_nothing(self, wallet, w3) -> None:
        fn = contract_fn(call=AsyncMock(side_effect=ContractLogicError("execution reverted: nope")))

        with pytest.raises(SimulationError):
            await wallet.execute(fn, "claim")

        w3.eth.send_raw_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_full_path(self, wallet, w3) -> None:
        receipt = await wallet.execute(contract_fn(), "claim")

        assert receipt["blockNumber"] == 100
        w3.eth.wait_for_transaction_receipt.assert_awaited_once_with("0x" + "12" * 32, timeout=5)
