"""Tests for MulticallReader batching, ordering and per-slot failures."""

import asyncio
from unittest.mock import MagicMock

import pytest
from eth_abi import encode
from web3 import AsyncWeb3

from omnibridge.chain.multicall import MulticallReader
from omnibridge.core.abi import BRIDGE_ABI, PERMIT_ERC20_ABI
from omnibridge.core.exceptions import ConnectivityError

TARGETS = [f"0x{i:040x}" for i in range(1, 8)]


class FakeAggregate:
    def __init__(self, results, delay: float = 0.0, error: Exception | None = None) -> None:
        self.results = results
        self.delay = delay
        self.error = error

    async def call(self):
        await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.results


def make_w3(responder, delays=None, error=None):
    """
    Build a w3 mock whose aggregate3 answers each (target, allowFailure, data)
    call with `responder(target, data)`.
    """
    multicall = MagicMock(name="multicall")
    encoder = MagicMock(name="encoder")
    encoder.encode_abi = MagicMock(side_effect=lambda method, args: (method, tuple(args)))
    batches = []

    def aggregate3(chunk):
        batches.append(chunk)
        delay = delays[len(batches) - 1] if delays else 0.0
        return FakeAggregate([responder(target, data) for target, _, data in chunk], delay, error)

    multicall.functions.aggregate3 = MagicMock(side_effect=aggregate3)

    w3 = MagicMock(name="w3")
    w3.eth.contract = MagicMock(
        side_effect=lambda address=None, abi=None: multicall if address else encoder
    )
    return w3, batches, encoder


def name_of(target: str, data) -> tuple[bool, bytes]:
    return True, encode(["string"], [f"Token {int(target, 16)}"])


class TestCallMany:
    @pytest.mark.asyncio
    async def test_results_follow_input_order_across_batches(self) -> None:
        # Later batches complete first
        w3, batches, _ = make_w3(name_of, delays=[0.04, 0.03, 0.02, 0.01])
        reader = MulticallReader(w3, batch_size=2)

        names = await reader.call_many(TARGETS, PERMIT_ERC20_ABI, "name")

        assert len(batches) == 4
        assert names == [f"Token {i}" for i in range(1, 8)]

    @pytest.mark.asyncio
    async def test_single_batch(self) -> None:
        w3, batches, _ = make_w3(name_of)
        reader = MulticallReader(w3, batch_size=100)

        names = await reader.call_many(TARGETS[:3], PERMIT_ERC20_ABI, "name")

        assert len(batches) == 1
        assert names == ["Token 1", "Token 2", "Token 3"]

    @pytest.mark.asyncio
    async def test_allow_failure_is_set(self) -> None:
        w3, batches, _ = make_w3(name_of)
        reader = MulticallReader(w3)

        await reader.call_many(TARGETS[:2], PERMIT_ERC20_ABI, "name")

        assert all(allow_failure is True for _, allow_failure, _ in batches[0])

    @pytest.mark.asyncio
    async def test_args_are_encoded_once(self) -> None:
        owner = "0x" + "1" * 40

        def balance(target, data):
            assert data == ("balanceOf", (owner,))
            return True, encode(["uint256"], [42])

        w3, _, encoder = make_w3(balance)
        reader = MulticallReader(w3)

        balances = await reader.call_many(TARGETS[:3], PERMIT_ERC20_ABI, "balanceOf", [owner])

        assert balances == [42, 42, 42]
        encoder.encode_abi.assert_called_once()

    @pytest.mark.asyncio
    async def test_failed_slots_are_none(self) -> None:
        def responder(target, data):
            index = int(target, 16)
            if index == 2:
                return False, b""
            if index == 3:
                return True, b""
            if index == 4:
                return True, b"\x01"
            return name_of(target, data)

        w3, _, _ = make_w3(responder)
        reader = MulticallReader(w3)

        names = await reader.call_many(TARGETS[:5], PERMIT_ERC20_ABI, "name")

        assert names == ["Token 1", None, None, None, "Token 5"]

    @pytest.mark.asyncio
    async def test_empty_targets_skip_rpc(self) -> None:
        w3, batches, _ = make_w3(name_of)
        reader = MulticallReader(w3)

        assert await reader.call_many([], PERMIT_ERC20_ABI, "name") == []
        assert batches == []

    @pytest.mark.asyncio
    async def test_batch_failure_raises_connectivity_error(self) -> None:
        w3, _, _ = make_w3(name_of, error=OSError("connection reset"))
        reader = MulticallReader(w3)

        with pytest.raises(ConnectivityError) as exc_info:
            await reader.call_many(TARGETS, PERMIT_ERC20_ABI, "name")

        assert exc_info.value.stage == "multicall"

    @pytest.mark.asyncio
    async def test_result_count_mismatch_raises(self) -> None:
        w3, _, _ = make_w3(name_of)
        multicall = w3.eth.contract(address="0x" + "0" * 40)
        multicall.functions.aggregate3 = MagicMock(return_value=FakeAggregate([]))
        reader = MulticallReader(w3)

        with pytest.raises(ConnectivityError, match="0 results for 2 calls"):
            await reader.call_many(TARGETS[:2], PERMIT_ERC20_ABI, "name")

    def test_batch_size_must_be_positive(self) -> None:
        w3, _, _ = make_w3(name_of)
        with pytest.raises(ValueError):
            MulticallReader(w3, batch_size=0)


class TestFetchArray:
    @pytest.mark.asyncio
    async def test_reads_each_index_in_order(self) -> None:
        def responder(target, data):
            method, (index,) = data
            assert method == "wrappedTokensAddresses"
            return True, encode(["address"], [TARGETS[index]])

        w3, _, _ = make_w3(responder, delays=[0.02, 0.0])
        reader = MulticallReader(w3, batch_size=2)

        addresses = await reader.fetch_array(TARGETS[0], BRIDGE_ABI, "wrappedTokensAddresses", 3)

        assert [a.lower() for a in addresses] == TARGETS[:3]

    @pytest.mark.asyncio
    async def test_zero_length(self) -> None:
        w3, batches, _ = make_w3(name_of)
        reader = MulticallReader(w3)

        assert await reader.fetch_array(TARGETS[0], BRIDGE_ABI, "wrappedTokensAddresses", 0) == []
        assert batches == []

    @pytest.mark.asyncio
    async def test_addresses_are_checksummed(self) -> None:
        wrapped = "0x" + "c1" * 20
        w3, _, _ = make_w3(lambda target, data: (True, encode(["address"], [wrapped])))
        reader = MulticallReader(w3)

        (address,) = await reader.fetch_array(TARGETS[0], BRIDGE_ABI, "wrappedTokensAddresses", 1)

        assert address == AsyncWeb3.to_checksum_address(wrapped)
        assert address != wrapped
