"""
Batched read-only contract calls through Multicall3.

Two shapes:
- call_many: one method (with fixed extra args) against many targets
- fetch_array: one target, `method(i)` for i in range(length)

Calls are packed into `aggregate3` chunks of `batch_size`; each chunk is one
eth_call, and chunks run concurrently. Results are returned in input order.

Per-slot policy: every call is sent with allowFailure=True, so a target that
does not implement the method (or returns undecodable data) yields None in
its slot instead of aborting the batch. A failure of the RPC itself raises
ConnectivityError.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from web3 import AsyncWeb3

from omnibridge.core.abi import MULTICALL3_ABI, get_output_types
from omnibridge.core.config import MULTICALL3_ADDRESS
from omnibridge.core.exceptions import ConnectivityError
from omnibridge.core.logging import get_logger

logger = get_logger("chain.multicall")


class MulticallReader:
    """
    Reads many view calls in the fewest round trips.

    Example:
        >>> reader = MulticallReader(signer.w3)
        >>> names = await reader.call_many(tokens, PERMIT_ERC20_ABI, "name")
        >>> balances = await reader.call_many(tokens, PERMIT_ERC20_ABI, "balanceOf", [owner])
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        multicall_address: str = MULTICALL3_ADDRESS,
        batch_size: int = 100,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._w3 = w3
        self._multicall = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(multicall_address), abi=MULTICALL3_ABI
        )
        self._batch_size = batch_size

    async def call_many(
        self,
        targets: Sequence[str],
        abi: list[dict[str, Any]],
        method: str,
        args: Sequence[Any] = (),
    ) -> list[Any | None]:
        """
        Call `method(*args)` on every target.

        Returns:
            One decoded result per target, in target order (None for failed slots)
        """
        if not targets:
            return []
        encoder = self._w3.eth.contract(abi=abi)
        call_data = encoder.encode_abi(method, args=list(args))
        calls = [(AsyncWeb3.to_checksum_address(target), True, call_data) for target in targets]
        return await self._aggregate(calls, get_output_types(abi, method), method)

    async def fetch_array(
        self,
        target: str,
        abi: list[dict[str, Any]],
        method: str,
        length: int,
    ) -> list[Any | None]:
        """
        Read elements 0..length-1 of an array-returning getter on one target.
        """
        if length <= 0:
            return []
        encoder = self._w3.eth.contract(abi=abi)
        address = AsyncWeb3.to_checksum_address(target)
        calls = [(address, True, encoder.encode_abi(method, args=[i])) for i in range(length)]
        return await self._aggregate(calls, get_output_types(abi, method), method)

    async def _aggregate(
        self,
        calls: list[tuple[str, bool, Any]],
        output_types: list[str],
        method: str,
    ) -> list[Any | None]:
        chunks = [
            calls[start : start + self._batch_size]
            for start in range(0, len(calls), self._batch_size)
        ]
        logger.debug(f"Multicall {method}: {len(calls)} calls in {len(chunks)} batch(es)")

        try:
            # gather preserves argument order, not completion order
            chunk_results = await asyncio.gather(
                *(self._multicall.functions.aggregate3(chunk).call() for chunk in chunks)
            )
        except Exception as e:
            raise ConnectivityError(
                f"Multicall batch for {method} failed: {e}",
                stage="multicall",
                details={"method": method, "calls": len(calls)},
            ) from e

        results: list[Any | None] = []
        for chunk, returned in zip(chunks, chunk_results):
            if len(returned) != len(chunk):
                raise ConnectivityError(
                    f"Multicall returned {len(returned)} results for {len(chunk)} calls",
                    stage="multicall",
                )
            for success, return_data in returned:
                results.append(self._decode(success, return_data, output_types, method))
        return results

    @staticmethod
    def _decode(
        success: bool,
        return_data: bytes,
        output_types: list[str],
        method: str,
    ) -> Any | None:
        if not success or not return_data:
            return None
        try:
            values = decode(output_types, bytes(return_data))
        except DecodingError:
            logger.debug(f"Undecodable return data for {method}")
            return None
        # eth_abi yields lowercase addresses; contract calls need checksummed ones
        values = tuple(
            AsyncWeb3.to_checksum_address(value) if kind == "address" else value
            for kind, value in zip(output_types, values)
        )
        return values[0] if len(values) == 1 else values
