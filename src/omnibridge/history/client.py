"""
Client for the bridge history service.

Read-only HTTP/JSON collaborator listing past bridge transactions. The
history service is fed by an indexer; this client never writes to it and
the deposit/claim path never depends on it.
"""

from __future__ import annotations

from typing import Any

import httpx

from omnibridge.core.exceptions import NetworkError
from omnibridge.core.logging import get_logger
from omnibridge.resilience.retry import execute_with_retry


class HistoryClient:
    """
    Fetches a user's bridge transactions.

    Example:
        >>> history = HistoryClient("http://localhost:8000")
        >>> pending = await history.get_transactions("0xabc...", 80002)
        >>> everything = await history.get_user_history("0xabc...")
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client
        self._owns_client = False
        self._logger = get_logger("history")

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        return self._http_client

    async def close(self) -> None:
        """Close owned HTTP client."""
        if self._owns_client and self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def get_transactions(
        self,
        user_address: str | None,
        chain_id: int | None,
    ) -> list[dict[str, Any]] | None:
        """
        Transactions of `user_address` targeting `chain_id`.

        Returns:
            The decoded list, or None if either argument is missing
        """
        if not user_address or not chain_id:
            return None
        return await self._fetch(f"{self._base_url}/api/transactions/{user_address}/{chain_id}")

    async def get_user_history(self, user_address: str | None) -> list[dict[str, Any]] | None:
        """
        Every transaction of `user_address`, across chains.

        Returns:
            The decoded list, or None if no address was given
        """
        if not user_address:
            return None
        return await self._fetch(f"{self._base_url}/api/transactions/{user_address}")

    async def _fetch(self, url: str) -> list[dict[str, Any]]:
        try:
            return await execute_with_retry(self._get_json, url)
        except httpx.HTTPError as e:
            raise NetworkError(f"History service unreachable: {e}", url=url) from e

    async def _get_json(self, url: str) -> list[dict[str, Any]]:
        client = await self._get_client()
        self._logger.debug(f"GET {url}")
        response = await client.get(url)

        if response.status_code != 200:
            raise NetworkError(
                f"History service returned {response.status_code}",
                status_code=response.status_code,
                url=url,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise NetworkError("History service returned invalid JSON", url=url) from e

        if not isinstance(payload, list):
            raise NetworkError(
                "History service returned an unexpected payload",
                url=url,
                details={"type": type(payload).__name__},
            )
        return payload
