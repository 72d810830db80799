"""
Static chain / token registry.

Maps a chain id to the bridge deployment on that chain and the set of
"original" tokens native to it. Loaded once at process start (from a dict,
a JSON file, or the file named by OMNIBRIDGE_REGISTRY_PATH) and read-only
afterwards.

JSON layout:

    {
      "chains": [
        {
          "chain_id": 11155111,
          "name": "Sepolia",
          "rpc_url": "https://...",
          "bridge_address": "0x...",
          "original_tokens": ["0x...", {"address": "0x...", "symbol": "FOO"}]
        }
      ]
    }
"""

from __future__ import annotations

import json
import os
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from web3 import AsyncWeb3

from omnibridge.core.exceptions import ConfigurationError

REGISTRY_ENV_VAR = "OMNIBRIDGE_REGISTRY_PATH"

# Chain labels for chains without an explicit "name" in the registry file
CHAIN_NAMES: dict[int, str] = {
    1: "Ethereum",
    10: "Optimism",
    56: "BNB Chain",
    137: "Polygon",
    8453: "Base",
    42161: "Arbitrum",
    43114: "Avalanche",
    # Testnets
    97: "BNB Testnet",
    80002: "Polygon Amoy",
    84532: "Base Sepolia",
    421614: "Arbitrum Sepolia",
    11155111: "Sepolia",
}


def _is_evm_address(value: str) -> bool:
    return bool(re.fullmatch(r"0x[a-fA-F0-9]{40}", value))


@dataclass(frozen=True)
class ChainConfig:
    """One registry row."""

    chain_id: int
    bridge_address: str | None = None
    rpc_url: str | None = None
    name: str = ""
    original_tokens: tuple[str, ...] = field(default_factory=tuple)

    @property
    def label(self) -> str:
        return self.name or CHAIN_NAMES.get(self.chain_id, f"Chain {self.chain_id}")

    @property
    def has_bridge(self) -> bool:
        return bool(self.bridge_address)


def _parse_token_address(entry: Any, chain_id: int) -> str:
    address = entry.get("address") if isinstance(entry, Mapping) else entry
    address = str(address or "").strip()
    if not _is_evm_address(address):
        raise ConfigurationError(
            f"Invalid original token address on chain {chain_id}: {address!r}"
        )
    return AsyncWeb3.to_checksum_address(address)


def _parse_chain(entry: Mapping[str, Any]) -> ChainConfig:
    try:
        chain_id = int(entry["chain_id"])
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Registry entry without a valid chain_id: {entry!r}") from e

    bridge_address = entry.get("bridge_address") or None
    if bridge_address is not None:
        if not _is_evm_address(str(bridge_address)):
            raise ConfigurationError(
                f"Invalid bridge address on chain {chain_id}: {bridge_address!r}"
            )
        bridge_address = AsyncWeb3.to_checksum_address(str(bridge_address))

    return ChainConfig(
        chain_id=chain_id,
        bridge_address=bridge_address,
        rpc_url=entry.get("rpc_url") or None,
        name=str(entry.get("name", "")),
        original_tokens=tuple(
            _parse_token_address(token, chain_id) for token in entry.get("original_tokens", [])
        ),
    )


class ChainRegistry:
    """
    Read-only lookup of bridge deployments by chain id.

    Example:
        >>> registry = ChainRegistry.from_file("chains.json")
        >>> registry.bridge_address(11155111)
        '0x...'
    """

    def __init__(self, chains: Iterable[ChainConfig] = ()) -> None:
        self._chains: dict[int, ChainConfig] = {}
        for chain in chains:
            if chain.chain_id in self._chains:
                raise ConfigurationError(f"Duplicate registry entry for chain {chain.chain_id}")
            self._chains[chain.chain_id] = chain

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ChainRegistry:
        """Build from the parsed JSON layout described in the module docstring."""
        chains = data.get("chains")
        if not isinstance(chains, list):
            raise ConfigurationError("Registry must contain a 'chains' list")
        return cls(_parse_chain(entry) for entry in chains)

    @classmethod
    def from_file(cls, path: str | Path) -> ChainRegistry:
        path = Path(path)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise ConfigurationError(f"Registry file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Registry file is not valid JSON: {path}") from e
        if not isinstance(payload, Mapping):
            raise ConfigurationError(f"Registry file must hold a JSON object: {path}")
        return cls.from_mapping(payload)

    @classmethod
    def from_env(cls) -> ChainRegistry:
        """Load from OMNIBRIDGE_REGISTRY_PATH, or an empty registry if unset."""
        path = os.environ.get(REGISTRY_ENV_VAR)
        if not path:
            return cls()
        return cls.from_file(path)

    def __contains__(self, chain_id: object) -> bool:
        return chain_id in self._chains

    def __len__(self) -> int:
        return len(self._chains)

    @property
    def chain_ids(self) -> list[int]:
        return list(self._chains)

    def get(self, chain_id: int) -> ChainConfig | None:
        return self._chains.get(chain_id)

    def is_supported(self, chain_id: int) -> bool:
        """Check if the chain has a bridge deployment."""
        chain = self._chains.get(chain_id)
        return chain is not None and chain.has_bridge

    def bridge_address(self, chain_id: int) -> str:
        chain = self._chains.get(chain_id)
        if chain is None or not chain.bridge_address:
            raise ConfigurationError(f"No bridge deployed on chain {chain_id}")
        return chain.bridge_address

    def original_tokens(self, chain_id: int) -> list[str]:
        """Original token addresses in registry order; empty for unknown chains."""
        chain = self._chains.get(chain_id)
        return list(chain.original_tokens) if chain else []

    def rpc_url(self, chain_id: int) -> str | None:
        chain = self._chains.get(chain_id)
        return chain.rpc_url if chain else None
