"""
Configuration management for OmniBridge.

Handles loading configuration from environment variables and validation.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any

# Multicall3 is deployed at the same address on every major EVM chain
MULTICALL3_ADDRESS = "0xcA11bde05977b3631167028862bE2a173976CA11"


def _get_env_var(name: str, default: str | None = None, required: bool = False) -> str | None:
    """Get environment variable with optional default."""
    value = os.environ.get(name, default)
    if required and not value:
        raise ValueError(f"Required environment variable {name} is not set")
    return value


@dataclass(frozen=True)
class Config:
    """Bridge client configuration."""

    rpc_url: str | None = None
    private_key: str | None = None
    registry_path: str | None = None
    history_api_url: str = "http://localhost:8000"
    storage_backend: str = "memory"
    redis_url: str | None = None
    log_level: str = "INFO"

    # Timeouts (seconds)
    request_timeout: float = 30.0
    receipt_timeout: float = 120.0

    # Deposits are valid for this long after being built
    deposit_window_seconds: int = 3600

    # Reads
    multicall_batch_size: int = 100
    multicall_address: str = MULTICALL3_ADDRESS

    # EIP-712 domain of the bridge contract's claim signature
    claim_domain_name: str = "Bridge"
    claim_domain_version: str = "1"

    # In-flight guard lock TTL (seconds)
    operation_lock_ttl: int = 600

    env: str = "development"

    def __post_init__(self) -> None:
        if self.deposit_window_seconds <= 0:
            raise ValueError("deposit_window_seconds must be positive")
        if self.multicall_batch_size <= 0:
            raise ValueError("multicall_batch_size must be positive")
        if not self.history_api_url:
            raise ValueError("history_api_url is required")

    @classmethod
    def from_env(cls, **overrides: Any) -> Config:
        """Load configuration from environment variables."""
        rpc_url = overrides.get("rpc_url") or _get_env_var("OMNIBRIDGE_RPC_URL")
        private_key = overrides.get("private_key") or _get_env_var("OMNIBRIDGE_PRIVATE_KEY")
        registry_path = overrides.get("registry_path") or _get_env_var(
            "OMNIBRIDGE_REGISTRY_PATH"
        )
        history_api_url = overrides.get("history_api_url") or _get_env_var(
            "OMNIBRIDGE_HISTORY_URL", default=cls.history_api_url
        )
        storage_backend = overrides.get("storage_backend") or _get_env_var(
            "OMNIBRIDGE_STORAGE_BACKEND", default="memory"
        )
        redis_url = overrides.get("redis_url") or _get_env_var("OMNIBRIDGE_REDIS_URL")
        log_level = overrides.get("log_level") or _get_env_var(
            "OMNIBRIDGE_LOG_LEVEL", default="INFO"
        )
        env = overrides.get("env") or _get_env_var("OMNIBRIDGE_ENV", default="development")

        deposit_window = overrides.get("deposit_window_seconds") or _get_env_var(
            "OMNIBRIDGE_DEPOSIT_WINDOW"
        )

        return cls(
            rpc_url=rpc_url,
            private_key=private_key,
            registry_path=registry_path,
            history_api_url=history_api_url,  # type: ignore
            storage_backend=storage_backend,  # type: ignore
            redis_url=redis_url,
            log_level=log_level,  # type: ignore
            request_timeout=overrides.get("request_timeout", cls.request_timeout),
            receipt_timeout=overrides.get("receipt_timeout", cls.receipt_timeout),
            deposit_window_seconds=(
                int(deposit_window) if deposit_window else cls.deposit_window_seconds
            ),
            multicall_batch_size=overrides.get(
                "multicall_batch_size", cls.multicall_batch_size
            ),
            multicall_address=overrides.get("multicall_address", cls.multicall_address),
            claim_domain_name=overrides.get("claim_domain_name", cls.claim_domain_name),
            claim_domain_version=overrides.get(
                "claim_domain_version", cls.claim_domain_version
            ),
            operation_lock_ttl=overrides.get("operation_lock_ttl", cls.operation_lock_ttl),
            env=env,  # type: ignore
        )

    def with_updates(self, **updates: Any) -> Config:
        """Create a new Config with updated values."""
        return replace(self, **updates)

    def masked_private_key(self) -> str:
        """Return the private key with most characters masked for safe logging."""
        if not self.private_key or len(self.private_key) <= 10:
            return "****"
        return self.private_key[:6] + "..." + self.private_key[-4:]
