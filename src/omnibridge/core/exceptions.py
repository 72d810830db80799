"""
Exception hierarchy for OmniBridge.

All bridge exceptions inherit from OmniBridgeError for easy catching.
Operation boundaries on the client convert any of them into a single
user-facing message with `user_message()`.
"""

from __future__ import annotations

from typing import Any


class OmniBridgeError(Exception):
    """
    Base exception for all OmniBridge errors.

    Example:
        >>> try:
        ...     await bridge.transfer(token, 10**18, 137)
        ... except OmniBridgeError as e:
        ...     print(f"Bridge error: {e}")
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(OmniBridgeError):
    """
    Configuration is missing or invalid.

    Raised when:
    - Required configuration values are not provided
    - The chain registry file cannot be parsed
    - A chain has no bridge deployment
    """

    pass


class ValidationError(OmniBridgeError):
    """
    Input validation error.

    Raised when:
    - Required parameters are missing
    - A deposit event has an unknown kind
    """

    pass


class ConnectivityError(OmniBridgeError):
    """
    An RPC call or multicall batch failed.

    The stage names the read that failed (e.g. "wrapped_count", "multicall").
    """

    def __init__(
        self,
        message: str,
        stage: str = "rpc",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.stage = stage

    def __str__(self) -> str:
        return f"[rpc:{self.stage}] {self.message}"


class CapabilityProbeError(OmniBridgeError):
    """
    The permit capability probe gave an ambiguous result.

    Raised when the probe reverts with a reason or fails for any cause other
    than the function being absent. Never triggers the approve fallback.
    """

    def __init__(
        self,
        message: str,
        token: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.token = token


class SimulationError(OmniBridgeError):
    """
    A dry-run (eth_call) of a state-changing call reverted.

    Carries the decoded revert reason when the node returned one.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        reason: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.operation = operation
        self.reason = reason

    def __str__(self) -> str:
        if self.reason:
            return f"[simulate:{self.operation}] {self.message}: {self.reason}"
        return f"[simulate:{self.operation}] {self.message}"


class SubmissionError(OmniBridgeError):
    """
    A transaction was rejected before being mined, or mined with status 0.

    Raised when:
    - The signer refuses or fails to sign
    - The node rejects the raw transaction
    - The receipt never arrives or reports a revert
    """

    def __init__(
        self,
        message: str,
        operation: str,
        transaction_hash: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.operation = operation
        self.transaction_hash = transaction_hash


class TokenLookupError(OmniBridgeError, LookupError):
    """
    A token-index entry required for claim reconstruction is missing.

    This is a caller precondition violation and is never retried.
    """

    def __init__(
        self,
        message: str,
        chain_id: int,
        address: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.chain_id = chain_id
        self.address = address


class PreconditionError(OmniBridgeError):
    """
    An operation was invoked without a ready signer/bridge pair.
    """

    pass


class OperationInProgressError(OmniBridgeError):
    """
    The same operation is already running for this signer and chain.
    """

    def __init__(
        self,
        message: str,
        key: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.key = key


class NetworkError(OmniBridgeError):
    """
    HTTP communication with the history service failed.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code
        self.url = url

    def is_server_error(self) -> bool:
        """Check if this is a server-side error."""
        return self.status_code is not None and 500 <= self.status_code < 600


_REJECTION_MARKERS = ("user rejected", "user denied", "rejected by user")

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


def user_message(error: BaseException) -> str:
    """
    Convert any failure into a single message suitable for showing a user.

    Args:
        error: The exception caught at an operation boundary

    Returns:
        A one-line message
    """
    text = str(error).lower()
    if any(marker in text for marker in _REJECTION_MARKERS):
        return "Transaction rejected by user"
    if isinstance(error, SimulationError):
        return error.reason or error.message
    if isinstance(error, OmniBridgeError):
        return error.message
    return GENERIC_ERROR_MESSAGE
