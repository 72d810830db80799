"""Unit tests for exceptions module."""

from omnibridge.core.exceptions import (
    GENERIC_ERROR_MESSAGE,
    CapabilityProbeError,
    ConfigurationError,
    ConnectivityError,
    NetworkError,
    OmniBridgeError,
    SimulationError,
    SubmissionError,
    TokenLookupError,
    user_message,
)


class TestExceptionHierarchy:
    def test_all_errors_inherit_base(self) -> None:
        errors = [
            ConfigurationError("x"),
            ConnectivityError("x"),
            CapabilityProbeError("x", token="0xabc"),
            SimulationError("x", operation="deposit"),
            SubmissionError("x", operation="deposit"),
            TokenLookupError("x", chain_id=1, address="0xabc"),
            NetworkError("x"),
        ]
        for error in errors:
            assert isinstance(error, OmniBridgeError)

    def test_token_lookup_error_is_lookup_error(self) -> None:
        error = TokenLookupError("missing", chain_id=1, address="0xabc")

        assert isinstance(error, LookupError)
        assert error.chain_id == 1
        assert error.address == "0xabc"

    def test_details_in_str(self) -> None:
        error = OmniBridgeError("failed", details={"amount": 0})
        assert str(error) == "failed | Details: {'amount': 0}"

    def test_connectivity_error_str_has_stage(self) -> None:
        error = ConnectivityError("batch failed", stage="multicall")
        assert str(error) == "[rpc:multicall] batch failed"

    def test_simulation_error_str_has_reason(self) -> None:
        error = SimulationError("Transaction would revert", operation="claim", reason="Already claimed")
        assert str(error) == "[simulate:claim] Transaction would revert: Already claimed"

    def test_network_error_is_server_error(self) -> None:
        assert NetworkError("x", status_code=503).is_server_error()
        assert not NetworkError("x", status_code=404).is_server_error()
        assert not NetworkError("x").is_server_error()


class TestUserMessage:
    def test_rejection_is_normalized(self) -> None:
        error = SubmissionError("deposit submission failed: User rejected the request", operation="deposit")
        assert user_message(error) == "Transaction rejected by user"

    def test_simulation_reason_preferred(self) -> None:
        error = SimulationError("Transaction would revert", operation="deposit", reason="Deadline passed")
        assert user_message(error) == "Deadline passed"

    def test_simulation_without_reason(self) -> None:
        error = SimulationError("Transaction would revert", operation="deposit")
        assert user_message(error) == "Transaction would revert"

    def test_bridge_error_message_without_details(self) -> None:
        error = ConnectivityError("Could not read wrapped token count", stage="wrapped_count")
        assert user_message(error) == "Could not read wrapped token count"

    def test_unknown_error_is_generic(self) -> None:
        assert user_message(RuntimeError("boom")) == GENERIC_ERROR_MESSAGE
