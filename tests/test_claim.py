"""Tests for claim reconstruction and submission."""

import pytest

from conftest import (
    AMOY,
    AMOY_BRIDGE,
    BLOCK_HASH,
    BSC_TESTNET,
    ORIGINAL_TOKEN,
    RECIPIENT_ADDRESS,
    SEPOLIA,
    SIGNER_ADDRESS,
    TX_HASH,
    WRAPPED_TOKEN,
    FakeSigner,
    make_handle,
)
from omnibridge.bridge.claim import ClaimSubmitter, claim_typed_data, reconstruct_claim
from omnibridge.core.exceptions import TokenLookupError, ValidationError
from omnibridge.core.types import (
    MAX_UINT256,
    ZERO_ADDRESS,
    ClaimToken,
    DepositEvent,
    DepositEventKind,
    Signature,
    SourceTxData,
    Token,
)


def lock_event(**overrides) -> DepositEvent:
    args = {
        "lockedTokenAddress": ORIGINAL_TOKEN,
        "value": 100,
        "sender": SIGNER_ADDRESS,
        "recepient": RECIPIENT_ADDRESS,
        "sourceChainId": SEPOLIA,
        "toChainId": AMOY,
    }
    args.update(overrides)
    return DepositEvent(
        kind=DepositEventKind.LOCK_ORIGINAL,
        args=args,
        transaction_hash=TX_HASH,
        block_hash=BLOCK_HASH,
        log_index=3,
    )


def burn_event(to_chain_id: int = SEPOLIA, **overrides) -> DepositEvent:
    args = {
        "burnedWrappedTokenAddress": WRAPPED_TOKEN,
        "value": 50,
        "sender": SIGNER_ADDRESS,
        "recepient": RECIPIENT_ADDRESS,
        "sourceChainId": AMOY,
        "toChainId": to_chain_id,
        "originalTokenAddress": ORIGINAL_TOKEN,
        "originalTokenChainId": SEPOLIA,
    }
    args.update(overrides)
    return DepositEvent(
        kind=DepositEventKind.BURN_WRAPPED,
        args=args,
        transaction_hash=TX_HASH,
        block_hash=BLOCK_HASH,
        log_index=0,
    )


class TestReconstructLock:
    def test_mints_wrapped_token(self) -> None:
        token_a = "0x" + "a" * 40
        event = DepositEvent(
            kind=DepositEventKind.LOCK_ORIGINAL,
            args={
                "lockedTokenAddress": token_a,
                "value": 100,
                "sender": "0x" + "5" * 40,
                "recepient": "0x" + "7" * 40,
                "sourceChainId": 1,
                "toChainId": 2,
            },
            transaction_hash=TX_HASH,
            block_hash=BLOCK_HASH,
            log_index=1,
        )
        index = {1: {token_a: Token("Foo", "FOO", token_a)}}

        payload = reconstruct_claim(event, index)

        assert payload.target_token_address == ZERO_ADDRESS
        assert payload.target_token_name == "Wrapped Foo"
        assert payload.target_token_symbol == "WFOO"
        assert payload.token == ClaimToken(token_address=token_a, origin_chain_id=1)
        assert payload.deposit_tx_source_token == token_a
        assert payload.mints_wrapped

    def test_parties_value_and_deadline(self, token_index) -> None:
        payload = reconstruct_claim(lock_event(), token_index)

        assert payload.from_party.address == SIGNER_ADDRESS
        assert payload.from_party.chain_id == SEPOLIA
        assert payload.to_party.address == RECIPIENT_ADDRESS
        assert payload.to_party.chain_id == AMOY
        assert payload.value == 100
        assert payload.deadline == MAX_UINT256

    def test_source_tx_data_copied_verbatim(self, token_index) -> None:
        payload = reconstruct_claim(lock_event(), token_index)

        assert payload.source_tx_data == SourceTxData(
            transaction_hash=TX_HASH, block_hash=BLOCK_HASH, log_index=3
        )

    def test_lookup_ignores_address_case(self, token_index) -> None:
        event = lock_event(lockedTokenAddress=ORIGINAL_TOKEN.upper().replace("0X", "0x"))

        assert reconstruct_claim(event, token_index).target_token_symbol == "WTT"

    def test_is_pure(self, token_index) -> None:
        event = lock_event()

        first = reconstruct_claim(event, token_index)
        second = reconstruct_claim(event, token_index)

        assert first == second
        assert first.as_contract_args() == second.as_contract_args()


class TestReconstructBurn:
    def test_release_on_home_chain(self) -> None:
        token_a = "0x" + "a" * 40
        token_b = "0x" + "b" * 40
        event = DepositEvent(
            kind=DepositEventKind.BURN_WRAPPED,
            args={
                "burnedWrappedTokenAddress": token_b,
                "value": 50,
                "sender": "0x" + "5" * 40,
                "recepient": "0x" + "7" * 40,
                "sourceChainId": 2,
                "toChainId": 1,
                "originalTokenAddress": token_a,
                "originalTokenChainId": 1,
            },
            transaction_hash=TX_HASH,
            block_hash=BLOCK_HASH,
            log_index=0,
        )
        index = {1: {token_a: Token("Foo", "FOO", token_a)}}

        payload = reconstruct_claim(event, index)

        assert payload.target_token_address == token_a
        assert payload.target_token_name == "Foo"
        assert payload.target_token_symbol == "FOO"
        assert payload.deposit_tx_source_token == token_b
        assert payload.token == ClaimToken(token_address=token_a, origin_chain_id=1)
        assert not payload.mints_wrapped

    def test_third_chain_mints_wrapped(self, token_index) -> None:
        payload = reconstruct_claim(burn_event(to_chain_id=BSC_TESTNET), token_index)

        assert payload.target_token_address == ZERO_ADDRESS
        assert payload.target_token_name == "Wrapped Test Token"
        assert payload.target_token_symbol == "WTT"
        assert payload.token == ClaimToken(token_address=ORIGINAL_TOKEN, origin_chain_id=SEPOLIA)
        assert payload.deposit_tx_source_token == WRAPPED_TOKEN
        assert payload.to_party.chain_id == BSC_TESTNET


class TestReconstructErrors:
    def test_missing_chain_raises_lookup_error(self) -> None:
        with pytest.raises(TokenLookupError) as exc_info:
            reconstruct_claim(lock_event(), {})

        assert exc_info.value.chain_id == SEPOLIA
        assert exc_info.value.address == ORIGINAL_TOKEN

    def test_missing_token_raises_lookup_error(self, token_index) -> None:
        with pytest.raises(LookupError):
            reconstruct_claim(lock_event(lockedTokenAddress="0x" + "e" * 40), token_index)

    def test_release_requires_original_metadata(self, token_index) -> None:
        index = {AMOY: token_index[AMOY]}

        with pytest.raises(TokenLookupError):
            reconstruct_claim(burn_event(to_chain_id=SEPOLIA), index)


class TestClaimTypedData:
    def test_domain_is_destination_bridge(self, token_index) -> None:
        payload = reconstruct_claim(lock_event(), token_index)

        message = claim_typed_data(payload, chain_id=AMOY, bridge_address=AMOY_BRIDGE)

        assert message["primaryType"] == "Claim"
        assert message["domain"] == {
            "name": "Bridge",
            "version": "1",
            "chainId": AMOY,
            "verifyingContract": AMOY_BRIDGE,
        }
        assert message["message"]["sourceTxData"] == {
            "transactionHash": TX_HASH,
            "blockHash": BLOCK_HASH,
            "logIndex": 3,
        }
        assert message["message"]["deadline"] == MAX_UINT256


class TestClaimSubmitter:
    @pytest.fixture
    def destination(self):
        signer = FakeSigner(chain_id=AMOY)
        return make_handle(signer, AMOY_BRIDGE)

    @pytest.mark.asyncio
    async def test_signs_and_submits(self, destination, token_index) -> None:
        payload = reconstruct_claim(lock_event(), token_index)
        signer = destination.signer

        receipt = await ClaimSubmitter(domain_name="TestBridge").claim(destination, payload)

        assert receipt is signer.execute.return_value
        signer.execute.assert_awaited_once()
        assert signer.execute.await_args.args[1] == "claim"
        message = signer.sign_typed_data.call_args.args[0]
        assert message["domain"]["name"] == "TestBridge"
        claim_args, signature_args = destination.contract.functions.claim.call_args.args
        assert claim_args == payload.as_contract_args()
        assert signature_args == signer.signature.as_contract_args()

    @pytest.mark.asyncio
    async def test_uses_given_signature(self, destination, token_index) -> None:
        payload = reconstruct_claim(lock_event(), token_index)
        signature = Signature(v=27, r=b"\x09" * 32, s=b"\x08" * 32)

        await ClaimSubmitter().claim(destination, payload, signature=signature)

        destination.signer.sign_typed_data.assert_not_called()
        assert destination.contract.functions.claim.call_args.args[1] == (27, b"\x09" * 32, b"\x08" * 32)

    @pytest.mark.asyncio
    async def test_wrong_chain_rejected(self, bridge, signer, token_index) -> None:
        payload = reconstruct_claim(lock_event(), token_index)

        with pytest.raises(ValidationError, match="targets chain"):
            await ClaimSubmitter().claim(bridge, payload)

        signer.execute.assert_not_awaited()
