"""Shared fixtures: a fake signer, bridge handles and a token index."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from omnibridge.chain.session import BridgeHandle
from omnibridge.core.registry import ChainConfig, ChainRegistry
from omnibridge.core.types import Signature, Token
from omnibridge.storage.memory import InMemoryStorage

SEPOLIA = 11155111
AMOY = 80002
BSC_TESTNET = 97

SIGNER_ADDRESS = "0x1111111111111111111111111111111111111111"
RECIPIENT_ADDRESS = "0x2222222222222222222222222222222222222222"
SEPOLIA_BRIDGE = "0x5050000000000000000000000000000000000001"
AMOY_BRIDGE = "0x5050000000000000000000000000000000000002"
ORIGINAL_TOKEN = "0x4040000000000000000000000000000000000001"
WRAPPED_TOKEN = "0x6060000000000000000000000000000000000001"

TX_HASH = "0x" + "ab" * 32
BLOCK_HASH = "0x" + "cd" * 32


def set_call(contract: MagicMock, method: str, result=None, side_effect=None) -> MagicMock:
    """Make `contract.functions.<method>(...).call()` resolve to `result`."""
    fn = getattr(contract.functions, method)
    fn.return_value.call = AsyncMock(return_value=result, side_effect=side_effect)
    return fn


class FakeSigner:
    """Stands in for WalletSigner without a node."""

    def __init__(self, chain_id: int = SEPOLIA, address: str = SIGNER_ADDRESS) -> None:
        self.address = address
        self.chain_id = chain_id
        self.w3 = MagicMock()
        self.contracts: dict[str, MagicMock] = {}
        self.signature = Signature(v=27, r=b"\x01" * 32, s=b"\x02" * 32)
        self.sign_typed_data = MagicMock(return_value=self.signature)
        self.execute = AsyncMock(return_value=make_receipt())

    def contract(self, address: str, abi) -> MagicMock:
        return self.contracts.setdefault(address.lower(), MagicMock(name=f"contract:{address}"))


def make_receipt(tx_hash: str = TX_HASH, status: int = 1) -> dict:
    return {
        "transactionHash": bytes.fromhex(tx_hash[2:]),
        "blockHash": bytes.fromhex(BLOCK_HASH[2:]),
        "blockNumber": 100,
        "status": status,
        "logs": [],
    }


def make_handle(signer: FakeSigner, address: str = SEPOLIA_BRIDGE) -> BridgeHandle:
    return BridgeHandle(
        address=address,
        chain_id=signer.chain_id,
        signer=signer,  # type: ignore[arg-type]
        contract=MagicMock(name="bridge"),
    )


@pytest.fixture
def registry() -> ChainRegistry:
    return ChainRegistry(
        [
            ChainConfig(
                chain_id=SEPOLIA,
                bridge_address=SEPOLIA_BRIDGE,
                original_tokens=(ORIGINAL_TOKEN,),
            ),
            ChainConfig(chain_id=AMOY, bridge_address=AMOY_BRIDGE),
            ChainConfig(chain_id=BSC_TESTNET),
        ]
    )


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def bridge(signer) -> BridgeHandle:
    return make_handle(signer)


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def token_index() -> dict:
    """Test Token native to Sepolia, wrapped on Amoy."""
    return {
        SEPOLIA: {
            ORIGINAL_TOKEN.lower(): Token("Test Token", "TT", ORIGINAL_TOKEN, 10**18),
        },
        AMOY: {
            WRAPPED_TOKEN.lower(): Token("Wrapped Test Token", "WTT", WRAPPED_TOKEN, 5 * 10**17),
        },
    }
