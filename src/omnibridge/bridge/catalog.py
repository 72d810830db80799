"""
Token catalog: the bridgeable tokens on the active chain with live balances.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from omnibridge.chain.multicall import MulticallReader
from omnibridge.core.abi import BRIDGE_ABI, PERMIT_ERC20_ABI
from omnibridge.core.exceptions import ConnectivityError
from omnibridge.core.logging import get_logger
from omnibridge.core.types import Token

if TYPE_CHECKING:
    from web3 import AsyncWeb3

    from omnibridge.chain.session import BridgeHandle
    from omnibridge.core.registry import ChainRegistry
    from omnibridge.wallet.signer import WalletSigner

logger = get_logger("bridge.catalog")


class TokenCatalog:
    """
    Builds the token list: registry originals first, then wrapped tokens in
    on-chain registration order, each with name, symbol and the signer's
    balance.

    The list is rebuilt wholesale on every refresh.
    """

    def __init__(
        self,
        registry: ChainRegistry,
        reader_factory: Callable[[AsyncWeb3], MulticallReader] = MulticallReader,
    ) -> None:
        self._registry = registry
        self._reader_factory = reader_factory

    async def refresh(
        self,
        chain_id: int,
        signer: WalletSigner,
        bridge: BridgeHandle,
    ) -> list[Token]:
        """
        Read the current token list for `signer` on `chain_id`.

        Raises:
            ConnectivityError: If any RPC read or batch fails
        """
        reader = self._reader_factory(signer.w3)
        original_addresses = self._registry.original_tokens(chain_id)

        try:
            wrapped_count = int(await bridge.contract.functions.getNumberOfWrappedTokens().call())
        except Exception as e:
            raise ConnectivityError(
                f"Could not read wrapped token count on chain {chain_id}: {e}",
                stage="wrapped_count",
            ) from e

        wrapped = await reader.fetch_array(
            bridge.address, BRIDGE_ABI, "wrappedTokensAddresses", wrapped_count
        )
        wrapped_addresses = [address for address in wrapped if address]
        if len(wrapped_addresses) != wrapped_count:
            logger.warning(
                f"Skipped {wrapped_count - len(wrapped_addresses)} unreadable wrapped token slot(s)"
            )

        addresses = [*original_addresses, *wrapped_addresses]
        if not addresses:
            logger.debug(f"No bridgeable tokens on chain {chain_id}")
            return []

        names = await reader.call_many(addresses, PERMIT_ERC20_ABI, "name")
        symbols = await reader.call_many(addresses, PERMIT_ERC20_ABI, "symbol")
        balances = await reader.call_many(
            addresses, PERMIT_ERC20_ABI, "balanceOf", [signer.address]
        )

        tokens: list[Token] = []
        for address, name, symbol, balance in zip(addresses, names, symbols, balances):
            if name is None or symbol is None or balance is None:
                logger.warning(f"Skipping token {address}: ERC-20 metadata unreadable")
                continue
            tokens.append(Token(name=name, symbol=symbol, address=address, balance=int(balance)))

        logger.info(f"Loaded {len(tokens)} token(s) on chain {chain_id}")
        return tokens


def build_token_index(catalogs: dict[int, list[Token]]) -> dict[int, dict[str, Token]]:
    """
    Index token lists by chain id, then by lower-cased address.

    This is the metadata index consumed by claim reconstruction.
    """
    return {
        chain_id: {token.address.lower(): token for token in tokens}
        for chain_id, tokens in catalogs.items()
    }
