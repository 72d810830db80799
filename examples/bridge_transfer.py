"""
Example: Bridge a token from Sepolia to Polygon Amoy

Runs both phases of a transfer with the same key:
1. Deposit on the source chain (permit or approve, chosen automatically)
2. Claim on the destination chain from the mined deposit event

Environment:
    OMNIBRIDGE_PRIVATE_KEY    signer key
    OMNIBRIDGE_REGISTRY_PATH  chains.json with both bridge deployments
"""

import asyncio

from omnibridge import OmniBridge, build_token_index

SOURCE_CHAIN = 11155111
DESTINATION_CHAIN = 80002


async def main():
    print("=== OmniBridge Transfer Example ===\n")

    bridge = OmniBridge()
    source_rpc = bridge.registry.rpc_url(SOURCE_CHAIN)
    destination_rpc = bridge.registry.rpc_url(DESTINATION_CHAIN)

    # Phase 1: deposit on the source chain
    await bridge.connect(rpc_url=source_rpc)
    if not bridge.token_list:
        print(f"⚠️  No tokens on chain {SOURCE_CHAIN}: {bridge.last_error or 'empty catalog'}")
        return

    token = bridge.token_list[0]
    source_tokens = list(bridge.token_list)
    print(f"✅ {token.symbol} balance: {token.balance}")

    result = await bridge.transfer(token, 10**15, DESTINATION_CHAIN)
    if not result.success:
        print(f"❌ Deposit failed: {result.error}")
        return
    print(f"✅ Deposit mined: {result.transaction_hash}")

    # Phase 2: claim on the destination chain
    await bridge.connect(rpc_url=destination_rpc)
    token_index = build_token_index(
        {SOURCE_CHAIN: source_tokens, DESTINATION_CHAIN: bridge.token_list}
    )

    claim = await bridge.receive(result.deposit, token_index)
    if claim.success:
        print(f"✅ Claimed {claim.claim.target_token_symbol}: {claim.transaction_hash}")
    else:
        # The deposit stays journaled; resume_pending_claims() retries it later
        print(f"⚠️  Claim failed: {claim.error}")

    await bridge.close()
    print("\n=== Example Complete ===")


if __name__ == "__main__":
    asyncio.run(main())
