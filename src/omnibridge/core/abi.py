"""
Contract ABIs (as Python dicts) for the bridge, permit-capable ERC-20
tokens, and Multicall3.

Minimal: only the functions and events the client calls or decodes.
"""

from __future__ import annotations

from typing import Any

# ───────────────────────────────────────────────────────────────────
# Shared struct components
# ───────────────────────────────────────────────────────────────────

_PARTY = [
    {"name": "_address", "type": "address"},
    {"name": "chainId", "type": "uint256"},
]

_SIGNATURE = [
    {"name": "v", "type": "uint8"},
    {"name": "r", "type": "bytes32"},
    {"name": "s", "type": "bytes32"},
]

_DEPOSIT_DATA = [
    {"name": "from", "type": "tuple", "components": _PARTY},
    {"name": "to", "type": "tuple", "components": _PARTY},
    {"name": "spender", "type": "address"},
    {"name": "token", "type": "address"},
    {"name": "value", "type": "uint256"},
    {"name": "deadline", "type": "uint256"},
    {"name": "approveTokenTransferSig", "type": "tuple", "components": _SIGNATURE},
]

_CLAIM_DATA = [
    {"name": "from", "type": "tuple", "components": _PARTY},
    {"name": "to", "type": "tuple", "components": _PARTY},
    {"name": "value", "type": "uint256"},
    {
        "name": "token",
        "type": "tuple",
        "components": [
            {"name": "tokenAddress", "type": "address"},
            {"name": "originChainId", "type": "uint256"},
        ],
    },
    {"name": "depositTxSourceToken", "type": "address"},
    {"name": "targetTokenAddress", "type": "address"},
    {"name": "targetTokenName", "type": "string"},
    {"name": "targetTokenSymbol", "type": "string"},
    {"name": "deadline", "type": "uint256"},
    {
        "name": "sourceTxData",
        "type": "tuple",
        "components": [
            {"name": "transactionHash", "type": "bytes32"},
            {"name": "blockHash", "type": "bytes32"},
            {"name": "logIndex", "type": "uint256"},
        ],
    },
]


# ───────────────────────────────────────────────────────────────────
# Bridge
# ───────────────────────────────────────────────────────────────────

BRIDGE_ABI = [
    # read: getNumberOfWrappedTokens() → uint256
    {
        "name": "getNumberOfWrappedTokens",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    # read: wrappedTokensAddresses(uint256) → address
    {
        "name": "wrappedTokensAddresses",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "", "type": "uint256"}],
        "outputs": [{"name": "", "type": "address"}],
    },
    # write: deposit(DepositData)
    {
        "name": "deposit",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_depositData", "type": "tuple", "components": _DEPOSIT_DATA}],
        "outputs": [],
    },
    # write: depositWithPermit(DepositData)
    {
        "name": "depositWithPermit",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_depositData", "type": "tuple", "components": _DEPOSIT_DATA}],
        "outputs": [],
    },
    # write: claim(ClaimData, Signature)
    {
        "name": "claim",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "_claimData", "type": "tuple", "components": _CLAIM_DATA},
            {"name": "claimSig", "type": "tuple", "components": _SIGNATURE},
        ],
        "outputs": [],
    },
    # event: an original token was locked on its home chain
    {
        "name": "LockOriginalToken",
        "type": "event",
        "anonymous": False,
        "inputs": [
            {"name": "lockedTokenAddress", "type": "address", "indexed": False},
            {"name": "value", "type": "uint256", "indexed": False},
            {"name": "sender", "type": "address", "indexed": False},
            {"name": "recepient", "type": "address", "indexed": False},
            {"name": "sourceChainId", "type": "uint256", "indexed": False},
            {"name": "toChainId", "type": "uint256", "indexed": False},
        ],
    },
    # event: a wrapped token was burned to move value onward
    {
        "name": "BurnWrappedToken",
        "type": "event",
        "anonymous": False,
        "inputs": [
            {"name": "burnedWrappedTokenAddress", "type": "address", "indexed": False},
            {"name": "value", "type": "uint256", "indexed": False},
            {"name": "sender", "type": "address", "indexed": False},
            {"name": "recepient", "type": "address", "indexed": False},
            {"name": "sourceChainId", "type": "uint256", "indexed": False},
            {"name": "toChainId", "type": "uint256", "indexed": False},
            {"name": "originalTokenAddress", "type": "address", "indexed": False},
            {"name": "originalTokenChainId", "type": "uint256", "indexed": False},
        ],
    },
]

DEPOSIT_EVENT_NAMES = ("LockOriginalToken", "BurnWrappedToken")


# ───────────────────────────────────────────────────────────────────
# ERC-20 with EIP-2612 permit
# ───────────────────────────────────────────────────────────────────

PERMIT_ERC20_ABI = [
    {
        "name": "name",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "name": "symbol",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "name": "decimals",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "approve",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    # ─── EIP-2612 ───
    {
        "name": "permit",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
            {"name": "value", "type": "uint256"},
            {"name": "deadline", "type": "uint256"},
            {"name": "v", "type": "uint8"},
            {"name": "r", "type": "bytes32"},
            {"name": "s", "type": "bytes32"},
        ],
        "outputs": [],
    },
    {
        "name": "nonces",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "DOMAIN_SEPARATOR",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "bytes32"}],
    },
    # Optional; OpenZeppelin's ERC20Permit exposes it through EIP-5267 instead
    {
        "name": "version",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
]


# ───────────────────────────────────────────────────────────────────
# Multicall3
# ───────────────────────────────────────────────────────────────────

MULTICALL3_ABI = [
    {
        "name": "aggregate3",
        "type": "function",
        "stateMutability": "payable",
        "inputs": [
            {
                "name": "calls",
                "type": "tuple[]",
                "components": [
                    {"name": "target", "type": "address"},
                    {"name": "allowFailure", "type": "bool"},
                    {"name": "callData", "type": "bytes"},
                ],
            }
        ],
        "outputs": [
            {
                "name": "returnData",
                "type": "tuple[]",
                "components": [
                    {"name": "success", "type": "bool"},
                    {"name": "returnData", "type": "bytes"},
                ],
            }
        ],
    },
]


def get_function_abi(abi: list[dict[str, Any]], name: str) -> dict[str, Any]:
    """Find a function entry by name."""
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == name:
            return entry
    raise KeyError(f"Function {name} not found in ABI")


def get_output_types(abi: list[dict[str, Any]], name: str) -> list[str]:
    """Canonical output types of a function, for eth_abi decoding."""
    return [output["type"] for output in get_function_abi(abi, name)["outputs"]]
