"""On-chain access: batched reads and the bridge session."""

from omnibridge.chain.multicall import MulticallReader
from omnibridge.chain.session import BridgeHandle, BridgeSession, SessionState

__all__ = ["BridgeHandle", "BridgeSession", "MulticallReader", "SessionState"]
