"""Read-only client for the bridge history service."""

from omnibridge.history.client import HistoryClient

__all__ = ["HistoryClient"]
