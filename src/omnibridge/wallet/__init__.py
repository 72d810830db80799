"""Wallet signer capability."""

from omnibridge.wallet.signer import WalletSigner

__all__ = ["WalletSigner"]
