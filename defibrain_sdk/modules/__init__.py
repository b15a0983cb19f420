"""
Wallet-side modules for DefiBrain SDK

Provides:
- TransactionHelper: Sign, send and confirm transactions
- WalletHelper: Connection, balances, network switching, event subscriptions
"""

from .transaction import TransactionHelper
from .wallet import WalletHelper, WalletInfo, Subscription

__all__ = [
    "TransactionHelper",
    "WalletHelper",
    "WalletInfo",
    "Subscription",
]
