"""
Portfolio helper

Wallet-side views built on top of the wallet helper. There is no
portfolio endpoint on the backend yet, so this only reads balances.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, TYPE_CHECKING

from ..errors import WalletError
from ..infra.validation import validate_address

if TYPE_CHECKING:
    from ..client import DefiBrainClient
    from ..modules.wallet import WalletHelper

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenBalance:
    """Token balance in base units"""
    token: str
    balance: int


class PortfolioHelper:
    """
    Balance reads for the connected account

    Usage:
        portfolio = PortfolioHelper(client, wallet)
        for item in await portfolio.get_token_balances([USDC, WETH]):
            print(item.token, item.balance)
    """

    def __init__(self, client: Optional["DefiBrainClient"], wallet: "WalletHelper"):
        self._client = client
        self._wallet = wallet

    @property
    def wallet(self) -> "WalletHelper":
        return self._wallet

    async def get_token_balances(self, tokens: Iterable[str]) -> List[TokenBalance]:
        """
        Balances of several tokens for the connected account (read sequentially)

        Raises:
            WalletError: If no account is connected
            ValidationError: If a token address is malformed
        """
        info = await self._wallet.get_wallet_info()
        if info is None:
            raise WalletError.not_connected()

        balances = []
        for token in tokens:
            validate_address(token, "Token")
            balance = await self._wallet.get_token_balance(token, info.address)
            balances.append(TokenBalance(token=token, balance=balance))

        logger.debug(f"Read {len(balances)} token balances for {info.address}")
        return balances
