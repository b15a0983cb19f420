"""
Aave V3 helper

Supply, withdraw, borrow and repay through the DefiBrain backend.
"""

from ...infra.validation import validate_address, validate_amount
from ...types import ExecuteActionResponse
from ..base import ProtocolHelper


class AaveHelper(ProtocolHelper):
    """
    Aave V3 operations

    Usage:
        aave = AaveHelper(client, tx_helper)
        result = await aave.supply(USDC, "1000000", execute=True)
        print(result.tx_hash)
    """

    name = "aave"

    async def _asset_action(
        self,
        action: str,
        asset: str,
        amount: str,
        execute: bool,
    ) -> ExecuteActionResponse:
        validate_address(asset, "Asset")
        validate_amount(amount, "Amount")
        return await self._execute(action, {"asset": asset, "amount": amount}, execute)

    async def supply(self, asset: str, amount: str, execute: bool = False) -> ExecuteActionResponse:
        """Supply assets to Aave"""
        return await self._asset_action("supply", asset, amount, execute)

    async def withdraw(self, asset: str, amount: str, execute: bool = False) -> ExecuteActionResponse:
        """Withdraw supplied assets"""
        return await self._asset_action("withdraw", asset, amount, execute)

    async def borrow(self, asset: str, amount: str, execute: bool = False) -> ExecuteActionResponse:
        """Borrow against supplied collateral"""
        return await self._asset_action("borrow", asset, amount, execute)

    async def repay(self, asset: str, amount: str, execute: bool = False) -> ExecuteActionResponse:
        """Repay borrowed assets"""
        return await self._asset_action("repay", asset, amount, execute)
