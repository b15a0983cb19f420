"""
Morpho Blue helper

Market actions keyed by market ID. Optional receiver / on-behalf-of
addresses are validated when given and omitted from the request otherwise.
"""

from typing import Optional

from ...infra.validation import validate_address, validate_amount
from ...types import ExecuteActionResponse
from ..base import ProtocolHelper


def _validate_optional(address: Optional[str], name: str) -> None:
    if address:
        validate_address(address, name)


class MorphoHelper(ProtocolHelper):
    """
    Morpho Blue operations

    Usage:
        morpho = MorphoHelper(client)
        result = await morpho.supply(market_id, "1000000")
    """

    name = "morpho"

    async def supply(
        self,
        market_id: str,
        assets: str,
        on_behalf_of: Optional[str] = None,
        execute: bool = False,
    ) -> ExecuteActionResponse:
        """
        Supply assets to a market

        Args:
            market_id: Morpho Blue market ID
            assets: Amount in base units
            on_behalf_of: Position owner (default: sender)
            execute: Sign and send the returned transaction
        """
        self._ensure_tx_helper(execute)
        validate_amount(assets, "Assets")
        _validate_optional(on_behalf_of, "OnBehalfOf")

        return await self._execute(
            "supply",
            {"marketId": market_id, "assets": assets, "onBehalfOf": on_behalf_of},
            execute,
        )

    async def withdraw(
        self,
        market_id: str,
        assets: str,
        receiver: Optional[str] = None,
        on_behalf_of: Optional[str] = None,
        execute: bool = False,
    ) -> ExecuteActionResponse:
        """Withdraw supplied assets from a market"""
        return await self._receiver_action("withdraw", market_id, assets, receiver, on_behalf_of, execute)

    async def borrow(
        self,
        market_id: str,
        assets: str,
        receiver: Optional[str] = None,
        on_behalf_of: Optional[str] = None,
        execute: bool = False,
    ) -> ExecuteActionResponse:
        """Borrow assets from a market"""
        return await self._receiver_action("borrow", market_id, assets, receiver, on_behalf_of, execute)

    async def repay(
        self,
        market_id: str,
        assets: str,
        on_behalf_of: Optional[str] = None,
        execute: bool = False,
    ) -> ExecuteActionResponse:
        """Repay borrowed assets"""
        self._ensure_tx_helper(execute)
        validate_amount(assets, "Assets")
        _validate_optional(on_behalf_of, "OnBehalfOf")

        return await self._execute(
            "repay",
            {"marketId": market_id, "assets": assets, "onBehalfOf": on_behalf_of},
            execute,
        )

    async def _receiver_action(
        self,
        action: str,
        market_id: str,
        assets: str,
        receiver: Optional[str],
        on_behalf_of: Optional[str],
        execute: bool,
    ) -> ExecuteActionResponse:
        self._ensure_tx_helper(execute)
        validate_amount(assets, "Assets")
        _validate_optional(receiver, "Receiver")
        _validate_optional(on_behalf_of, "OnBehalfOf")

        return await self._execute(
            action,
            {
                "marketId": market_id,
                "assets": assets,
                "receiver": receiver,
                "onBehalfOf": on_behalf_of,
            },
            execute,
        )
