"""
Curve helper

Stablecoin swaps where Curve is the selected route.
"""

from typing import Optional

from ...types import FindSwapResponse
from ..base import SwapHelper


class CurveHelper(SwapHelper):
    """
    Curve stable swaps

    Usage:
        curve = CurveHelper(client, tx_helper)
        result = await curve.swap_stable(USDC, USDT, "1000000000", execute=True)
    """

    name = "curve"

    async def find_optimal_stable_swap(
        self,
        token_in: str,
        token_out: str,
        amount: str,
        slippage: float = 0.5,
    ) -> FindSwapResponse:
        """Find the optimal Curve route between two stablecoins"""
        return await self._find_route(token_in, token_out, amount, slippage)

    async def swap_stable(
        self,
        token_in: str,
        token_out: str,
        amount: str,
        slippage: float = 0.5,
        execute: bool = False,
        existing_route: Optional[FindSwapResponse] = None,
    ) -> FindSwapResponse:
        """Swap stablecoins on Curve (reuses existing_route when given)"""
        return await self._swap(token_in, token_out, amount, slippage, execute, existing_route)
