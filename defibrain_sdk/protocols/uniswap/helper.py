"""
Uniswap v3 helper

Swaps routed through the backend resolver with Uniswap as the preferred
protocol.
"""

from ..base import SwapHelper


class UniswapHelper(SwapHelper):
    """
    Uniswap swaps

    Usage:
        uniswap = UniswapHelper(client, tx_helper)
        route = await uniswap.find_optimal_swap(WETH, USDC, amount)
        result = await uniswap.swap(WETH, USDC, amount, execute=True, existing_route=route)
    """

    name = "uniswap"
