"""
Protocol helpers

Each helper validates its arguments, delegates to the DefiBrain client
with its protocol name fixed and optionally signs and sends the result.
"""

from .base import ProtocolHelper, SwapHelper
from .registry import ProtocolRegistry, get_helper
from .aave import AaveHelper
from .pendle import PendleHelper, PendlePTInfo, PendleYTInfo
from .morpho import MorphoHelper
from .curve import CurveHelper
from .uniswap import UniswapHelper
from .oneinch import OneInchHelper
from .portfolio import PortfolioHelper, TokenBalance

__all__ = [
    "ProtocolHelper",
    "SwapHelper",
    "ProtocolRegistry",
    "get_helper",
    "AaveHelper",
    "PendleHelper",
    "PendlePTInfo",
    "PendleYTInfo",
    "MorphoHelper",
    "CurveHelper",
    "UniswapHelper",
    "OneInchHelper",
    "PortfolioHelper",
    "TokenBalance",
]
