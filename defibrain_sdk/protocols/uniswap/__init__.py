"""
Uniswap v3 protocol helper
"""

from .helper import UniswapHelper

__all__ = ["UniswapHelper"]
