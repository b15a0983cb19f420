"""
Aave V3 protocol helper
"""

from .helper import AaveHelper

__all__ = ["AaveHelper"]
