"""
Pendle protocol helper
"""

from .helper import PendleHelper
from .types import PendlePTInfo, PendleYTInfo

__all__ = ["PendleHelper", "PendlePTInfo", "PendleYTInfo"]
