"""
1inch protocol helper
"""

from .helper import OneInchHelper

__all__ = ["OneInchHelper"]
