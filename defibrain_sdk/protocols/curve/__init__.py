"""
Curve protocol helper
"""

from .helper import CurveHelper

__all__ = ["CurveHelper"]
