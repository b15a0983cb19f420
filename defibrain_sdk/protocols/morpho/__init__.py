"""
Morpho Blue protocol helper
"""

from .helper import MorphoHelper

__all__ = ["MorphoHelper"]
