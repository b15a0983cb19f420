"""
1inch aggregator helper
"""

from ..base import SwapHelper


class OneInchHelper(SwapHelper):
    """
    Swaps where 1inch is the selected route

    The backend only considers 1inch when it has a 1inch API key for the
    request; without one expect ProtocolMismatch.
    """

    name = "1inch"
