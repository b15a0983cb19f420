"""
Pendle helper

PT/YT operations: yield optimization restricted to Pendle, token info,
PT <-> YT swaps, PT redemption and YT yield estimates.
"""

from typing import Union

from ...errors import ProtocolMismatch
from ...infra.validation import validate_address, validate_amount
from ...types import ExecuteActionResponse, OptimizeYieldRequest, OptimizeYieldResponse, Strategy
from ..base import ProtocolHelper
from .types import PendlePTInfo, PendleYTInfo


class PendleHelper(ProtocolHelper):
    """
    Pendle PT/YT operations

    Usage:
        pendle = PendleHelper(client, tx_helper)
        best = await pendle.optimize_yield_with_pendle(USDC, "1000000000")
        info = await pendle.get_pt_info(pt_address)
        if info.is_matured:
            await pendle.redeem_pt(pt_address, "1000000000", execute=True)
    """

    name = "pendle"

    async def optimize_yield_with_pendle(
        self,
        asset: str,
        amount: str,
        strategy: Union[Strategy, str] = Strategy.MAX_YIELD,
    ) -> OptimizeYieldResponse:
        """
        Yield optimization that only accepts a Pendle result

        Raises:
            ProtocolMismatch: If the optimizer picked another protocol
        """
        validate_address(asset, "Asset")
        validate_amount(amount, "Amount")

        result = await self._client.optimize_yield(
            OptimizeYieldRequest(asset=asset, amount=amount, strategy=strategy)
        )
        if result.protocol != self.name:
            raise ProtocolMismatch.best_protocol(self.name, result.protocol)
        return result

    async def get_pt_info(self, pt_address: str) -> PendlePTInfo:
        """Principal Token info"""
        validate_address(pt_address, "PT Address")
        result = await self._execute("getPTInfo", {"ptAddress": pt_address})
        return PendlePTInfo.from_response(result)

    async def get_yt_info(self, yt_address: str) -> PendleYTInfo:
        """Yield Token info"""
        validate_address(yt_address, "YT Address")
        result = await self._execute("getYTInfo", {"ytAddress": yt_address})
        return PendleYTInfo.from_response(result)

    async def swap_pt_to_yt(self, pt_address: str, amount: str, execute: bool = False) -> ExecuteActionResponse:
        """Swap Principal Token to Yield Token"""
        validate_address(pt_address, "PT Address")
        validate_amount(amount, "Amount")
        return await self._execute("swapPTtoYT", {"ptAddress": pt_address, "amount": amount}, execute)

    async def swap_yt_to_pt(self, yt_address: str, amount: str, execute: bool = False) -> ExecuteActionResponse:
        """Swap Yield Token to Principal Token"""
        validate_address(yt_address, "YT Address")
        validate_amount(amount, "Amount")
        return await self._execute("swapYTtoPT", {"ytAddress": yt_address, "amount": amount}, execute)

    async def redeem_pt(self, pt_address: str, amount: str, execute: bool = False) -> ExecuteActionResponse:
        """Redeem Principal Token at maturity"""
        validate_address(pt_address, "PT Address")
        validate_amount(amount, "Amount")
        return await self._execute("redeemPT", {"ptAddress": pt_address, "amount": amount}, execute)

    async def estimate_yield(self, yt_address: str) -> ExecuteActionResponse:
        """Estimated yield for a Yield Token (figures arrive in `extra`)"""
        validate_address(yt_address, "YT Address")
        return await self._execute("estimateYield", {"ytAddress": yt_address})
