"""
Base protocol helper

Every protocol helper follows the same flow:
1. Validate address/amount arguments (before any request)
2. Delegate to the client with the protocol name fixed
3. If execute is set, sign and send the returned transaction and merge
   the hash into the result

Swap helpers additionally check that the backend picked their protocol.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Optional, TypeVar, TYPE_CHECKING

from ..errors import ConfigurationError, ProtocolMismatch
from ..infra.validation import validate_address, validate_amount
from ..types import (
    ExecuteActionRequest,
    ExecuteActionResponse,
    FindSwapRequest,
    FindSwapResponse,
    UnsignedTransaction,
)
from ..types.common import drop_none

if TYPE_CHECKING:
    from ..client import DefiBrainClient
    from ..modules.transaction import TransactionHelper

logger = logging.getLogger(__name__)

R = TypeVar("R")


class ProtocolHelper:
    """
    Base class for protocol helpers

    Subclasses set `name` to the backend protocol identifier.
    """

    # Protocol identifier as understood by the backend (e.g. "aave")
    name: str = "base"

    def __init__(
        self,
        client: "DefiBrainClient",
        tx_helper: Optional["TransactionHelper"] = None,
    ):
        """
        Initialize helper

        Args:
            client: DefiBrain API client
            tx_helper: Transaction helper, required for execute=True
        """
        self._client = client
        self._tx_helper = tx_helper

    @property
    def client(self) -> "DefiBrainClient":
        return self._client

    @property
    def tx_helper(self) -> Optional["TransactionHelper"]:
        return self._tx_helper

    def set_transaction_helper(self, tx_helper: "TransactionHelper") -> None:
        """Set transaction helper for executing transactions"""
        self._tx_helper = tx_helper

    def _ensure_tx_helper(self, execute: bool) -> None:
        if execute and self._tx_helper is None:
            raise ConfigurationError.transaction_helper_missing()

    async def _send(self, tx: UnsignedTransaction) -> str:
        # Only the call itself is forwarded; gas and nonce are left to the wallet
        return await self._tx_helper.sign_and_send(tx.call_only())

    async def _send_result(self, result: R, execute: bool) -> R:
        """Sign and send result.transaction when requested, merging tx_hash"""
        if execute and result.transaction is not None and self._tx_helper is not None:
            tx_hash = await self._send(result.transaction)
            logger.info(f"[{self.name}] transaction sent: {tx_hash}")
            return replace(result, tx_hash=tx_hash)
        return result

    async def _execute(
        self,
        action: str,
        params: Dict[str, Any],
        execute: bool = False,
    ) -> ExecuteActionResponse:
        """
        Run a protocol action through the backend

        Args:
            action: Action name (e.g. "supply")
            params: Action parameters (None values dropped)
            execute: Sign and send the returned transaction

        Returns:
            ExecuteActionResponse, with tx_hash set when executed
        """
        self._ensure_tx_helper(execute)

        result = await self._client.execute_action(
            ExecuteActionRequest(protocol=self.name, action=action, params=drop_none(params))
        )
        return await self._send_result(result, execute)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(protocol={self.name!r})"


class SwapHelper(ProtocolHelper):
    """
    Base class for helpers that swap through one specific protocol

    The backend is asked to prefer `name`; a route on any other protocol
    raises ProtocolMismatch instead of being executed.
    """

    async def _find_route(
        self,
        token_in: str,
        token_out: str,
        amount: str,
        slippage: float = 0.5,
    ) -> FindSwapResponse:
        validate_address(token_in, "TokenIn")
        validate_address(token_out, "TokenOut")
        validate_amount(amount, "Amount")

        result = await self._client.find_optimal_swap(
            FindSwapRequest(
                token_in=token_in,
                token_out=token_out,
                amount=amount,
                slippage=slippage,
                prefer_protocol=self.name,
            )
        )

        if result.protocol != self.name:
            raise ProtocolMismatch.route(self.name, result.protocol)
        return result

    async def _swap(
        self,
        token_in: str,
        token_out: str,
        amount: str,
        slippage: float = 0.5,
        execute: bool = False,
        existing_route: Optional[FindSwapResponse] = None,
    ) -> FindSwapResponse:
        self._ensure_tx_helper(execute)

        if existing_route is not None:
            if existing_route.protocol != self.name:
                raise ProtocolMismatch.route(self.name, existing_route.protocol)
            route = existing_route
        else:
            route = await self._find_route(token_in, token_out, amount, slippage)
        return await self._send_result(route, execute)

    async def find_optimal_swap(
        self,
        token_in: str,
        token_out: str,
        amount: str,
        slippage: float = 0.5,
    ) -> FindSwapResponse:
        """
        Find the optimal route through this protocol

        Args:
            token_in: Input token address
            token_out: Output token address
            amount: Input amount in base units
            slippage: Slippage tolerance in percent

        Raises:
            ValidationError: If an argument is malformed
            ProtocolMismatch: If the backend selected another protocol
        """
        return await self._find_route(token_in, token_out, amount, slippage)

    async def swap(
        self,
        token_in: str,
        token_out: str,
        amount: str,
        slippage: float = 0.5,
        execute: bool = False,
        existing_route: Optional[FindSwapResponse] = None,
    ) -> FindSwapResponse:
        """
        Swap through this protocol

        Args:
            token_in: Input token address
            token_out: Output token address
            amount: Input amount in base units
            slippage: Slippage tolerance in percent
            execute: Sign and send the swap transaction
            existing_route: Route from find_optimal_swap() to reuse

        Returns:
            FindSwapResponse, with tx_hash set when executed
        """
        return await self._swap(token_in, token_out, amount, slippage, execute, existing_route)
