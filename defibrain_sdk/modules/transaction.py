"""
Transaction Module

Signs and sends unsigned transactions through a wallet transport and
tracks them to confirmation.

Lifecycle per transaction: unsigned -> submitted -> confirmed | timed out.
"""

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional, Union

from ..config import config as global_config
from ..errors import (
    ConfirmationTimeout,
    TransactionError,
    WalletError,
)
from ..infra.transport import WalletProvider
from ..types import TransactionReceipt, UnsignedTransaction, parse_quantity, to_quantity
from ..types.common import drop_none

logger = logging.getLogger(__name__)

TransactionLike = Union[UnsignedTransaction, Mapping[str, Any]]


def _as_transaction(tx: TransactionLike) -> UnsignedTransaction:
    if isinstance(tx, UnsignedTransaction):
        return tx
    return UnsignedTransaction.from_dict(tx)


class TransactionHelper:
    """
    Transaction signing and confirmation tracking

    Usage:
        helper = TransactionHelper(provider, chain_id=11155111)
        receipt = await helper.sign_send_and_wait(result.transaction)
        print(receipt.block_number)
    """

    def __init__(
        self,
        provider: WalletProvider,
        chain_id: int = 1,
        poll_interval: Optional[float] = None,
        confirmation_timeout: Optional[float] = None,
    ):
        """
        Initialize transaction helper

        Args:
            provider: Wallet transport that signs eth_sendTransaction
            chain_id: Chain the transactions target
            poll_interval: Seconds between receipt polls (default from config)
            confirmation_timeout: Default confirmation bound in seconds (default from config)
        """
        self._provider = provider
        self._chain_id = chain_id
        self._poll_interval = (
            poll_interval if poll_interval is not None else global_config.tx.poll_interval
        )
        self._confirmation_timeout = (
            confirmation_timeout if confirmation_timeout is not None
            else global_config.tx.confirmation_timeout
        )

    @property
    def provider(self) -> WalletProvider:
        return self._provider

    @property
    def chain_id(self) -> int:
        return self._chain_id

    async def sign_and_send(self, tx: TransactionLike) -> str:
        """
        Sign and broadcast a transaction through the wallet

        Args:
            tx: Unsigned transaction (dataclass or backend-shaped dict)

        Returns:
            Transaction hash

        Raises:
            WalletError: If the wallet exposes no account
            TransactionError: If signing or sending fails
        """
        tx = _as_transaction(tx)

        try:
            accounts = await self._provider.request("eth_accounts")
        except Exception as e:
            raise TransactionError.failed(e) from e
        if not accounts:
            raise WalletError.not_connected()

        transaction = drop_none({
            "from": accounts[0],
            "to": tx.to,
            "data": tx.data,
            "value": to_quantity(tx.value) if tx.value else "0x0",
            "gas": to_quantity(tx.gas_limit) if tx.gas_limit else None,
            "gasPrice": to_quantity(tx.gas_price) if tx.gas_price else None,
            "maxFeePerGas": to_quantity(tx.max_fee_per_gas) if tx.max_fee_per_gas else None,
            "maxPriorityFeePerGas": (
                to_quantity(tx.max_priority_fee_per_gas) if tx.max_priority_fee_per_gas else None
            ),
            "nonce": to_quantity(tx.nonce) if tx.nonce is not None else None,
        })

        try:
            tx_hash = await self._provider.request("eth_sendTransaction", [transaction])
        except Exception as e:
            logger.error(f"Transaction to {tx.to} failed: {e}")
            raise TransactionError.failed(e) from e

        logger.info(f"Transaction sent: {tx_hash}")
        return tx_hash

    async def wait_for_confirmation(
        self,
        tx_hash: str,
        confirmations: int = 1,
        timeout: Optional[float] = None,
    ) -> TransactionReceipt:
        """
        Wait until a transaction has the requested number of confirmations

        Lookup errors while polling (transport failures, malformed receipts)
        are logged and polling continues.

        Args:
            tx_hash: Transaction hash
            confirmations: Blocks required on top of the receipt block
            timeout: Bound in seconds (default from helper configuration)

        Returns:
            TransactionReceipt

        Raises:
            ConfirmationTimeout: If the bound elapses first
        """
        timeout = timeout if timeout is not None else self._confirmation_timeout
        loop = asyncio.get_running_loop()
        start = loop.time()

        while loop.time() - start < timeout:
            try:
                receipt = await self._provider.request("eth_getTransactionReceipt", [tx_hash])
                if receipt and receipt.get("blockNumber"):
                    current_block = parse_quantity(await self._provider.request("eth_blockNumber"))
                    receipt_block = parse_quantity(receipt["blockNumber"])
                    if current_block - receipt_block >= confirmations:
                        result = TransactionReceipt.from_rpc(receipt)
                        logger.info(f"Transaction confirmed: {result}")
                        return result
            except Exception as e:
                logger.debug(f"Receipt lookup for {tx_hash} failed, still waiting: {e}")

            await asyncio.sleep(self._poll_interval)

        raise ConfirmationTimeout(tx_hash, timeout)

    async def sign_send_and_wait(
        self,
        tx: TransactionLike,
        confirmations: int = 1,
        timeout: Optional[float] = None,
    ) -> TransactionReceipt:
        """Sign, send, then wait for confirmation"""
        tx_hash = await self.sign_and_send(tx)
        return await self.wait_for_confirmation(tx_hash, confirmations, timeout)

    async def estimate_gas(self, tx: TransactionLike) -> str:
        """
        Estimate gas for a transaction

        Returns:
            Gas estimate as reported by the node (hex quantity)

        Raises:
            TransactionError: If estimation fails
        """
        tx = _as_transaction(tx)
        params: Dict[str, Any] = {
            "to": tx.to,
            "data": tx.data,
            "value": to_quantity(tx.value) if tx.value else "0x0",
        }
        try:
            return await self._provider.request("eth_estimateGas", [params])
        except Exception as e:
            raise TransactionError.gas_estimation_failed(e) from e

    async def get_gas_price(self) -> str:
        """Current gas price (hex quantity)"""
        try:
            return await self._provider.request("eth_gasPrice")
        except Exception as e:
            raise TransactionError.gas_price_failed(e) from e
