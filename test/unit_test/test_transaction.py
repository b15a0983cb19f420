"""
Unit tests for TransactionHelper

The wallet transport is an in-memory fake answering JSON-RPC methods.
"""

import sys
import unittest
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from defibrain_sdk.errors import (
    ConfirmationTimeout,
    ProviderError,
    TransactionError,
    WalletError,
)
from defibrain_sdk.modules.transaction import TransactionHelper
from defibrain_sdk.types import UnsignedTransaction

ACCOUNT = "0x1111111111111111111111111111111111111111"
ROUTER = "0xFa907c9ca64B72420f04AFFa4e70619991C6c6e2"
TX_HASH = "0x" + "ab" * 32


class FakeProvider:
    """Answers JSON-RPC methods from a table; callables and exceptions allowed"""

    def __init__(self, **answers):
        self.answers = {"eth_accounts": [ACCOUNT], "eth_sendTransaction": TX_HASH}
        self.answers.update(answers)
        self.calls = []

    async def request(self, method, params=None):
        self.calls.append((method, params))
        answer = self.answers.get(method)
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(params)
        return answer

    def sent(self):
        return [params[0] for method, params in self.calls if method == "eth_sendTransaction"]


def receipt(block_number="0x10", status="0x1"):
    return {
        "transactionHash": TX_HASH,
        "blockNumber": block_number,
        "blockHash": "0x" + "cd" * 32,
        "gasUsed": "0x5208",
        "status": status,
        "logs": [],
    }


class TestSignAndSend(unittest.IsolatedAsyncioTestCase):

    async def test_sends_from_first_account(self):
        provider = FakeProvider(eth_accounts=[ACCOUNT, "0x2222222222222222222222222222222222222222"])
        helper = TransactionHelper(provider, chain_id=11155111)

        tx_hash = await helper.sign_and_send(UnsignedTransaction(to=ROUTER, data="0x1234", value="1000"))

        self.assertEqual(tx_hash, TX_HASH)
        sent = provider.sent()[0]
        self.assertEqual(sent["from"], ACCOUNT)
        self.assertEqual(sent["to"], ROUTER)
        self.assertEqual(sent["data"], "0x1234")
        self.assertEqual(sent["value"], "0x3e8")
        self.assertNotIn("gas", sent)
        self.assertNotIn("nonce", sent)

    async def test_missing_value_defaults_to_zero(self):
        provider = FakeProvider()
        helper = TransactionHelper(provider)

        await helper.sign_and_send({"to": ROUTER, "data": "0x"})

        self.assertEqual(provider.sent()[0]["value"], "0x0")

    async def test_optional_fields_forwarded(self):
        provider = FakeProvider()
        helper = TransactionHelper(provider)

        await helper.sign_and_send(UnsignedTransaction(
            to=ROUTER,
            data="0x",
            gas_limit="21000",
            max_fee_per_gas="0x3b9aca00",
            max_priority_fee_per_gas="1000000000",
            nonce=0,
        ))

        sent = provider.sent()[0]
        self.assertEqual(sent["gas"], "0x5208")
        self.assertEqual(sent["maxFeePerGas"], "0x3b9aca00")
        self.assertEqual(sent["maxPriorityFeePerGas"], "0x3b9aca00")
        self.assertEqual(sent["nonce"], "0x0")
        self.assertNotIn("gasPrice", sent)

    async def test_no_accounts(self):
        helper = TransactionHelper(FakeProvider(eth_accounts=[]))

        with self.assertRaises(WalletError):
            await helper.sign_and_send(UnsignedTransaction(to=ROUTER, data="0x"))

    async def test_rejected_by_wallet(self):
        provider = FakeProvider(eth_sendTransaction=ProviderError("User rejected the request", code=4001))
        helper = TransactionHelper(provider)

        with self.assertRaises(TransactionError) as ctx:
            await helper.sign_and_send(UnsignedTransaction(to=ROUTER, data="0x"))

        self.assertIn("User rejected the request", str(ctx.exception))
        self.assertIsInstance(ctx.exception.original_error, ProviderError)


class TestWaitForConfirmation(unittest.IsolatedAsyncioTestCase):

    async def test_confirmed_immediately(self):
        provider = FakeProvider(eth_getTransactionReceipt=receipt("0x10"), eth_blockNumber="0x11")
        helper = TransactionHelper(provider, poll_interval=0)

        result = await helper.wait_for_confirmation(TX_HASH, timeout=5)

        self.assertEqual(result.block_number, 16)
        self.assertTrue(result.is_success)
        self.assertEqual(result.transaction_hash, TX_HASH)

    async def test_waits_for_required_confirmations(self):
        blocks = iter(["0x10", "0x11", "0x12", "0x13"])
        provider = FakeProvider(
            eth_getTransactionReceipt=receipt("0x10"),
            eth_blockNumber=lambda params: next(blocks),
        )
        helper = TransactionHelper(provider, poll_interval=0)

        result = await helper.wait_for_confirmation(TX_HASH, confirmations=3, timeout=5)

        self.assertEqual(result.block_number, 16)
        block_queries = [call for call in provider.calls if call[0] == "eth_blockNumber"]
        self.assertEqual(len(block_queries), 4)

    async def test_pending_then_mined(self):
        receipts = iter([None, {"blockNumber": None}, receipt("0x20")])
        provider = FakeProvider(
            eth_getTransactionReceipt=lambda params: next(receipts),
            eth_blockNumber="0x21",
        )
        helper = TransactionHelper(provider, poll_interval=0)

        result = await helper.wait_for_confirmation(TX_HASH, timeout=5)

        self.assertEqual(result.block_number, 32)

    async def test_lookup_errors_are_tolerated(self):
        outcomes = iter([ProviderError("header not found"), receipt("0x20")])

        def lookup(params):
            outcome = next(outcomes)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        provider = FakeProvider(eth_getTransactionReceipt=lookup, eth_blockNumber="0x21")
        helper = TransactionHelper(provider, poll_interval=0)

        result = await helper.wait_for_confirmation(TX_HASH, timeout=5)

        self.assertEqual(result.block_number, 32)

    async def test_transport_failures_are_tolerated(self):
        outcomes = iter([ConnectionError("socket closed"), receipt("0x20")])

        def lookup(params):
            outcome = next(outcomes)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        provider = FakeProvider(eth_getTransactionReceipt=lookup, eth_blockNumber="0x21")
        helper = TransactionHelper(provider, poll_interval=0)

        result = await helper.wait_for_confirmation(TX_HASH, timeout=5)

        self.assertEqual(result.block_number, 32)
        receipt_queries = [call for call in provider.calls if call[0] == "eth_getTransactionReceipt"]
        self.assertEqual(len(receipt_queries), 2)

    async def test_malformed_block_number_is_tolerated(self):
        receipts = iter([receipt("0xzz"), receipt("0x20")])
        provider = FakeProvider(
            eth_getTransactionReceipt=lambda params: next(receipts),
            eth_blockNumber="0x21",
        )
        helper = TransactionHelper(provider, poll_interval=0)

        result = await helper.wait_for_confirmation(TX_HASH, timeout=5)

        self.assertEqual(result.block_number, 32)

    async def test_reverted_receipt_is_returned(self):
        provider = FakeProvider(eth_getTransactionReceipt=receipt("0x10", "0x0"), eth_blockNumber="0x11")
        helper = TransactionHelper(provider, poll_interval=0)

        result = await helper.wait_for_confirmation(TX_HASH)

        self.assertFalse(result.is_success)

    async def test_timeout(self):
        provider = FakeProvider(eth_getTransactionReceipt=None)
        helper = TransactionHelper(provider, poll_interval=0.01)

        with self.assertRaises(ConfirmationTimeout) as ctx:
            await helper.wait_for_confirmation(TX_HASH, timeout=0.05)

        self.assertEqual(ctx.exception.tx_hash, TX_HASH)
        self.assertIn("timeout", str(ctx.exception))

    async def test_default_timeout_from_constructor(self):
        provider = FakeProvider(eth_getTransactionReceipt=None)
        helper = TransactionHelper(provider, poll_interval=0.01, confirmation_timeout=0.03)

        with self.assertRaises(ConfirmationTimeout) as ctx:
            await helper.wait_for_confirmation(TX_HASH)

        self.assertEqual(ctx.exception.timeout, 0.03)

    async def test_sign_send_and_wait(self):
        provider = FakeProvider(eth_getTransactionReceipt=receipt("0x10"), eth_blockNumber="0x10")
        helper = TransactionHelper(provider, poll_interval=0)

        result = await helper.sign_send_and_wait(
            UnsignedTransaction(to=ROUTER, data="0x"), confirmations=0, timeout=5
        )

        self.assertEqual(result.transaction_hash, TX_HASH)
        self.assertEqual(provider.calls[0][0], "eth_accounts")


class TestGas(unittest.IsolatedAsyncioTestCase):

    async def test_estimate_gas(self):
        provider = FakeProvider(eth_estimateGas="0x5208")
        helper = TransactionHelper(provider)

        gas = await helper.estimate_gas(UnsignedTransaction(to=ROUTER, data="0xab", value="16"))

        self.assertEqual(gas, "0x5208")
        method, params = provider.calls[-1]
        self.assertEqual(params, [{"to": ROUTER, "data": "0xab", "value": "0x10"}])

    async def test_estimate_gas_failure(self):
        helper = TransactionHelper(FakeProvider(eth_estimateGas=ProviderError("execution reverted")))

        with self.assertRaises(TransactionError) as ctx:
            await helper.estimate_gas({"to": ROUTER, "data": "0x"})
        self.assertEqual(str(ctx.exception), "Gas estimation failed: execution reverted")

    async def test_gas_price(self):
        helper = TransactionHelper(FakeProvider(eth_gasPrice="0x3b9aca00"))
        self.assertEqual(await helper.get_gas_price(), "0x3b9aca00")

    async def test_gas_price_failure(self):
        helper = TransactionHelper(FakeProvider(eth_gasPrice=ProviderError("rate limited")))

        with self.assertRaises(TransactionError) as ctx:
            await helper.get_gas_price()
        self.assertEqual(str(ctx.exception), "Failed to get gas price: rate limited")


if __name__ == "__main__":
    unittest.main()
