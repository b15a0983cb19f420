"""
Unit tests for wallet transports

RpcProvider is tested with web3's make_request mocked out; LocalAccountProvider
signs with a throwaway test key and its raw transactions are recovered with
eth-account to check the signer.
"""

import sys
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, patch

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from eth_account import Account

from defibrain_sdk import config as config_module
from defibrain_sdk.errors import ConfigurationError, ProviderError, WalletError
from defibrain_sdk.infra.transport import (
    UNRECOGNIZED_CHAIN,
    LocalAccountProvider,
    RpcProvider,
    WalletProvider,
    discover_provider,
)

# Well-known test key, never holds funds
TEST_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
TEST_ADDRESS = Account.from_key(TEST_KEY).address
RPC_URL = "https://rpc.test"
ROUTER = "0xfa907c9ca64b72420f04affa4e70619991c6c6e2"
RAW_HASH = "0x" + "ef" * 32


class Upstream:
    """Records forwarded requests"""

    def __init__(self, **answers):
        self.answers = {
            "eth_chainId": "0xaa36a7",
            "eth_getTransactionCount": "0x7",
            "eth_estimateGas": "0x5208",
            "eth_gasPrice": "0x3b9aca00",
            "eth_sendRawTransaction": RAW_HASH,
        }
        self.answers.update(answers)
        self.calls = []

    async def request(self, method, params=None):
        self.calls.append((method, params))
        return self.answers.get(method)

    def params_of(self, method):
        return [params for name, params in self.calls if name == method]


class TestRpcProvider(unittest.IsolatedAsyncioTestCase):

    def test_requires_url(self):
        with self.assertRaises(ConfigurationError):
            RpcProvider("")

    def test_satisfies_protocol(self):
        self.assertIsInstance(RpcProvider(RPC_URL), WalletProvider)

    async def test_returns_result(self):
        provider = RpcProvider(RPC_URL)
        with patch.object(provider._provider, "make_request",
                          new=AsyncMock(return_value={"jsonrpc": "2.0", "id": 1, "result": "0x10"})) as mock_request:
            result = await provider.request("eth_blockNumber")

        self.assertEqual(result, "0x10")
        mock_request.assert_awaited_once_with("eth_blockNumber", [])

    async def test_rpc_error_keeps_code(self):
        provider = RpcProvider(RPC_URL)
        response = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "nonce too low"}}
        with patch.object(provider._provider, "make_request", new=AsyncMock(return_value=response)):
            with self.assertRaises(ProviderError) as ctx:
                await provider.request("eth_sendRawTransaction", ["0x00"])

        self.assertEqual(ctx.exception.code, -32000)
        self.assertEqual(str(ctx.exception), "nonce too low")

    async def test_transport_failure_wrapped(self):
        provider = RpcProvider(RPC_URL)
        with patch.object(provider._provider, "make_request",
                          new=AsyncMock(side_effect=OSError("connection refused"))):
            with self.assertRaises(ProviderError) as ctx:
                await provider.request("eth_chainId")

        self.assertIn("eth_chainId", str(ctx.exception))
        self.assertIsInstance(ctx.exception.original_error, OSError)


class TestLocalAccountProvider(unittest.IsolatedAsyncioTestCase):

    async def test_accounts(self):
        provider = LocalAccountProvider.from_private_key(Upstream(), TEST_KEY)

        self.assertEqual(await provider.request("eth_accounts"), [TEST_ADDRESS])
        self.assertEqual(await provider.request("eth_requestAccounts"), [TEST_ADDRESS])

    def test_key_without_prefix(self):
        provider = LocalAccountProvider.from_private_key(Upstream(), TEST_KEY[2:])
        self.assertEqual(provider.address, TEST_ADDRESS)

    async def test_send_transaction_fills_and_signs(self):
        upstream = Upstream()
        provider = LocalAccountProvider.from_private_key(upstream, TEST_KEY)

        tx_hash = await provider.request("eth_sendTransaction", [{
            "from": TEST_ADDRESS, "to": ROUTER, "data": "0x1234", "value": "0x0",
        }])

        self.assertEqual(tx_hash, RAW_HASH)
        self.assertEqual(upstream.params_of("eth_getTransactionCount"), [[TEST_ADDRESS, "pending"]])
        self.assertEqual(
            upstream.params_of("eth_estimateGas"),
            [[{"to": ROUTER, "data": "0x1234", "value": "0x0", "from": TEST_ADDRESS}]],
        )
        raw = upstream.params_of("eth_sendRawTransaction")[0][0]
        self.assertTrue(raw.startswith("0x"))
        self.assertEqual(Account.recover_transaction(raw), TEST_ADDRESS)

    async def test_send_transaction_keeps_explicit_fields(self):
        upstream = Upstream()
        provider = LocalAccountProvider.from_private_key(upstream, TEST_KEY)

        await provider.request("eth_sendTransaction", [{
            "to": ROUTER, "data": "0x", "value": "0x0",
            "gas": "0x5208", "gasPrice": "0x1", "nonce": "0x0", "chainId": 11155111,
        }])

        methods = [method for method, _ in upstream.calls]
        self.assertEqual(methods, ["eth_sendRawTransaction"])

    async def test_send_transaction_without_params(self):
        provider = LocalAccountProvider.from_private_key(Upstream(), TEST_KEY)
        with self.assertRaises(ProviderError):
            await provider.request("eth_sendTransaction", [])

    async def test_reads_forwarded(self):
        upstream = Upstream(eth_getBalance="0x64")
        provider = LocalAccountProvider.from_private_key(upstream, TEST_KEY)

        self.assertEqual(await provider.request("eth_getBalance", [TEST_ADDRESS, "latest"]), "0x64")
        self.assertEqual(upstream.calls, [("eth_getBalance", [TEST_ADDRESS, "latest"])])

    async def test_switch_to_bound_chain(self):
        provider = LocalAccountProvider.from_private_key(Upstream(), TEST_KEY)
        self.assertIsNone(await provider.request("wallet_switchEthereumChain", [{"chainId": "0xaa36a7"}]))

    async def test_switch_to_other_chain(self):
        provider = LocalAccountProvider.from_private_key(Upstream(), TEST_KEY)

        with self.assertRaises(ProviderError) as ctx:
            await provider.request("wallet_switchEthereumChain", [{"chainId": "0x1"}])
        self.assertEqual(ctx.exception.code, UNRECOGNIZED_CHAIN)

    def test_events(self):
        provider = LocalAccountProvider.from_private_key(Upstream(), TEST_KEY)
        seen = []

        provider.on("chainChanged", seen.append)
        provider.emit("chainChanged", "0x1")
        provider.remove_listener("chainChanged", seen.append)
        provider.emit("chainChanged", "0x89")

        self.assertEqual(seen, ["0x1"])

    @patch.dict("os.environ", {"EVM_PRIVATE_KEY": TEST_KEY})
    def test_from_env(self):
        provider = LocalAccountProvider.from_env(Upstream())
        self.assertEqual(provider.address, TEST_ADDRESS)

    @patch.dict("os.environ", {}, clear=True)
    def test_from_env_missing(self):
        with self.assertRaises(WalletError):
            LocalAccountProvider.from_env(Upstream())


class TestDiscoverProvider(unittest.TestCase):

    def setUp(self):
        wallet = config_module.config.wallet
        patches = [
            patch.object(wallet, "rpc_url", ""),
            patch.object(wallet, "private_key", ""),
            patch.object(wallet, "rpc_timeout", 5.0),
        ]
        for p in patches:
            p.start()
            self.addCleanup(p.stop)

    def test_nothing_configured(self):
        self.assertIsNone(discover_provider())

    def test_rpc_only(self):
        provider = discover_provider(rpc_url=RPC_URL)
        self.assertIsInstance(provider, RpcProvider)
        self.assertEqual(provider.url, RPC_URL)

    def test_rpc_and_key(self):
        provider = discover_provider(rpc_url=RPC_URL, private_key=TEST_KEY)
        self.assertIsInstance(provider, LocalAccountProvider)
        self.assertEqual(provider.address, TEST_ADDRESS)

    def test_from_settings(self):
        with patch.object(config_module.config.wallet, "rpc_url", RPC_URL), \
                patch.object(config_module.config.wallet, "private_key", TEST_KEY):
            provider = discover_provider()
        self.assertIsInstance(provider, LocalAccountProvider)

    def test_key_without_rpc(self):
        self.assertIsNone(discover_provider(private_key=TEST_KEY))


if __name__ == "__main__":
    unittest.main()
