"""
Unit tests for managed-mode router call encoding
"""

import sys
import unittest
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from eth_abi import decode, encode
from web3 import Web3

from defibrain_sdk.abis import (
    AAVE_ADAPTER_ABI,
    ASSET_REGISTRY_ABI,
    DEFI_ROUTER_ABI,
    PERMISSION_MANAGER_ABI,
    function_selector,
    function_signature,
    get_function_abi,
    load_abi,
)
from defibrain_sdk.errors import ConfigurationError, EncodingError, ValidationError
from defibrain_sdk.infra.router import (
    build_managed_transaction,
    decode_action_params,
    decode_execute_action,
    decode_execute_result,
    encode_action_params,
    encode_execute_action,
)

ROUTER = "0xFa907c9ca64B72420f04AFFa4e70619991C6c6e2"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


class TestAbiBundle(unittest.TestCase):

    def test_bundled_abis_load(self):
        for abi in (DEFI_ROUTER_ABI, PERMISSION_MANAGER_ABI, ASSET_REGISTRY_ABI, AAVE_ADAPTER_ABI):
            self.assertIsInstance(abi, list)
            self.assertTrue(abi)

    def test_execute_action_signature(self):
        self.assertEqual(
            function_signature(DEFI_ROUTER_ABI, "executeAction"),
            "executeAction(string,string,bytes)",
        )
        entry = get_function_abi(DEFI_ROUTER_ABI, "executeAction")
        self.assertEqual([o["type"] for o in entry["outputs"]], ["bool", "bytes"])

    def test_selector_is_keccak_prefix(self):
        expected = bytes(Web3.keccak(text="executeAction(string,string,bytes)")[:4])
        self.assertEqual(function_selector(DEFI_ROUTER_ABI, "executeAction"), expected)

    def test_unknown_function_and_abi(self):
        with self.assertRaises(ConfigurationError):
            get_function_abi(DEFI_ROUTER_ABI, "doesNotExist")
        with self.assertRaises(ConfigurationError):
            load_abi("NoSuchContract")


class TestParamsEncoding(unittest.TestCase):

    def test_params_are_compact_json_wrapped_once_as_bytes(self):
        encoded = encode_action_params({"asset": USDC, "amount": "1000"})
        (payload,) = decode(["bytes"], encoded)
        self.assertEqual(payload, ('{"asset":"%s","amount":"1000"}' % USDC).encode("utf-8"))

    def test_decode_action_params(self):
        params = {"marketId": "0x01", "assets": "5", "nested": {"a": [1, 2]}}
        self.assertEqual(decode_action_params(encode_action_params(params)), params)

    def test_unserialisable_params_raise(self):
        with self.assertRaises(EncodingError):
            encode_action_params({"amounts": {1, 2}})
        with self.assertRaises(EncodingError):
            encode_action_params({"apr": float("nan")})


class TestExecuteActionCall(unittest.TestCase):

    def test_call_data_layout(self):
        data = encode_execute_action("aave", "supply", {"asset": USDC, "amount": "1000"})
        selector = function_selector(DEFI_ROUTER_ABI, "executeAction")

        self.assertTrue(data.startswith("0x" + selector.hex()))
        protocol, action, params_bytes = decode(
            ["string", "string", "bytes"], bytes.fromhex(data[10:])
        )
        self.assertEqual((protocol, action), ("aave", "supply"))
        self.assertEqual(decode_action_params(params_bytes), {"asset": USDC, "amount": "1000"})

    def test_decode_execute_action(self):
        data = encode_execute_action("pendle", "redeemPT", {"ptAddress": USDC, "amount": "7"})
        self.assertEqual(
            decode_execute_action(data),
            ("pendle", "redeemPT", {"ptAddress": USDC, "amount": "7"}),
        )

    def test_decode_rejects_other_selector(self):
        with self.assertRaises(EncodingError):
            decode_execute_action("0xdeadbeef" + "00" * 64)

    def test_decode_execute_result(self):
        raw = encode(["bool", "bytes"], [True, b"ok"])
        self.assertEqual(decode_execute_result("0x" + raw.hex()), (True, b"ok"))
        self.assertEqual(decode_execute_result(raw.hex()), (True, b"ok"))


class TestBuildManagedTransaction(unittest.TestCase):

    def test_targets_router_with_zero_value(self):
        tx = build_managed_transaction(ROUTER, "aave", "supply", {"asset": USDC, "amount": "1"})
        self.assertEqual(tx.to, ROUTER)
        self.assertEqual(tx.value, "0")
        self.assertEqual(decode_execute_action(tx.data)[:2], ("aave", "supply"))

    def test_invalid_router(self):
        with self.assertRaises(ValidationError):
            build_managed_transaction("0x1234", "aave", "supply", {})

    def test_encoding_failure_propagates(self):
        with self.assertRaises(EncodingError):
            build_managed_transaction(ROUTER, "aave", "supply", {"bad": object()})


if __name__ == "__main__":
    unittest.main()
