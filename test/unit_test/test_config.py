"""
Unit tests for configuration
"""

import logging
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from defibrain_sdk.config import (
    ApiSettings,
    ClientConfig,
    DEFAULT_API_URL,
    LoggingSettings,
    RetryPolicy,
    RetrySettings,
    ROUTER_ADDRESSES,
    Settings,
    _get_env_float,
    _get_env_int,
    get_default_router_address,
    setup_logging,
)
from defibrain_sdk.errors import ConfigurationError
from defibrain_sdk.types import ExecutionMode

SEPOLIA = 11155111
ROUTER = "0x1111111111111111111111111111111111111111"


class TestRouterAddresses(unittest.TestCase):

    def test_sepolia_has_default_router(self):
        self.assertEqual(get_default_router_address(SEPOLIA), ROUTER_ADDRESSES[SEPOLIA])
        self.assertIsNotNone(get_default_router_address(SEPOLIA))

    def test_empty_or_unknown_chain_has_none(self):
        self.assertIsNone(get_default_router_address(1))
        self.assertIsNone(get_default_router_address(999999))


class TestClientConfig(unittest.TestCase):

    def test_defaults(self):
        config = ClientConfig(api_key="key")
        self.assertEqual(config.base_url, DEFAULT_API_URL)
        self.assertEqual(config.chain_id, 1)
        self.assertEqual(config.mode, ExecutionMode.DIRECT)
        self.assertFalse(config.is_managed)
        self.assertIsNone(config.resolved_router_address)
        self.assertEqual(config.timeout, 30.0)

    def test_mode_string_is_coerced(self):
        config = ClientConfig(api_key="key", chain_id=SEPOLIA, mode="managed")
        self.assertIs(config.mode, ExecutionMode.MANAGED)

    def test_unknown_mode_rejected(self):
        with self.assertRaises(ConfigurationError):
            ClientConfig(api_key="key", mode="autopilot")

    def test_base_url_trailing_slash_stripped(self):
        config = ClientConfig(api_key="key", base_url="https://api.test/v1/")
        self.assertEqual(config.base_url, "https://api.test/v1")

    def test_api_key_required(self):
        with self.assertRaises(ConfigurationError):
            ClientConfig(api_key="")

    def test_invalid_chain_id(self):
        with self.assertRaises(ConfigurationError):
            ClientConfig(api_key="key", chain_id=0)

    def test_invalid_timeout(self):
        with self.assertRaises(ConfigurationError):
            ClientConfig(api_key="key", timeout=0)

    def test_managed_without_router_on_chain_without_default(self):
        with self.assertRaises(ConfigurationError) as ctx:
            ClientConfig(api_key="key", chain_id=1, mode="managed")
        self.assertIn("router_address is required", str(ctx.exception))

    def test_managed_falls_back_to_chain_default(self):
        config = ClientConfig(api_key="key", chain_id=SEPOLIA, mode="managed")
        self.assertEqual(config.resolved_router_address, ROUTER_ADDRESSES[SEPOLIA])

    def test_managed_with_explicit_router(self):
        config = ClientConfig(api_key="key", chain_id=1, mode="managed", router_address=ROUTER)
        self.assertEqual(config.resolved_router_address, ROUTER)

    def test_invalid_router_address(self):
        with self.assertRaises(ConfigurationError):
            ClientConfig(api_key="key", router_address="0x1234")

    def test_reconfigure_returns_new_validated_config(self):
        config = ClientConfig(api_key="key")
        updated = config.reconfigure(chain_id=SEPOLIA, mode="managed")

        self.assertEqual(config.chain_id, 1)
        self.assertEqual(config.mode, ExecutionMode.DIRECT)
        self.assertEqual(updated.chain_id, SEPOLIA)
        self.assertTrue(updated.is_managed)

    def test_reconfigure_revalidates(self):
        config = ClientConfig(api_key="key")
        with self.assertRaises(ConfigurationError):
            config.reconfigure(mode="managed")

    def test_repr_hides_api_key(self):
        config = ClientConfig(api_key="super-secret")
        self.assertNotIn("super-secret", repr(config))

    def test_from_env_settings_and_overrides(self):
        settings = Settings(
            api=ApiSettings(
                api_key="env-key",
                base_url="https://env.test/v1/",
                chain_id=137,
                timeout=12.0,
                mode="direct",
                router_address=None,
            ),
            retry=RetrySettings(max_retries=1, initial_delay=0.5, max_delay=5.0, backoff_factor=3.0),
        )

        config = ClientConfig.from_env(settings, chain_id=SEPOLIA)

        self.assertEqual(config.api_key, "env-key")
        self.assertEqual(config.base_url, "https://env.test/v1")
        self.assertEqual(config.chain_id, SEPOLIA)
        self.assertEqual(config.timeout, 12.0)
        self.assertEqual(config.retry, RetryPolicy(max_retries=1, initial_delay=0.5, max_delay=5.0, backoff_factor=3.0))


class TestEnvHelpers(unittest.TestCase):

    def test_invalid_int_falls_back_to_default(self):
        with patch.dict(os.environ, {"DEFIBRAIN_TEST_INT": "abc"}):
            self.assertEqual(_get_env_int("DEFIBRAIN_TEST_INT", 7), 7)

    def test_valid_values(self):
        with patch.dict(os.environ, {"DEFIBRAIN_TEST_INT": "42", "DEFIBRAIN_TEST_FLOAT": "2.5"}):
            self.assertEqual(_get_env_int("DEFIBRAIN_TEST_INT", 7), 42)
            self.assertEqual(_get_env_float("DEFIBRAIN_TEST_FLOAT", 1.0), 2.5)

    def test_api_settings_read_environment(self):
        env = {
            "DEFIBRAIN_API_KEY": "from-env",
            "DEFIBRAIN_CHAIN_ID": "42161",
            "DEFIBRAIN_MODE": "direct",
        }
        with patch.dict(os.environ, env):
            settings = ApiSettings()
        self.assertEqual(settings.api_key, "from-env")
        self.assertEqual(settings.chain_id, 42161)


class TestSetupLogging(unittest.TestCase):

    def test_file_logging_creates_directory(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_file = os.path.join(tmp, "nested", "sdk.log")
            logger = setup_logging(
                LoggingSettings(log_file=log_file, log_level="DEBUG", console_output=False),
                logger_name="defibrain_sdk_test",
            )
            try:
                self.assertEqual(logger.level, logging.DEBUG)
                self.assertEqual(len(logger.handlers), 1)
                self.assertTrue(os.path.exists(log_file))
            finally:
                for handler in logger.handlers[:]:
                    handler.close()
                    logger.removeHandler(handler)

    def test_console_only(self):
        logger = setup_logging(
            LoggingSettings(log_file="", log_level="WARNING", console_output=True),
            logger_name="defibrain_sdk_console_test",
        )
        self.assertEqual(logger.level, logging.WARNING)
        self.assertEqual(len(logger.handlers), 1)
        self.assertIsInstance(logger.handlers[0], logging.StreamHandler)


if __name__ == "__main__":
    unittest.main()
