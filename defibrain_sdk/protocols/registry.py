"""
Protocol helper registry

Provides centralized registration and lookup for protocol helpers.
"""

from typing import Dict, List, Optional, Type, TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from .base import ProtocolHelper
    from ..client import DefiBrainClient
    from ..modules.transaction import TransactionHelper

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


class ProtocolRegistry:
    """
    Registry for protocol helpers

    Usage:
        # Get helper instance
        aave = ProtocolRegistry.get("aave", client, tx_helper)

        # Register a custom helper class
        ProtocolRegistry.register("spark", SparkHelper)

        # List available protocols
        protocols = ProtocolRegistry.list()
    """

    # Registered helper classes
    _helpers: Dict[str, Type["ProtocolHelper"]] = {}

    @classmethod
    def register(cls, name: str, helper_class: Type["ProtocolHelper"]):
        """
        Register a protocol helper class

        Args:
            name: Protocol name (e.g., "aave", "uniswap")
            helper_class: Helper class (not instance)
        """
        cls._helpers[name.lower()] = helper_class
        logger.debug(f"Registered protocol helper: {name}")

    @classmethod
    def get(
        cls,
        name: str,
        client: "DefiBrainClient",
        tx_helper: Optional["TransactionHelper"] = None,
    ) -> "ProtocolHelper":
        """
        Create a helper instance for a protocol

        Raises:
            ConfigurationError: If protocol not registered
        """
        cls._ensure_loaded()
        name_lower = name.lower()

        if name_lower not in cls._helpers:
            available = ", ".join(sorted(cls._helpers)) or "none"
            raise ConfigurationError.invalid(
                "protocol", f"Unknown protocol: {name}. Available protocols: {available}"
            )

        return cls._helpers[name_lower](client, tx_helper)

    @classmethod
    def list(cls) -> List[str]:
        """List registered protocol names"""
        cls._ensure_loaded()
        return list(cls._helpers.keys())

    @classmethod
    def is_registered(cls, name: str) -> bool:
        """Check if protocol is registered"""
        cls._ensure_loaded()
        return name.lower() in cls._helpers

    @classmethod
    def _ensure_loaded(cls):
        """Register the built-in helpers"""
        from .aave import AaveHelper
        from .curve import CurveHelper
        from .morpho import MorphoHelper
        from .oneinch import OneInchHelper
        from .pendle import PendleHelper
        from .uniswap import UniswapHelper

        for helper_class in (AaveHelper, PendleHelper, MorphoHelper, CurveHelper, UniswapHelper, OneInchHelper):
            cls._helpers.setdefault(helper_class.name, helper_class)


def get_helper(
    name: str,
    client: "DefiBrainClient",
    tx_helper: Optional["TransactionHelper"] = None,
) -> "ProtocolHelper":
    """Convenience function to get a helper"""
    return ProtocolRegistry.get(name, client, tx_helper)
