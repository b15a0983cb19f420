"""
DefiBrain SDK - Client for the DefiBrain yield optimization and swap routing API

Provides:
- DefiBrainClient: Yield optimization, swap routing, protocol actions, batches
- Direct and managed (router contract) execution modes
- TransactionHelper / WalletHelper: Signing, confirmation and balances
- Protocol helpers: Aave, Pendle, Morpho, Curve, Uniswap, 1inch
"""

__version__ = "0.2.0"

from .client import DefiBrainClient
from .config import ClientConfig, RetryPolicy, setup_logging, get_default_router_address
from .types import (
    ExecutionMode,
    Strategy,
    RiskLevel,
    ActionStatus,
    HealthStatus,
    UnsignedTransaction,
    TransactionReceipt,
    OptimizeYieldRequest,
    OptimizeYieldResponse,
    FindSwapRequest,
    FindSwapResponse,
    ExecuteActionRequest,
    ExecuteActionResponse,
    BatchAction,
    ExecuteBatchRequest,
    ExecuteBatchResponse,
    HealthCheckResponse,
    UsageStats,
)
from .errors import (
    DefiBrainError,
    ValidationError,
    ConfigurationError,
    ApiError,
    NetworkError,
    ProviderError,
    WalletError,
    TransactionError,
    ConfirmationTimeout,
    ProtocolMismatch,
    EncodingError,
)
from .infra import (
    retry,
    is_valid_address,
    is_valid_amount,
    is_valid_chain_id,
    is_valid_tx_hash,
    format_amount,
    parse_amount,
    validate_address,
    validate_amount,
    validate_chain_id,
    validate_tx_hash,
    RpcProvider,
    LocalAccountProvider,
    WalletProvider,
    discover_provider,
)
from .modules import TransactionHelper, WalletHelper, WalletInfo
from .protocols import (
    AaveHelper,
    PendleHelper,
    MorphoHelper,
    CurveHelper,
    UniswapHelper,
    OneInchHelper,
    PortfolioHelper,
    ProtocolRegistry,
)

__all__ = [
    "__version__",
    # Client
    "DefiBrainClient",
    "ClientConfig",
    "RetryPolicy",
    "setup_logging",
    "get_default_router_address",
    # Types
    "ExecutionMode",
    "Strategy",
    "RiskLevel",
    "ActionStatus",
    "HealthStatus",
    "UnsignedTransaction",
    "TransactionReceipt",
    "OptimizeYieldRequest",
    "OptimizeYieldResponse",
    "FindSwapRequest",
    "FindSwapResponse",
    "ExecuteActionRequest",
    "ExecuteActionResponse",
    "BatchAction",
    "ExecuteBatchRequest",
    "ExecuteBatchResponse",
    "HealthCheckResponse",
    "UsageStats",
    # Errors
    "DefiBrainError",
    "ValidationError",
    "ConfigurationError",
    "ApiError",
    "NetworkError",
    "ProviderError",
    "WalletError",
    "TransactionError",
    "ConfirmationTimeout",
    "ProtocolMismatch",
    "EncodingError",
    # Utilities
    "retry",
    "is_valid_address",
    "is_valid_amount",
    "is_valid_chain_id",
    "is_valid_tx_hash",
    "format_amount",
    "parse_amount",
    "validate_address",
    "validate_amount",
    "validate_chain_id",
    "validate_tx_hash",
    # Wallet
    "RpcProvider",
    "LocalAccountProvider",
    "WalletProvider",
    "discover_provider",
    "TransactionHelper",
    "WalletHelper",
    "WalletInfo",
    # Protocol helpers
    "AaveHelper",
    "PendleHelper",
    "MorphoHelper",
    "CurveHelper",
    "UniswapHelper",
    "OneInchHelper",
    "PortfolioHelper",
    "ProtocolRegistry",
]
