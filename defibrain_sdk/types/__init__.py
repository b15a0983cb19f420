"""
Type definitions for DefiBrain SDK
"""

from .common import (
    ExecutionMode,
    Strategy,
    RiskLevel,
    ActionStatus,
    HealthStatus,
)
from .transaction import (
    UnsignedTransaction,
    TransactionReceipt,
    parse_quantity,
    to_quantity,
)
from .api import (
    OptimizeYieldRequest,
    OptimizeYieldResponse,
    FindSwapRequest,
    FindSwapResponse,
    SwapRoute,
    ExecuteActionRequest,
    ExecuteActionResponse,
    BatchAction,
    ExecuteBatchRequest,
    ExecuteBatchResponse,
    BatchItemResult,
    HealthCheckResponse,
    UsageStats,
)

__all__ = [
    # Enums
    "ExecutionMode",
    "Strategy",
    "RiskLevel",
    "ActionStatus",
    "HealthStatus",
    # Transactions
    "UnsignedTransaction",
    "TransactionReceipt",
    "parse_quantity",
    "to_quantity",
    # API requests/responses
    "OptimizeYieldRequest",
    "OptimizeYieldResponse",
    "FindSwapRequest",
    "FindSwapResponse",
    "SwapRoute",
    "ExecuteActionRequest",
    "ExecuteActionResponse",
    "BatchAction",
    "ExecuteBatchRequest",
    "ExecuteBatchResponse",
    "BatchItemResult",
    "HealthCheckResponse",
    "UsageStats",
]
