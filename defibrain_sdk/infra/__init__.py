"""
Infrastructure layer for DefiBrain SDK

Provides:
- retry: Bounded exponential backoff with correlation-ID logging
- validation: Address/amount/chain ID/tx hash validators and unit conversion
- router: Managed-mode router call encoding
- transport: Wallet/JSON-RPC transports
"""

from .retry import (
    retry,
    CorrelationContext,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from .validation import (
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
)
from .router import (
    encode_action_params,
    decode_action_params,
    encode_execute_action,
    decode_execute_action,
    decode_execute_result,
    build_managed_transaction,
)
from .transport import (
    WalletProvider,
    RpcProvider,
    LocalAccountProvider,
    discover_provider,
)

__all__ = [
    # Retry
    "retry",
    "CorrelationContext",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
    # Validation
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
    # Managed mode
    "encode_action_params",
    "decode_action_params",
    "encode_execute_action",
    "decode_execute_action",
    "decode_execute_result",
    "build_managed_transaction",
    # Transports
    "WalletProvider",
    "RpcProvider",
    "LocalAccountProvider",
    "discover_provider",
]
