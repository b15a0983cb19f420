"""
Error definitions for DefiBrain SDK
"""

from .exceptions import (
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

__all__ = [
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
]
