"""
Exception definitions for DefiBrain SDK

Four families of failure reach the caller:

    - local precondition errors (ValidationError, ConfigurationError)
      raised before any network call and never retried
    - backend errors (ApiError, NetworkError) carrying the backend message
    - transport errors (ProviderError, WalletError, TransactionError)
    - confirmation timeouts (ConfirmationTimeout)
"""

from typing import Any, Optional


class DefiBrainError(Exception):
    """
    Base exception for all SDK errors

    Attributes:
        message: Human-readable error message
        original_error: The underlying exception if any
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        original_error: Optional[BaseException] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r})"


class ValidationError(DefiBrainError, ValueError):
    """
    Invalid caller input

    Raised when:
    - An address, amount, chain ID or tx hash has the wrong format
    - A human-readable amount cannot be parsed
    """

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message, details={"field": field, "value": value})
        self.field = field
        self.value = value

    @classmethod
    def invalid_address(cls, field: str, value: Any) -> "ValidationError":
        return cls(f"{field} is not a valid Ethereum address: {value}", field, value)

    @classmethod
    def invalid_amount(cls, field: str, value: Any) -> "ValidationError":
        return cls(f"{field} must be a positive number: {value}", field, value)

    @classmethod
    def invalid_chain_id(cls, field: str, value: Any) -> "ValidationError":
        return cls(f"{field} must be a positive integer: {value}", field, value)

    @classmethod
    def invalid_tx_hash(cls, field: str, value: Any) -> "ValidationError":
        return cls(f"{field} is not a valid transaction hash: {value}", field, value)

    @classmethod
    def amount_format(cls, value: Any) -> "ValidationError":
        return cls(f"Invalid amount format: {value}", "amount", value)


class ConfigurationError(DefiBrainError):
    """
    Configuration-related errors

    Raised when:
    - Required configuration is missing
    - Configuration values are invalid
    - An operation needs a mode or helper the client was not set up with
    """

    @classmethod
    def missing(cls, param: str, hint: Optional[str] = None) -> "ConfigurationError":
        message = f"Missing required configuration: {param}"
        if hint:
            message = f"{message}. {hint}"
        return cls(message, details={"param": param})

    @classmethod
    def invalid(cls, param: str, reason: str) -> "ConfigurationError":
        return cls(f"Invalid configuration '{param}': {reason}", details={"param": param})

    @classmethod
    def router_required(cls, chain_id: int) -> "ConfigurationError":
        return cls(
            "router_address is required when mode is 'managed'. "
            f"No default router address found for chain_id {chain_id}. "
            "Please provide router_address in config.",
            details={"chain_id": chain_id},
        )

    @classmethod
    def batch_requires_managed(cls) -> "ConfigurationError":
        return cls("Batch execution requires managed mode with router_address")

    @classmethod
    def transaction_helper_missing(cls) -> "ConfigurationError":
        return cls("Transaction helper not set. Call set_transaction_helper() first.")


class ApiError(DefiBrainError):
    """
    Backend API error (non-2xx response)

    The message is the backend-provided text when the error body carries
    one, otherwise the endpoint's fallback text.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        body: Any = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(
            message,
            original_error=original_error,
            details={"status_code": status_code, "endpoint": endpoint},
        )
        self.status_code = status_code
        self.endpoint = endpoint
        self.body = body


class NetworkError(ApiError):
    """
    HTTP transport failure (no response received)

    Messages start with the markers the retry wrapper treats as transient.
    """

    @classmethod
    def timeout(cls, endpoint: str, error: Optional[BaseException] = None) -> "NetworkError":
        return cls(
            f"ETIMEDOUT: request to {endpoint} timed out",
            endpoint=endpoint,
            original_error=error,
        )

    @classmethod
    def request_failed(cls, endpoint: str, error: BaseException) -> "NetworkError":
        return cls(
            f"NetworkError: request to {endpoint} failed: {error}",
            endpoint=endpoint,
            original_error=error,
        )


class ProviderError(DefiBrainError):
    """
    JSON-RPC / wallet transport error

    Attributes:
        code: Numeric error code reported by the transport (e.g. 4001, 4902)
    """

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        data: Any = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(
            message,
            original_error=original_error,
            details={"code": code, "data": data},
        )
        self.code = code
        self.data = data

    @classmethod
    def from_rpc_error(cls, error: Any) -> "ProviderError":
        if isinstance(error, dict):
            return cls(
                str(error.get("message", "RPC error")),
                code=error.get("code"),
                data=error.get("data"),
            )
        return cls(str(error))


class WalletError(DefiBrainError):
    """
    Wallet discovery, connection and query errors
    """

    @classmethod
    def not_found(cls) -> "WalletError":
        return cls(
            "No wallet found. Configure DEFIBRAIN_RPC_URL or pass a wallet provider."
        )

    @classmethod
    def locked(cls) -> "WalletError":
        return cls("No accounts found. Please unlock your wallet.")

    @classmethod
    def not_connected(cls) -> "WalletError":
        return cls("Wallet not connected. Call connect() first.")

    @classmethod
    def chain_not_added(cls, chain_id: int, error: Optional[BaseException] = None) -> "WalletError":
        return cls(
            f"Network {chain_id} not found. Please add it to your wallet.",
            original_error=error,
            details={"chain_id": chain_id},
        )

    @classmethod
    def operation_failed(cls, operation: str, error: BaseException) -> "WalletError":
        return cls(f"{operation}: {_reason(error)}", original_error=error)


class TransactionError(DefiBrainError):
    """
    Signing, sending and gas estimation errors

    Never retried by the SDK: resubmitting a transaction risks a double spend.
    """

    def __init__(
        self,
        message: str,
        tx_hash: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message, original_error=original_error, details={"tx_hash": tx_hash})
        self.tx_hash = tx_hash

    @classmethod
    def failed(cls, error: BaseException) -> "TransactionError":
        return cls(f"Transaction failed: {_reason(error)}", original_error=error)

    @classmethod
    def gas_estimation_failed(cls, error: BaseException) -> "TransactionError":
        return cls(f"Gas estimation failed: {_reason(error)}", original_error=error)

    @classmethod
    def gas_price_failed(cls, error: BaseException) -> "TransactionError":
        return cls(f"Failed to get gas price: {_reason(error)}", original_error=error)


class ConfirmationTimeout(TransactionError):
    """Confirmation polling exceeded its bound"""

    def __init__(self, tx_hash: str, timeout: float):
        super().__init__(
            f"Transaction confirmation timeout after {timeout}s",
            tx_hash=tx_hash,
        )
        self.timeout = timeout


class ProtocolMismatch(DefiBrainError):
    """
    The backend selected a different protocol than the helper expected
    """

    def __init__(self, message: str, expected: str, actual: str):
        super().__init__(message, details={"expected": expected, "actual": actual})
        self.expected = expected
        self.actual = actual

    @classmethod
    def route(cls, expected: str, actual: str) -> "ProtocolMismatch":
        return cls(
            f"Best route is not {expected} (got {actual}). "
            f"This helper is intended for swaps where {expected} is the selected protocol.",
            expected,
            actual,
        )

    @classmethod
    def best_protocol(cls, expected: str, actual: str) -> "ProtocolMismatch":
        return cls(f"Best protocol is {actual}, not {expected}", expected, actual)


class EncodingError(DefiBrainError):
    """Managed-mode call data could not be encoded"""

    @classmethod
    def params(cls, error: BaseException) -> "EncodingError":
        return cls(f"Failed to encode action params: {error}", original_error=error)


def _reason(error: BaseException) -> str:
    if isinstance(error, DefiBrainError):
        return error.message
    return str(error) or error.__class__.__name__
