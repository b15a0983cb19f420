"""
Configuration management for DefiBrain SDK

Loads settings from environment variables and .env file, and defines the
immutable per-client configuration.
Includes logging configuration with file output and correlation ID support.
"""

import os
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from dotenv import load_dotenv

from .errors import ConfigurationError
from .types.common import ExecutionMode


def _load_env_file():
    """Load .env file from project root"""
    current = Path(__file__).parent.parent  # defibrain_sdk package parent
    env_file = current / ".env"

    if env_file.exists():
        load_dotenv(env_file)


# Load .env on module import
_load_env_file()


def _get_env(key: str, default: Optional[str] = "") -> Optional[str]:
    """Get environment variable with default"""
    value = os.getenv(key)
    if value is None:
        return default
    return value


def _get_env_float(key: str, default: float) -> float:
    """Get environment variable as float"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid float value for {key}='{value}', using default={default}"
        )
        return default


def _get_env_int(key: str, default: int) -> int:
    """Get environment variable as int"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid int value for {key}='{value}', using default={default}"
        )
        return default


def _get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as bool"""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


DEFAULT_API_URL = "https://backend-production-a565a.up.railway.app/v1"

# Default router addresses by network (empty = not deployed yet)
ROUTER_ADDRESSES: Dict[int, str] = {
    1: "",                                                  # Ethereum Mainnet
    11155111: "0xFa907c9ca64B72420f04AFFa4e70619991C6c6e2",  # Sepolia
    42161: "",                                              # Arbitrum
    137: "",                                                # Polygon
}


def get_default_router_address(chain_id: int) -> Optional[str]:
    """Default router address for a chain, or None if none is deployed"""
    return ROUTER_ADDRESSES.get(chain_id) or None


# Substrings marking an error message as transient
DEFAULT_RETRYABLE_ERRORS: Tuple[str, ...] = (
    "ECONNRESET",
    "ETIMEDOUT",
    "ENOTFOUND",
    "NetworkError",
)


@dataclass
class ApiSettings:
    """DefiBrain backend settings"""
    api_key: str = field(default_factory=lambda: _get_env("DEFIBRAIN_API_KEY", ""))
    base_url: str = field(default_factory=lambda: _get_env("DEFIBRAIN_API_URL", DEFAULT_API_URL))
    chain_id: int = field(default_factory=lambda: _get_env_int("DEFIBRAIN_CHAIN_ID", 1))
    timeout: float = field(default_factory=lambda: _get_env_float("DEFIBRAIN_TIMEOUT", 30.0))
    mode: str = field(default_factory=lambda: _get_env("DEFIBRAIN_MODE", "direct"))
    router_address: Optional[str] = field(default_factory=lambda: _get_env("DEFIBRAIN_ROUTER_ADDRESS", None))


@dataclass
class RetrySettings:
    """Retry defaults for read/compute endpoints"""
    max_retries: int = field(default_factory=lambda: _get_env_int("RETRY_MAX_RETRIES", 3))
    initial_delay: float = field(default_factory=lambda: _get_env_float("RETRY_INITIAL_DELAY", 1.0))
    max_delay: float = field(default_factory=lambda: _get_env_float("RETRY_MAX_DELAY", 10.0))
    backoff_factor: float = field(default_factory=lambda: _get_env_float("RETRY_BACKOFF_FACTOR", 2.0))


@dataclass
class TxSettings:
    """Transaction confirmation settings"""
    poll_interval: float = field(default_factory=lambda: _get_env_float("TX_POLL_INTERVAL", 2.0))
    confirmation_timeout: float = field(default_factory=lambda: _get_env_float("TX_CONFIRMATION_TIMEOUT", 300.0))
    confirmations: int = field(default_factory=lambda: _get_env_int("TX_CONFIRMATIONS", 1))


@dataclass
class WalletSettings:
    """Wallet transport discovery settings"""
    rpc_url: str = field(default_factory=lambda: _get_env("DEFIBRAIN_RPC_URL", ""))
    private_key: str = field(default_factory=lambda: _get_env("EVM_PRIVATE_KEY", ""))
    rpc_timeout: float = field(default_factory=lambda: _get_env_float("DEFIBRAIN_RPC_TIMEOUT", 30.0))


@dataclass
class LoggingSettings:
    """
    Logging configuration with file output and correlation ID support.

    Environment variables:
        LOG_FILE: Path to log file (empty = console only)
        LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
        LOG_FORMAT: Custom log format string
        LOG_CONSOLE: Enable console output (default: true)
        LOG_MAX_BYTES: Max log file size before rotation (default: 10MB)
        LOG_BACKUP_COUNT: Number of backup files to keep (default: 5)
    """
    log_file: str = field(default_factory=lambda: _get_env("LOG_FILE", ""))
    log_level: str = field(default_factory=lambda: _get_env("LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: _get_env(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ))
    console_output: bool = field(default_factory=lambda: _get_env_bool("LOG_CONSOLE", True))
    max_bytes: int = field(default_factory=lambda: _get_env_int("LOG_MAX_BYTES", 10 * 1024 * 1024))  # 10MB
    backup_count: int = field(default_factory=lambda: _get_env_int("LOG_BACKUP_COUNT", 5))

    @property
    def level(self) -> int:
        """Get numeric log level"""
        return getattr(logging, self.log_level.upper(), logging.INFO)


@dataclass
class Settings:
    """
    Environment settings container

    Usage:
        from defibrain_sdk.config import config

        print(config.api.base_url)
        print(config.retry.max_retries)
    """
    api: ApiSettings = field(default_factory=ApiSettings)
    retry: RetrySettings = field(default_factory=RetrySettings)
    tx: TxSettings = field(default_factory=TxSettings)
    wallet: WalletSettings = field(default_factory=WalletSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def reload(cls) -> "Settings":
        """Reload settings from environment"""
        _load_env_file()
        return cls()


# Global settings instance
config = Settings()


def get_config() -> Settings:
    """Get global settings instance"""
    return config


def reload_config() -> Settings:
    """Reload and return new settings"""
    global config
    config = Settings.reload()
    return config


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded exponential backoff policy

    Delay before retry n (0-indexed) is
    min(initial_delay * backoff_factor ** n, max_delay) seconds.

    Attributes:
        max_retries: Retries after the first attempt (>= 0)
        initial_delay: First delay in seconds (> 0)
        max_delay: Delay cap in seconds (>= initial_delay)
        backoff_factor: Multiplier per attempt (>= 1)
        retryable_errors: Substrings marking an error message as transient
    """
    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    backoff_factor: float = 2.0
    retryable_errors: Tuple[str, ...] = DEFAULT_RETRYABLE_ERRORS

    def __post_init__(self):
        if self.max_retries < 0:
            raise ConfigurationError.invalid("max_retries", f"must be >= 0, got {self.max_retries}")
        if self.initial_delay <= 0:
            raise ConfigurationError.invalid("initial_delay", f"must be > 0, got {self.initial_delay}")
        if self.max_delay < self.initial_delay:
            raise ConfigurationError.invalid(
                "max_delay", f"must be >= initial_delay ({self.initial_delay}), got {self.max_delay}"
            )
        if self.backoff_factor < 1:
            raise ConfigurationError.invalid("backoff_factor", f"must be >= 1, got {self.backoff_factor}")
        # Accept any iterable of markers but store a tuple so the policy stays hashable
        object.__setattr__(self, "retryable_errors", tuple(self.retryable_errors))

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        """Delay in seconds after failed attempt `attempt` (0-indexed)"""
        return min(self.initial_delay * self.backoff_factor ** attempt, self.max_delay)

    def is_retryable(self, error: BaseException) -> bool:
        message = str(error)
        return any(marker in message for marker in self.retryable_errors)

    @classmethod
    def from_settings(cls, settings: Optional[RetrySettings] = None) -> "RetryPolicy":
        settings = settings or config.retry
        return cls(
            max_retries=settings.max_retries,
            initial_delay=settings.initial_delay,
            max_delay=settings.max_delay,
            backoff_factor=settings.backoff_factor,
        )


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable DefiBrain client configuration

    Validated on construction. Use reconfigure() to derive a new validated
    configuration; the original is never mutated.

    Attributes:
        api_key: Bearer credential for the backend
        base_url: Backend base URL
        chain_id: Target chain ID
        mode: Execution mode (direct or managed)
        router_address: Explicit router address (falls back to ROUTER_ADDRESSES)
        retry: Retry policy for read/compute endpoints
        timeout: HTTP timeout in seconds
    """
    api_key: str
    base_url: str = DEFAULT_API_URL
    chain_id: int = 1
    mode: Union[ExecutionMode, str] = ExecutionMode.DIRECT
    router_address: Optional[str] = None
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    timeout: float = 30.0

    def __post_init__(self):
        from .infra.validation import is_valid_address, is_valid_chain_id

        if not self.api_key:
            raise ConfigurationError.missing("api_key", "Set DEFIBRAIN_API_KEY or pass api_key.")
        if not self.base_url:
            raise ConfigurationError.missing("base_url")
        if not is_valid_chain_id(self.chain_id):
            raise ConfigurationError.invalid("chain_id", f"must be a positive integer, got {self.chain_id}")
        object.__setattr__(self, "mode", ExecutionMode.from_value(self.mode))
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

        if self.router_address is not None and not is_valid_address(self.router_address):
            raise ConfigurationError.invalid(
                "router_address", f"not a valid Ethereum address: {self.router_address}"
            )
        if self.mode == ExecutionMode.MANAGED and not self.resolved_router_address:
            raise ConfigurationError.router_required(self.chain_id)
        if self.timeout <= 0:
            raise ConfigurationError.invalid("timeout", f"must be > 0, got {self.timeout}")

    @property
    def resolved_router_address(self) -> Optional[str]:
        """Explicit router address, or the chain default"""
        return self.router_address or get_default_router_address(self.chain_id)

    @property
    def is_managed(self) -> bool:
        return self.mode == ExecutionMode.MANAGED

    def reconfigure(self, **changes) -> "ClientConfig":
        """Return a new validated configuration with the given fields replaced"""
        return replace(self, **changes)

    @classmethod
    def from_env(cls, settings: Optional[Settings] = None, **overrides) -> "ClientConfig":
        """
        Build a configuration from environment settings

        Args:
            settings: Settings to read (uses global config if None)
            **overrides: Field values taking precedence over the environment
        """
        settings = settings or config
        values = {
            "api_key": settings.api.api_key,
            "base_url": settings.api.base_url,
            "chain_id": settings.api.chain_id,
            "mode": settings.api.mode,
            "router_address": settings.api.router_address or None,
            "retry": RetryPolicy.from_settings(settings.retry),
            "timeout": settings.api.timeout,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def __repr__(self) -> str:
        # Never print the credential
        return (
            f"ClientConfig(base_url={self.base_url!r}, chain_id={self.chain_id}, "
            f"mode={self.mode.value!r}, router_address={self.resolved_router_address!r})"
        )


def setup_logging(
    log_config: Optional[LoggingSettings] = None,
    logger_name: str = "defibrain_sdk",
) -> logging.Logger:
    """
    Set up logging based on configuration.

    Creates handlers for file and/or console output with optional rotation.
    The log file directory is created automatically if it doesn't exist.

    Args:
        log_config: Logging configuration (uses global config if None)
        logger_name: Name of the logger to configure (default: defibrain_sdk)

    Returns:
        Configured logger instance

    Example:
        from defibrain_sdk.config import LoggingSettings, setup_logging
        logger = setup_logging(LoggingSettings(log_level="DEBUG", log_file="sdk.log"))
    """
    if log_config is None:
        log_config = config.logging

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_config.level)

    # Close handlers before removing them to flush buffers and release files
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(log_config.log_format)

    handlers: List[logging.Handler] = []

    if log_config.log_file:
        from logging.handlers import RotatingFileHandler

        log_path = Path(log_config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_config.log_file,
            maxBytes=log_config.max_bytes,
            backupCount=log_config.backup_count,
            encoding='utf-8',
        )
        file_handler.setLevel(log_config.level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if log_config.console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_config.level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    for handler in handlers:
        logger.addHandler(handler)

    # Child loggers inherit handlers from the package logger
    for name in [
        f"{logger_name}.infra",
        f"{logger_name}.modules",
        f"{logger_name}.protocols",
    ]:
        logging.getLogger(name).setLevel(log_config.level)

    if log_config.log_file:
        logger.info(f"Logging initialized: file={log_config.log_file}, level={log_config.log_level}")

    return logger


def enable_file_logging(
    log_file: str = "log/defibrain_sdk.log",
    level: str = "INFO",
    console: bool = True,
) -> logging.Logger:
    """
    Quick setup for file logging.

    Example:
        from defibrain_sdk.config import enable_file_logging
        logger = enable_file_logging(level="DEBUG", console=False)
    """
    log_config = LoggingSettings(
        log_file=log_file,
        log_level=level,
        console_output=console,
    )
    return setup_logging(log_config)
