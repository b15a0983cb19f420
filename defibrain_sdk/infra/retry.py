"""
Retry Logic Helper Module

Provides bounded exponential backoff for idempotent backend calls.
Includes structured logging with correlation IDs for request tracing.
"""

import asyncio
import logging
import uuid
import contextvars
from typing import Awaitable, Callable, Optional, TypeVar

from ..config import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Context variable for correlation ID (task-local under asyncio)
_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    'correlation_id', default=None
)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracing."""
    return uuid.uuid4().hex[:12]


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: Optional[str]) -> contextvars.Token:
    """Set the correlation ID in context. Returns token for reset."""
    return _correlation_id.set(correlation_id)


class CorrelationContext:
    """
    Context manager for correlation ID scoping.

    Usage:
        with CorrelationContext("optimize_yield") as cid:
            logger.info(f"[{cid}] Starting operation")
            result = await retry(call, policy, "optimize_yield")
    """

    def __init__(self, prefix: Optional[str] = None):
        """
        Initialize correlation context.

        Args:
            prefix: Optional prefix for the correlation ID (e.g., "swap", "yield")
        """
        self.correlation_id = generate_correlation_id()
        if prefix:
            self.correlation_id = f"{prefix}_{self.correlation_id}"
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = set_correlation_id(self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token is not None:
            _correlation_id.reset(self._token)


def _log_with_correlation(
    level: int,
    message: str,
    operation_name: str,
    attempt: Optional[int] = None,
    max_attempts: Optional[int] = None,
    **extra
):
    """
    Log message with correlation ID and structured context.

    Args:
        level: Logging level (logging.INFO, logging.WARNING, etc.)
        message: Log message
        operation_name: Name of the operation being executed
        attempt: Current attempt number (1-indexed)
        max_attempts: Total attempts allowed
        **extra: Additional context fields
    """
    cid = get_correlation_id()

    parts = []
    if cid:
        parts.append(f"[{cid}]")
    parts.append(f"[{operation_name}]")
    if attempt is not None and max_attempts is not None:
        parts.append(f"[{attempt}/{max_attempts}]")
    parts.append(message)

    extra_context = {
        "correlation_id": cid,
        "operation": operation_name,
        "attempt": attempt,
        "max_retries": max_attempts,
        **extra
    }

    logger.log(level, " ".join(parts), extra=extra_context)


async def retry(
    operation: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    operation_name: str = "operation",
) -> T:
    """
    Run an async operation with bounded exponential backoff.

    The operation is attempted up to policy.max_retries + 1 times. An error
    whose message contains none of policy.retryable_errors is re-raised at
    once. After the last attempt the last error itself is raised, unwrapped.

    Args:
        operation: Zero-argument coroutine function
        policy: Retry policy (defaults to RetryPolicy())
        operation_name: Name for logging purposes

    Returns:
        The operation's result

    Example:
        async def call():
            return await client.get(url)

        response = await retry(call, RetryPolicy(max_retries=2), "get_quote")
    """
    policy = policy or RetryPolicy()
    max_attempts = policy.max_attempts

    for attempt in range(max_attempts):
        try:
            result = await operation()
        except Exception as e:
            if not policy.is_retryable(e):
                _log_with_correlation(
                    logging.DEBUG,
                    f"Non-retryable error: {e}",
                    operation_name,
                    attempt + 1,
                    max_attempts,
                    error_type="fatal",
                )
                raise

            if attempt == max_attempts - 1:
                _log_with_correlation(
                    logging.ERROR,
                    f"Max retries ({policy.max_retries}) exceeded. Last error: {e}",
                    operation_name,
                    attempt + 1,
                    max_attempts,
                    error_type="exhausted",
                )
                raise

            delay = policy.delay_for(attempt)
            _log_with_correlation(
                logging.WARNING,
                f"Recoverable error: {e}; retrying in {delay:.2f}s",
                operation_name,
                attempt + 1,
                max_attempts,
                error_type="recoverable",
                delay=delay,
            )
            await asyncio.sleep(delay)
            continue

        if attempt > 0:
            _log_with_correlation(
                logging.INFO,
                f"Succeeded after {attempt + 1} attempts",
                operation_name,
                attempt + 1,
                max_attempts,
            )
        return result

    raise RuntimeError("retry loop exited without a result")
