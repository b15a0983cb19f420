"""
Common type definitions
"""

from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Type, TypeVar, Union

from ..errors import ConfigurationError

E = TypeVar("E", bound=Enum)


class ExecutionMode(str, Enum):
    """How returned transactions reach the target protocol"""
    DIRECT = "direct"      # straight to the protocol contract
    MANAGED = "managed"    # through the on-chain router contract

    @classmethod
    def from_value(cls, value: Union[str, "ExecutionMode"]) -> "ExecutionMode":
        """Convert string to ExecutionMode (case-insensitive)"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ConfigurationError.invalid(
                "mode", f"Unknown execution mode: {value}. Supported: direct, managed"
            )


class Strategy(str, Enum):
    """Yield optimization strategy"""
    MAX_YIELD = "max_yield"
    MIN_RISK = "min_risk"
    BALANCED = "balanced"
    LOW_GAS = "low_gas"


class RiskLevel(str, Enum):
    """Risk level reported or requested for a yield position"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ActionStatus(str, Enum):
    """Status of an executed action or batch"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class HealthStatus(str, Enum):
    """Backend health status"""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    DOWN = "down"


def coerce_enum(enum_cls: Type[E], value: Any) -> Union[E, Any]:
    """
    Map a backend value onto an enum member.

    Unknown values are returned unchanged so a newer backend cannot break parsing.
    """
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return value


def enum_value(value: Any) -> Any:
    """Plain JSON value for an enum member (or the value itself)"""
    if isinstance(value, Enum):
        return value.value
    return value


def drop_none(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy of a mapping without None values"""
    return {key: value for key, value in data.items() if value is not None}


def split_known(
    data: Mapping[str, Any],
    known: Iterable[str],
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Split a backend payload into modelled keys and the extension slot

    Returns:
        (known_fields, extra_fields)
    """
    known_set = set(known)
    modelled = {key: value for key, value in data.items() if key in known_set}
    extra = {key: value for key, value in data.items() if key not in known_set}
    return modelled, extra


def optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)
