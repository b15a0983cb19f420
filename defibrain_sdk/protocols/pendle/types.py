"""
Pendle token info types
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from ...types import ExecuteActionResponse


def _parse_maturity(value: Any) -> Optional[datetime]:
    """Maturity as ISO-8601 text or a unix timestamp (seconds)"""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    text = str(value)
    if text.isdigit():
        return datetime.fromtimestamp(int(text), tz=timezone.utc)
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


@dataclass(frozen=True)
class PendlePTInfo:
    """Principal Token information"""
    address: str
    underlying_asset: str
    maturity_date: Optional[datetime]
    yield_token: str
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_matured(self) -> bool:
        return self.maturity_date is not None and self.maturity_date <= datetime.now(timezone.utc)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PendlePTInfo":
        return cls(
            address=str(data.get("address", "")),
            underlying_asset=str(data.get("underlyingAsset", "")),
            maturity_date=_parse_maturity(data.get("maturityDate")),
            yield_token=str(data.get("yieldToken", "")),
            extra={k: v for k, v in data.items()
                   if k not in ("address", "underlyingAsset", "maturityDate", "yieldToken")},
        )

    @classmethod
    def from_response(cls, response: ExecuteActionResponse) -> "PendlePTInfo":
        return cls.from_dict(response.extra)


@dataclass(frozen=True)
class PendleYTInfo:
    """Yield Token information"""
    address: str
    underlying_asset: str
    maturity_date: Optional[datetime]
    principal_token: str
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_matured(self) -> bool:
        return self.maturity_date is not None and self.maturity_date <= datetime.now(timezone.utc)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PendleYTInfo":
        return cls(
            address=str(data.get("address", "")),
            underlying_asset=str(data.get("underlyingAsset", "")),
            maturity_date=_parse_maturity(data.get("maturityDate")),
            principal_token=str(data.get("principalToken", "")),
            extra={k: v for k, v in data.items()
                   if k not in ("address", "underlyingAsset", "maturityDate", "principalToken")},
        )

    @classmethod
    def from_response(cls, response: ExecuteActionResponse) -> "PendleYTInfo":
        return cls.from_dict(response.extra)
