"""
Request and response types for the DefiBrain HTTP API

Responses keep a fixed schema; any field the backend adds beyond it lands
in the `extra` mapping instead of being dropped.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from .common import (
    ActionStatus,
    HealthStatus,
    RiskLevel,
    Strategy,
    coerce_enum,
    drop_none,
    enum_value,
    split_known,
)
from .transaction import UnsignedTransaction


def _transaction(data: Mapping[str, Any]) -> Optional[UnsignedTransaction]:
    tx = data.get("transaction")
    if not tx:
        return None
    if isinstance(tx, UnsignedTransaction):
        return tx
    return UnsignedTransaction.from_dict(tx)


# =========================================================================
# Requests
# =========================================================================

@dataclass(frozen=True)
class OptimizeYieldRequest:
    """
    Yield optimization request

    Attributes:
        asset: Asset token address
        amount: Amount in base units (positive integer string)
        strategy: Optional optimization strategy
        min_apr: Optional minimum APR (percent)
        max_risk: Optional risk ceiling
    """
    asset: str
    amount: str
    strategy: Optional[Union[Strategy, str]] = None
    min_apr: Optional[float] = None
    max_risk: Optional[Union[RiskLevel, str]] = None

    def to_payload(self) -> Dict[str, Any]:
        return drop_none({
            "asset": self.asset,
            "amount": self.amount,
            "strategy": enum_value(self.strategy),
            "minAPR": self.min_apr,
            "maxRisk": enum_value(self.max_risk),
        })


@dataclass(frozen=True)
class FindSwapRequest:
    """
    Optimal swap lookup request

    Attributes:
        token_in: Input token address
        token_out: Output token address
        amount: Input amount in base units
        slippage: Slippage tolerance in percent (0.5 = 0.5%)
        prefer_protocol: Optional protocol the backend should favour
        one_inch_api_key: Optional 1inch key; without it 1inch is skipped
    """
    token_in: str
    token_out: str
    amount: str
    slippage: float = 0.5
    prefer_protocol: Optional[str] = None
    one_inch_api_key: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return drop_none({
            "tokenIn": self.token_in,
            "tokenOut": self.token_out,
            "amount": self.amount,
            "slippage": self.slippage,
            "preferProtocol": self.prefer_protocol,
            "oneInchApiKey": self.one_inch_api_key,
        })


@dataclass(frozen=True)
class ExecuteActionRequest:
    """Generic protocol action"""
    protocol: str
    action: str
    params: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {"protocol": self.protocol, "action": self.action, "params": self.params}


@dataclass(frozen=True)
class BatchAction:
    """One (protocol, action, params) entry of a batch"""
    protocol: str
    action: str
    params: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {"protocol": self.protocol, "action": self.action, "params": self.params}


@dataclass(frozen=True)
class ExecuteBatchRequest:
    """Ordered list of actions executed in a single router transaction"""
    actions: List[BatchAction] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {"actions": [action.to_payload() for action in self.actions]}


# =========================================================================
# Responses
# =========================================================================

@dataclass(frozen=True)
class OptimizeYieldResponse:
    """
    Yield optimization result

    Attributes:
        protocol: Selected protocol name
        action: Action to perform on that protocol
        params: Opaque action parameters
        estimated_apr: Estimated APR (percent)
        estimated_gas: Estimated gas (string)
        risk_level: Risk level of the position
        confidence: Backend confidence score in [0, 1]
        transaction: Unsigned transaction, if the backend built one
        tx_hash: Set by helpers after signing and sending
        extra: Fields the backend returned beyond this schema
    """
    protocol: str
    action: str
    params: Dict[str, Any]
    estimated_apr: float
    estimated_gas: str
    risk_level: Union[RiskLevel, str]
    confidence: float
    transaction: Optional[UnsignedTransaction] = None
    tx_hash: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _FIELDS = (
        "protocol", "action", "params", "estimatedAPR", "estimatedGas",
        "riskLevel", "confidence", "transaction",
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OptimizeYieldResponse":
        known, extra = split_known(data, cls._FIELDS)
        return cls(
            protocol=str(known.get("protocol", "")),
            action=str(known.get("action", "")),
            params=dict(known.get("params") or {}),
            estimated_apr=float(known.get("estimatedAPR") or 0.0),
            estimated_gas=str(known.get("estimatedGas", "0")),
            risk_level=coerce_enum(RiskLevel, known.get("riskLevel")),
            confidence=float(known.get("confidence") or 0.0),
            transaction=_transaction(known),
            extra=extra,
        )


@dataclass(frozen=True)
class SwapRoute:
    """Route chosen for a swap"""
    from_token: str
    to_token: str
    amount: str
    estimated_amount: str
    protocols: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SwapRoute":
        return cls(
            from_token=str(data.get("fromToken", "")),
            to_token=str(data.get("toToken", "")),
            amount=str(data.get("amount", "0")),
            estimated_amount=str(data.get("estimatedAmount", "0")),
            protocols=list(data.get("protocols") or []),
        )


@dataclass(frozen=True)
class FindSwapResponse:
    """
    Optimal swap result

    Attributes:
        protocol: Protocol selected by the backend
        route: Route details
        estimated_gas: Estimated gas (string)
        transaction: Unsigned swap transaction, if provided
        tx_hash: Set by helpers after signing and sending
        extra: Fields beyond this schema
    """
    protocol: str
    route: SwapRoute
    estimated_gas: str
    transaction: Optional[UnsignedTransaction] = None
    tx_hash: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _FIELDS = ("protocol", "route", "estimatedGas", "transaction")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FindSwapResponse":
        known, extra = split_known(data, cls._FIELDS)
        return cls(
            protocol=str(known.get("protocol", "")),
            route=SwapRoute.from_dict(known.get("route") or {}),
            estimated_gas=str(known.get("estimatedGas", "0")),
            transaction=_transaction(known),
            extra=extra,
        )


@dataclass(frozen=True)
class ExecuteActionResponse:
    """
    Result of a generic protocol action

    Attributes:
        protocol: Protocol the action ran on
        action: Action name
        status: pending / confirmed / failed
        transaction_hash: Hash if the backend already executed on-chain
        transaction: Unsigned transaction for the caller to sign
        tx_hash: Set by helpers after signing and sending
        extra: Fields beyond this schema
    """
    protocol: str
    action: str
    status: Optional[Union[ActionStatus, str]] = None
    transaction_hash: Optional[str] = None
    transaction: Optional[UnsignedTransaction] = None
    tx_hash: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _FIELDS = ("protocol", "action", "status", "transactionHash", "transaction")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExecuteActionResponse":
        known, extra = split_known(data, cls._FIELDS)
        return cls(
            protocol=str(known.get("protocol", "")),
            action=str(known.get("action", "")),
            status=coerce_enum(ActionStatus, known.get("status")),
            transaction_hash=known.get("transactionHash"),
            transaction=_transaction(known),
            extra=extra,
        )


@dataclass(frozen=True)
class BatchItemResult:
    """Per-action outcome inside a batch"""
    protocol: str
    action: str
    success: bool
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BatchItemResult":
        known, extra = split_known(data, ("protocol", "action", "success"))
        return cls(
            protocol=str(known.get("protocol", "")),
            action=str(known.get("action", "")),
            success=bool(known.get("success", False)),
            extra=extra,
        )


@dataclass(frozen=True)
class ExecuteBatchResponse:
    """
    Batch execution result

    Either a single aggregated transaction (to be signed) or a per-action
    result list, depending on what the backend produced.
    """
    status: Union[ActionStatus, str]
    transaction: Optional[UnsignedTransaction] = None
    transaction_hash: Optional[str] = None
    results: List[BatchItemResult] = field(default_factory=list)
    tx_hash: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _FIELDS = ("status", "transaction", "transactionHash", "results")

    @property
    def all_succeeded(self) -> bool:
        return all(item.success for item in self.results)

    @property
    def failed_actions(self) -> List[BatchItemResult]:
        return [item for item in self.results if not item.success]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExecuteBatchResponse":
        known, extra = split_known(data, cls._FIELDS)
        return cls(
            status=coerce_enum(ActionStatus, known.get("status", "pending")),
            transaction=_transaction(known),
            transaction_hash=known.get("transactionHash"),
            results=[BatchItemResult.from_dict(item) for item in known.get("results") or []],
            extra=extra,
        )


@dataclass(frozen=True)
class HealthCheckResponse:
    """Backend health status"""
    status: Union[HealthStatus, str]
    version: str
    protocols: List[str] = field(default_factory=list)
    uptime: float = 0.0
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HealthCheckResponse":
        known, extra = split_known(data, ("status", "version", "protocols", "uptime"))
        return cls(
            status=coerce_enum(HealthStatus, known.get("status")),
            version=str(known.get("version", "")),
            protocols=list(known.get("protocols") or []),
            uptime=float(known.get("uptime") or 0.0),
            extra=extra,
        )


@dataclass(frozen=True)
class UsageStats:
    """API usage statistics for the current key"""
    calls_today: int
    calls_this_month: int
    limit: int
    reset_date: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UsageStats":
        # Older backends report requestsToday / requestsThisMonth
        stats = data.get("stats") or {}
        return cls(
            calls_today=int(stats.get("callsToday") or stats.get("requestsToday") or 0),
            calls_this_month=int(stats.get("callsThisMonth") or stats.get("requestsThisMonth") or 0),
            limit=int(stats.get("limit") or 100),
            reset_date=str(stats.get("resetDate") or datetime.now(timezone.utc).isoformat()),
        )
