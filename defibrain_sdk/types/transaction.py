"""
Transaction value objects

UnsignedTransaction is inert until handed to a TransactionHelper.
TransactionReceipt is only produced once confirmation has been observed.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .common import drop_none, optional_str


def parse_quantity(value: Any) -> int:
    """
    Parse a JSON-RPC quantity (hex string, decimal string or int) to int
    """
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.lower().startswith("0x"):
        return int(text, 16) if len(text) > 2 else 0
    return int(text)


def to_quantity(value: Any) -> str:
    """
    Render an int, decimal string or hex string as a JSON-RPC hex quantity
    """
    return hex(parse_quantity(value))


@dataclass(frozen=True)
class UnsignedTransaction:
    """
    Unsigned transaction payload

    Attributes:
        to: Target contract address
        data: Hex-encoded call data
        value: Native value (wei) as decimal or hex string
        gas_limit: Optional gas limit
        gas_price: Optional legacy gas price
        max_fee_per_gas: Optional EIP-1559 max fee
        max_priority_fee_per_gas: Optional EIP-1559 tip
        nonce: Optional explicit nonce
    """
    to: str
    data: str
    value: Optional[str] = None
    gas_limit: Optional[str] = None
    gas_price: Optional[str] = None
    max_fee_per_gas: Optional[str] = None
    max_priority_fee_per_gas: Optional[str] = None
    nonce: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UnsignedTransaction":
        """Build from a backend payload (camelCase keys)"""
        nonce = data.get("nonce")
        return cls(
            to=str(data.get("to", "")),
            data=str(data.get("data", "0x")),
            value=optional_str(data.get("value")),
            gas_limit=optional_str(data.get("gasLimit", data.get("gas"))),
            gas_price=optional_str(data.get("gasPrice")),
            max_fee_per_gas=optional_str(data.get("maxFeePerGas")),
            max_priority_fee_per_gas=optional_str(data.get("maxPriorityFeePerGas")),
            nonce=parse_quantity(nonce) if nonce is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Backend-shaped dict (camelCase keys, unset fields omitted)"""
        return drop_none({
            "to": self.to,
            "data": self.data,
            "value": self.value,
            "gasLimit": self.gas_limit,
            "gasPrice": self.gas_price,
            "maxFeePerGas": self.max_fee_per_gas,
            "maxPriorityFeePerGas": self.max_priority_fee_per_gas,
            "nonce": self.nonce,
        })

    def call_only(self) -> "UnsignedTransaction":
        """Copy keeping only to/data/value"""
        return UnsignedTransaction(to=self.to, data=self.data, value=self.value)


@dataclass(frozen=True)
class TransactionReceipt:
    """
    Confirmed transaction receipt

    Attributes:
        transaction_hash: Transaction hash
        block_number: Block the transaction was mined in
        block_hash: Hash of that block
        gas_used: Gas used (hex quantity as reported by the node)
        status: 1 for success, 0 for revert
        logs: Raw log entries
    """
    transaction_hash: str
    block_number: int
    block_hash: str
    gas_used: str
    status: int
    logs: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        return self.status == 1

    @classmethod
    def from_rpc(cls, receipt: Mapping[str, Any]) -> "TransactionReceipt":
        return cls(
            transaction_hash=str(receipt.get("transactionHash", "")),
            block_number=parse_quantity(receipt.get("blockNumber")),
            block_hash=str(receipt.get("blockHash", "")),
            gas_used=str(receipt.get("gasUsed", "0x0")),
            status=parse_quantity(receipt.get("status")),
            logs=list(receipt.get("logs") or []),
        )

    def __str__(self) -> str:
        state = "SUCCESS" if self.is_success else "REVERTED"
        return f"TransactionReceipt({state}, {self.transaction_hash[:18]}..., block={self.block_number})"
