"""
Input validation and unit conversion

Pure functions; no network access. Boolean validators return False for
anything malformed, the validate_* variants raise ValidationError naming
the field and the offending value.
"""

import re
from typing import Any

from ..errors import ValidationError

_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_TX_HASH_RE = re.compile(r"^0x[a-fA-F0-9]{64}$")
_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")
_DIGITS_RE = re.compile(r"^[0-9]+$")


def is_valid_address(address: Any) -> bool:
    """Check for `0x` followed by exactly 40 hex characters"""
    return isinstance(address, str) and _ADDRESS_RE.fullmatch(address) is not None


def is_valid_amount(amount: Any) -> bool:
    """
    Check for a base-unit amount: an integer string strictly greater than zero

    Decimal points, signs below zero and non-numeric text are rejected.
    """
    if not isinstance(amount, str):
        return False
    text = amount.strip()
    if not _INTEGER_RE.fullmatch(text):
        return False
    return int(text) > 0


def is_valid_chain_id(chain_id: Any) -> bool:
    """Check for a positive integer (bool is not accepted)"""
    return isinstance(chain_id, int) and not isinstance(chain_id, bool) and chain_id > 0


def is_valid_tx_hash(tx_hash: Any) -> bool:
    """Check for `0x` followed by exactly 64 hex characters"""
    return isinstance(tx_hash, str) and _TX_HASH_RE.fullmatch(tx_hash) is not None


def format_amount(amount: str, decimals: int = 18) -> str:
    """
    Format a base-unit amount as a human-readable decimal string

    Trailing zeros of the fraction are stripped; the decimal point is
    omitted when the fraction is zero.

    Examples:
        format_amount("1005000000000000000", 18) == "1.005"
        format_amount("1000000000000000000", 18) == "1"

    Returns the input unchanged when it is not an integer string.
    """
    text = str(amount).strip()
    if not _INTEGER_RE.fullmatch(text):
        return amount
    raw = int(text)

    sign = "-" if raw < 0 else ""
    whole, remainder = divmod(abs(raw), 10 ** decimals)
    if remainder == 0:
        return f"{sign}{whole}"

    fraction = str(remainder).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{fraction}"


def parse_amount(amount: str, decimals: int = 18) -> str:
    """
    Parse a human-readable decimal string into base units

    The fraction is right-padded (or truncated) to exactly `decimals` digits.

    Examples:
        parse_amount("1.5", 18) == "1500000000000000000"

    Raises:
        ValidationError: Empty input, missing integer part, or non-numeric text
    """
    if amount is None or not str(amount).strip():
        raise ValidationError.amount_format(amount)

    text = str(amount).strip()
    whole, _, fraction = text.partition(".")
    if not whole:
        raise ValidationError.amount_format(amount)
    if not _INTEGER_RE.fullmatch(whole) or (fraction and not _DIGITS_RE.fullmatch(fraction)):
        raise ValidationError.amount_format(amount)

    padded = fraction.ljust(decimals, "0")[:decimals] if decimals > 0 else ""
    negative = whole.startswith("-")
    magnitude = abs(int(whole)) * 10 ** decimals + int(padded or "0")
    return str(-magnitude if negative else magnitude)


def validate_address(address: Any, name: str = "Address") -> None:
    if not is_valid_address(address):
        raise ValidationError.invalid_address(name, address)


def validate_amount(amount: Any, name: str = "Amount") -> None:
    if not is_valid_amount(amount):
        raise ValidationError.invalid_amount(name, amount)


def validate_chain_id(chain_id: Any, name: str = "Chain ID") -> None:
    if not is_valid_chain_id(chain_id):
        raise ValidationError.invalid_chain_id(name, chain_id)


def validate_tx_hash(tx_hash: Any, name: str = "Transaction hash") -> None:
    if not is_valid_tx_hash(tx_hash):
        raise ValidationError.invalid_tx_hash(name, tx_hash)
