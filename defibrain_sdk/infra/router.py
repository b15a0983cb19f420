"""
Managed-mode call encoding

In managed mode a transaction does not target the protocol directly: it
calls the router's executeAction(protocol, action, params) entry point,
and the router dispatches to the registered adapter. Action parameters
travel as opaque bytes: compact JSON, UTF-8 encoded, wrapped once as an
ABI `bytes` value.
"""

import json
import logging
from typing import Any, Dict, Mapping, Tuple

from eth_abi import decode, encode

from ..abis import DEFI_ROUTER_ABI, function_selector, input_types, output_types
from ..errors import EncodingError
from ..types import UnsignedTransaction
from .validation import validate_address

logger = logging.getLogger(__name__)

EXECUTE_ACTION = "executeAction"


def _hex(data: bytes) -> str:
    return "0x" + data.hex()


def _unhex(data: str) -> bytes:
    text = data[2:] if data.lower().startswith("0x") else data
    return bytes.fromhex(text)


def encode_action_params(params: Mapping[str, Any]) -> bytes:
    """
    Encode action parameters as ABI `bytes`

    Raises:
        EncodingError: The parameters are not JSON-serialisable
    """
    try:
        payload = json.dumps(dict(params), separators=(",", ":"), allow_nan=False)
        return encode(["bytes"], [payload.encode("utf-8")])
    except (TypeError, ValueError, OverflowError) as e:
        raise EncodingError.params(e) from e


def decode_action_params(data: bytes) -> Dict[str, Any]:
    """Inverse of encode_action_params"""
    (payload,) = decode(["bytes"], data)
    return json.loads(payload.decode("utf-8"))


def encode_execute_action(protocol: str, action: str, params: Mapping[str, Any]) -> str:
    """
    ABI-encode a router executeAction call

    Returns:
        Hex call data (selector + arguments)
    """
    params_bytes = encode_action_params(params)
    arguments = encode(input_types(DEFI_ROUTER_ABI, EXECUTE_ACTION), [protocol, action, params_bytes])
    return _hex(function_selector(DEFI_ROUTER_ABI, EXECUTE_ACTION) + arguments)


def decode_execute_action(data: str) -> Tuple[str, str, Dict[str, Any]]:
    """
    Decode router executeAction call data

    Returns:
        (protocol, action, params)

    Raises:
        EncodingError: The data does not start with the executeAction selector
    """
    raw = _unhex(data)
    selector = function_selector(DEFI_ROUTER_ABI, EXECUTE_ACTION)
    if raw[:4] != selector:
        raise EncodingError(
            f"Call data does not target {EXECUTE_ACTION}: selector {_hex(raw[:4])}, expected {_hex(selector)}"
        )
    protocol, action, params_bytes = decode(input_types(DEFI_ROUTER_ABI, EXECUTE_ACTION), raw[4:])
    return protocol, action, decode_action_params(params_bytes)


def decode_execute_result(data: str) -> Tuple[bool, bytes]:
    """
    Decode the (success, result) return value of executeAction
    """
    success, result = decode(output_types(DEFI_ROUTER_ABI, EXECUTE_ACTION), _unhex(data))
    return bool(success), bytes(result)


def build_managed_transaction(
    router_address: str,
    protocol: str,
    action: str,
    params: Mapping[str, Any],
) -> UnsignedTransaction:
    """
    Build an unsigned router call for a protocol action

    Args:
        router_address: Router contract address
        protocol: Protocol identifier registered with the router
        action: Action name understood by the protocol adapter
        params: Action parameters

    Returns:
        UnsignedTransaction targeting the router with zero value
    """
    validate_address(router_address, "Router address")
    data = encode_execute_action(protocol, action, params)
    logger.debug(f"Built managed transaction: router={router_address} protocol={protocol} action={action}")
    return UnsignedTransaction(to=router_address, data=data, value="0")
