"""
Contract ABIs for the DefiBrain router

Static JSON fragments for the router, permission manager, asset registry
and the example Aave adapter, plus helpers to derive function signatures
and selectors from them.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

from web3 import Web3

from ..errors import ConfigurationError

_ABI_DIR = Path(__file__).parent

Abi = List[Dict[str, Any]]


def load_abi(name: str) -> Abi:
    """Load a bundled ABI by contract name (e.g. "DeFiRouter")"""
    path = _ABI_DIR / f"{name}.json"
    if not path.exists():
        raise ConfigurationError.invalid("abi", f"Unknown contract ABI: {name}")
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


DEFI_ROUTER_ABI: Abi = load_abi("DeFiRouter")
PERMISSION_MANAGER_ABI: Abi = load_abi("PermissionManager")
ASSET_REGISTRY_ABI: Abi = load_abi("AssetRegistry")
AAVE_ADAPTER_ABI: Abi = load_abi("AaveAdapter")


def get_function_abi(abi: Abi, name: str) -> Dict[str, Any]:
    """Find a function entry by name"""
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == name:
            return entry
    raise ConfigurationError.invalid("abi", f"Function '{name}' not found in ABI")


def _canonical_type(param: Dict[str, Any]) -> str:
    type_ = param["type"]
    if type_.startswith("tuple"):
        inner = ",".join(_canonical_type(component) for component in param.get("components", []))
        return f"({inner}){type_[len('tuple'):]}"
    return type_


def input_types(abi: Abi, name: str) -> List[str]:
    """Canonical input types of a function, e.g. ["string", "string", "bytes"]"""
    return [_canonical_type(param) for param in get_function_abi(abi, name)["inputs"]]


def output_types(abi: Abi, name: str) -> List[str]:
    """Canonical output types of a function"""
    return [_canonical_type(param) for param in get_function_abi(abi, name).get("outputs", [])]


def function_signature(abi: Abi, name: str) -> str:
    """Canonical signature, e.g. "executeAction(string,string,bytes)" """
    return f"{name}({','.join(input_types(abi, name))})"


def function_selector(abi: Abi, name: str) -> bytes:
    """First four bytes of keccak256 of the canonical signature"""
    return bytes(Web3.keccak(text=function_signature(abi, name))[:4])


__all__ = [
    "DEFI_ROUTER_ABI",
    "PERMISSION_MANAGER_ABI",
    "ASSET_REGISTRY_ABI",
    "AAVE_ADAPTER_ABI",
    "load_abi",
    "get_function_abi",
    "input_types",
    "output_types",
    "function_signature",
    "function_selector",
]
