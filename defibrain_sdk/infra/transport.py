"""
Wallet / JSON-RPC transports

A wallet provider is anything with an async request(method, params)
coroutine, optionally with on/remove_listener for wallet events. Errors
are raised as ProviderError carrying the JSON-RPC error code.

Provides:
- WalletProvider: the transport contract
- RpcProvider: JSON-RPC over web3.py's async HTTP provider
- LocalAccountProvider: signs eth_sendTransaction locally with eth-account
- discover_provider: builds a transport from environment settings
"""

from __future__ import annotations

import logging
import os
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Protocol, runtime_checkable

import aiohttp
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, Web3

from ..errors import ConfigurationError, ProviderError, WalletError
from ..types.transaction import parse_quantity

logger = logging.getLogger(__name__)

# EIP-1193 / EIP-3085 error codes
USER_REJECTED_REQUEST = 4001
UNRECOGNIZED_CHAIN = 4902

_QUANTITY_FIELDS = (
    "value", "gas", "gasPrice", "maxFeePerGas", "maxPriorityFeePerGas", "nonce", "chainId",
)


@runtime_checkable
class WalletProvider(Protocol):
    """Request-style wallet transport"""

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        ...


class RpcProvider:
    """
    JSON-RPC transport backed by web3.py's AsyncHTTPProvider

    Usage:
        provider = RpcProvider("https://sepolia.example/rpc")
        block = await provider.request("eth_blockNumber")
    """

    name = "JSON-RPC"

    def __init__(self, url: str, timeout: float = 30.0):
        if not url:
            raise ConfigurationError.missing("rpc_url")
        self._url = url
        self._provider = AsyncHTTPProvider(
            url, request_kwargs={"timeout": aiohttp.ClientTimeout(total=timeout)}
        )

    @property
    def url(self) -> str:
        return self._url

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        try:
            response = await self._provider.make_request(method, params or [])
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(f"RPC request {method} failed: {e}", original_error=e) from e

        if response.get("error"):
            raise ProviderError.from_rpc_error(response["error"])
        return response.get("result")

    def __repr__(self) -> str:
        return f"RpcProvider(url={self._url!r})"


class LocalAccountProvider:
    """
    Wallet transport signing with a local private key

    Plays the role of an injected wallet: account queries return the local
    account, eth_sendTransaction is filled in (nonce, chain ID, gas, gas
    price) through the upstream transport, signed locally and broadcast as
    a raw transaction. Everything else is forwarded upstream.

    Usage:
        provider = LocalAccountProvider.from_env(RpcProvider(rpc_url))
        tx_hash = await provider.request("eth_sendTransaction", [tx])
    """

    name = "LocalAccount"

    def __init__(self, upstream: WalletProvider, account: LocalAccount):
        self._upstream = upstream
        self._account = account
        self._listeners: Dict[str, List[Callable[..., Any]]] = defaultdict(list)

    @property
    def address(self) -> str:
        """Wallet address (checksummed)"""
        return self._account.address

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        params = params or []

        if method in ("eth_accounts", "eth_requestAccounts"):
            return [self._account.address]
        if method == "eth_sendTransaction":
            if not params:
                raise ProviderError("eth_sendTransaction requires a transaction object", code=-32602)
            return await self._send_transaction(dict(params[0]))
        if method == "wallet_switchEthereumChain":
            return await self._switch_chain(params)

        return await self._upstream.request(method, params)

    async def _send_transaction(self, tx: Dict[str, Any]) -> str:
        tx.pop("from", None)

        if "nonce" not in tx:
            tx["nonce"] = await self._upstream.request(
                "eth_getTransactionCount", [self._account.address, "pending"]
            )
        if "chainId" not in tx:
            tx["chainId"] = await self._upstream.request("eth_chainId")
        if "gas" not in tx:
            estimate_params = {key: tx[key] for key in ("to", "data", "value") if key in tx}
            estimate_params["from"] = self._account.address
            tx["gas"] = await self._upstream.request("eth_estimateGas", [estimate_params])
        if "gasPrice" not in tx and "maxFeePerGas" not in tx:
            tx["gasPrice"] = await self._upstream.request("eth_gasPrice")

        for key in _QUANTITY_FIELDS:
            if key in tx:
                tx[key] = parse_quantity(tx[key])
        if tx.get("to"):
            tx["to"] = Web3.to_checksum_address(tx["to"])

        signed = self._account.sign_transaction(tx)
        logger.debug(f"Signed transaction nonce={tx['nonce']} chain={tx['chainId']} to={tx.get('to')}")
        return await self._upstream.request("eth_sendRawTransaction", [Web3.to_hex(signed.raw_transaction)])

    async def _switch_chain(self, params: List[Any]) -> None:
        requested = parse_quantity(params[0]["chainId"]) if params else None
        current = parse_quantity(await self._upstream.request("eth_chainId"))
        if requested != current:
            raise ProviderError(
                f"Unrecognized chain ID {requested}. The local account is bound to chain {current}.",
                code=UNRECOGNIZED_CHAIN,
            )
        return None

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        self._listeners[event].append(handler)

    def remove_listener(self, event: str, handler: Callable[..., Any]) -> None:
        handlers = self._listeners.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, *args: Any) -> None:
        """Deliver an event to subscribed handlers (accountsChanged, chainChanged)"""
        for handler in list(self._listeners.get(event, [])):
            handler(*args)

    @classmethod
    def from_private_key(cls, upstream: WalletProvider, private_key: str) -> "LocalAccountProvider":
        """
        Create provider from private key

        Args:
            upstream: Transport used for reads and broadcasting
            private_key: Hex-encoded private key (with or without 0x prefix)
        """
        if not private_key.startswith("0x"):
            private_key = "0x" + private_key
        return cls(upstream, Account.from_key(private_key))

    @classmethod
    def from_env(cls, upstream: WalletProvider, env_var: str = "EVM_PRIVATE_KEY") -> "LocalAccountProvider":
        """
        Create provider from environment variable

        Raises:
            WalletError: If environment variable is not set
        """
        private_key = os.getenv(env_var, "")
        if not private_key:
            raise WalletError(f"No private key configured. Set {env_var}.")
        return cls.from_private_key(upstream, private_key)

    @classmethod
    def from_keystore(
        cls,
        upstream: WalletProvider,
        keystore_path: str,
        password: str,
    ) -> "LocalAccountProvider":
        """Create provider from encrypted keystore file"""
        with open(keystore_path, "r") as f:
            keystore = f.read()

        private_key = Account.decrypt(keystore, password)
        return cls(upstream, Account.from_key(private_key))

    def __repr__(self) -> str:
        return f"LocalAccountProvider(address={self.address})"


def discover_provider(
    rpc_url: Optional[str] = None,
    private_key: Optional[str] = None,
) -> Optional[WalletProvider]:
    """
    Discover a wallet transport

    Priority:
    1. Explicit arguments
    2. DEFIBRAIN_RPC_URL / EVM_PRIVATE_KEY settings

    Returns:
        LocalAccountProvider when a key is available, RpcProvider when only
        an RPC URL is, None when nothing is configured
    """
    from ..config import config

    rpc_url = rpc_url or config.wallet.rpc_url
    private_key = private_key or config.wallet.private_key

    if not rpc_url:
        logger.debug("No wallet transport configured (DEFIBRAIN_RPC_URL is empty)")
        return None

    upstream = RpcProvider(rpc_url, timeout=config.wallet.rpc_timeout)
    if private_key:
        return LocalAccountProvider.from_private_key(upstream, private_key)
    return upstream
