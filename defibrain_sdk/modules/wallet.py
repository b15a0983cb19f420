"""
Wallet Module

Provides wallet connection, balance queries, network switching and
account/network change subscriptions on top of a wallet transport.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from eth_abi import decode, encode

from ..abis import function_selector, input_types, output_types
from ..errors import ProviderError, WalletError
from ..infra.transport import UNRECOGNIZED_CHAIN, WalletProvider, discover_provider
from ..infra.validation import validate_address
from ..types import parse_quantity

logger = logging.getLogger(__name__)

ERC20_BALANCE_OF_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "type": "function",
    }
]

BALANCE_OF_SELECTOR = "0x" + function_selector(ERC20_BALANCE_OF_ABI, "balanceOf").hex()


@dataclass(frozen=True)
class WalletInfo:
    """Connected wallet information"""
    address: str
    chain_id: int
    is_connected: bool
    provider: str


class Subscription:
    """
    Handle for a wallet event subscription

    Calling the handle (or leaving its `with` block) removes the listener.
    Unsubscribing twice, or on a transport without remove_listener, does
    nothing.

    Usage:
        with wallet.on_network_change(print):
            ...
    """

    def __init__(
        self,
        provider: Optional[WalletProvider] = None,
        event: Optional[str] = None,
        handler: Optional[Callable[..., Any]] = None,
    ):
        self._provider = provider
        self._event = event
        self._handler = handler
        self._active = provider is not None

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        remove_listener = getattr(self._provider, "remove_listener", None)
        if remove_listener is not None:
            remove_listener(self._event, self._handler)

    __call__ = unsubscribe

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.unsubscribe()


def _provider_name(provider: WalletProvider) -> str:
    return getattr(provider, "name", None) or "Injected"


class WalletHelper:
    """
    Wallet connection and balance helper

    Usage:
        wallet = WalletHelper()                   # discovers from environment
        info = await wallet.connect()
        balance = await wallet.get_token_balance(USDC)
    """

    def __init__(self, provider: Optional[WalletProvider] = None):
        """
        Initialize wallet helper

        Args:
            provider: Wallet transport (discovered from DEFIBRAIN_RPC_URL /
                EVM_PRIVATE_KEY on connect if None)
        """
        self._provider = provider
        self._chain_id = 1

    @property
    def provider(self) -> Optional[WalletProvider]:
        return self._provider

    @property
    def chain_id(self) -> int:
        return self._chain_id

    def _resolve_provider(self) -> Optional[WalletProvider]:
        if self._provider is None:
            self._provider = discover_provider()
        return self._provider

    def _require_provider(self) -> WalletProvider:
        if self._provider is None:
            raise WalletError.not_connected()
        return self._provider

    async def _wallet_info(self, provider: WalletProvider, accounts: List[str]) -> WalletInfo:
        self._chain_id = parse_quantity(await provider.request("eth_chainId"))
        return WalletInfo(
            address=accounts[0],
            chain_id=self._chain_id,
            is_connected=True,
            provider=_provider_name(provider),
        )

    async def connect(self) -> WalletInfo:
        """
        Request account access

        Raises:
            WalletError: If no transport is available, the wallet is locked,
                or the transport fails
        """
        provider = self._resolve_provider()
        if provider is None:
            raise WalletError.operation_failed("Wallet connection failed", WalletError.not_found())

        try:
            accounts = await provider.request("eth_requestAccounts")
            if not accounts:
                raise WalletError.locked()
            info = await self._wallet_info(provider, accounts)
        except Exception as e:
            raise WalletError.operation_failed("Wallet connection failed", e) from e

        logger.info(f"Wallet connected: {info.address} on chain {info.chain_id} ({info.provider})")
        return info

    async def get_wallet_info(self) -> Optional[WalletInfo]:
        """Wallet info without prompting; None if no transport or no authorized account"""
        provider = self._resolve_provider()
        if provider is None:
            return None

        try:
            accounts = await provider.request("eth_accounts")
            if not accounts:
                return None
            return await self._wallet_info(provider, accounts)
        except ProviderError as e:
            logger.debug(f"Wallet info unavailable: {e}")
            return None

    async def _target_address(self, address: Optional[str]) -> str:
        if address:
            return address
        info = await self.get_wallet_info()
        if info is None:
            raise WalletError("No address provided and wallet not connected")
        return info.address

    async def get_balance(self, address: Optional[str] = None) -> int:
        """
        Native balance in wei

        Args:
            address: Account to query (default: connected account)

        Raises:
            ValidationError: If address is malformed
            WalletError: If not connected or the query fails
        """
        if address is not None:
            validate_address(address, "Address")
        provider = self._require_provider()
        try:
            target = await self._target_address(address)
            balance = await provider.request("eth_getBalance", [target, "latest"])
        except Exception as e:
            raise WalletError.operation_failed("Failed to get balance", e) from e
        return parse_quantity(balance)

    async def get_token_balance(self, token_address: str, address: Optional[str] = None) -> int:
        """
        ERC20 balance in base units via balanceOf()

        Args:
            token_address: Token contract
            address: Holder (default: connected account)

        Raises:
            ValidationError: If token_address or address is malformed
            WalletError: If not connected or the call fails
        """
        validate_address(token_address, "Token address")
        if address is not None:
            validate_address(address, "Address")
        provider = self._require_provider()
        try:
            target = await self._target_address(address)
            args = encode(input_types(ERC20_BALANCE_OF_ABI, "balanceOf"), [target.lower()])
            data = BALANCE_OF_SELECTOR + args.hex()
            result = await provider.request("eth_call", [{"to": token_address, "data": data}, "latest"])
            (balance,) = decode(output_types(ERC20_BALANCE_OF_ABI, "balanceOf"), bytes.fromhex(result[2:]))
        except Exception as e:
            raise WalletError.operation_failed("Failed to get token balance", e) from e
        return balance

    async def switch_network(self, chain_id: int) -> None:
        """
        Ask the wallet to switch chain

        Raises:
            WalletError: chain_not_added if the wallet does not know the chain,
                otherwise a generic switch failure
        """
        provider = self._require_provider()
        try:
            await provider.request("wallet_switchEthereumChain", [{"chainId": hex(chain_id)}])
        except ProviderError as e:
            if e.code == UNRECOGNIZED_CHAIN:
                raise WalletError.chain_not_added(chain_id, e) from e
            raise WalletError.operation_failed("Failed to switch network", e) from e
        except Exception as e:
            raise WalletError.operation_failed("Failed to switch network", e) from e

        self._chain_id = chain_id
        logger.info(f"Switched to chain {chain_id}")

    def on_account_change(self, callback: Callable[[str], Any]) -> Subscription:
        """Subscribe to account changes; callback receives the new primary address"""
        def handler(accounts):
            if accounts:
                callback(accounts[0])

        return self._subscribe("accountsChanged", handler)

    def on_network_change(self, callback: Callable[[int], Any]) -> Subscription:
        """Subscribe to chain changes; callback receives the new chain ID"""
        def handler(chain_id_hex):
            self._chain_id = parse_quantity(chain_id_hex)
            callback(self._chain_id)

        return self._subscribe("chainChanged", handler)

    def _subscribe(self, event: str, handler: Callable[..., Any]) -> Subscription:
        on = getattr(self._provider, "on", None)
        if on is None:
            return Subscription()
        on(event, handler)
        return Subscription(self._provider, event, handler)
