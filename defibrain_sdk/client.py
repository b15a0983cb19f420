"""
DefiBrain API Client

Async HTTP client for the DefiBrain backend: yield optimization, swap
routing, generic protocol actions and batch execution.

The read/compute endpoints (optimize_yield, find_optimal_swap) run through
the retry wrapper; state-changing endpoints are sent once.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx

from .config import ClientConfig, RetryPolicy
from .errors import ApiError, ConfigurationError, NetworkError
from .infra.retry import CorrelationContext, retry as _retry
from .infra.router import build_managed_transaction
from .types import (
    ExecutionMode,
    ExecuteActionRequest,
    ExecuteActionResponse,
    ExecuteBatchRequest,
    ExecuteBatchResponse,
    FindSwapRequest,
    FindSwapResponse,
    HealthCheckResponse,
    OptimizeYieldRequest,
    OptimizeYieldResponse,
    UnsignedTransaction,
    UsageStats,
)
from .types.common import drop_none

logger = logging.getLogger(__name__)

HEALTH_CHECK_FAILED = "Health check failed"


def _error_message(body: Any, fallback: str) -> str:
    """Backend error text: error.message, message, error (string), fallback"""
    if isinstance(body, Mapping):
        error = body.get("error")
        if isinstance(error, Mapping) and error.get("message"):
            return str(error["message"])
        if body.get("message"):
            return str(body["message"])
        if isinstance(error, str) and error:
            return error
    return fallback


class DefiBrainClient:
    """
    DefiBrain backend client

    Configuration is an immutable ClientConfig. set_chain_id() and
    set_mode() swap in a new validated configuration; calls already in
    flight keep the configuration current at their start.

    Usage:
        async with DefiBrainClient(api_key="...", chain_id=11155111) as client:
            result = await client.optimize_yield(
                OptimizeYieldRequest(asset=USDC, amount="1000000000")
            )
            print(result.protocol, result.estimated_apr)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        chain_id: Optional[int] = None,
        mode: Optional[Union[ExecutionMode, str]] = None,
        router_address: Optional[str] = None,
        retry: Optional[RetryPolicy] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize client

        Args:
            config: Complete configuration (keyword overrides are applied on top)
            api_key: Backend API key (default: DEFIBRAIN_API_KEY)
            api_url: Backend base URL (default: DEFIBRAIN_API_URL)
            chain_id: Target chain (default: DEFIBRAIN_CHAIN_ID or 1)
            mode: "direct" or "managed"
            router_address: Router contract, required for managed mode
                unless the chain has a default
            retry: Retry policy for read/compute endpoints
            timeout: HTTP timeout in seconds
            http_client: Externally owned httpx.AsyncClient

        Raises:
            ConfigurationError: If the resulting configuration is invalid
        """
        overrides = drop_none({
            "api_key": api_key,
            "base_url": api_url,
            "chain_id": chain_id,
            "mode": mode,
            "router_address": router_address,
            "retry": retry,
            "timeout": timeout,
        })
        if config is None:
            config = ClientConfig.from_env(**overrides)
        elif overrides:
            config = config.reconfigure(**overrides)

        self._config = config
        self._http = http_client
        self._owns_http = http_client is None

        logger.debug(f"DefiBrainClient initialized: {self._config!r}")

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def chain_id(self) -> int:
        return self._config.chain_id

    @property
    def mode(self) -> ExecutionMode:
        return self._config.mode

    @property
    def router_address(self) -> Optional[str]:
        return self._config.resolved_router_address

    def set_chain_id(self, chain_id: int) -> None:
        """
        Switch target chain

        Raises:
            ConfigurationError: If the chain ID is invalid, or the client is
                in managed mode and the new chain has no router address
        """
        self._config = self._config.reconfigure(chain_id=chain_id)

    def set_mode(
        self,
        mode: Union[ExecutionMode, str],
        router_address: Optional[str] = None,
    ) -> None:
        """
        Switch execution mode

        The router address is replaced by the given one (None clears an
        explicit address; managed mode then falls back to the chain default).

        Raises:
            ConfigurationError: If managed mode has no resolvable router address
        """
        self._config = self._config.reconfigure(mode=mode, router_address=router_address)

    # =========================================================================
    # HTTP
    # =========================================================================

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._config.timeout)
            self._owns_http = True
        return self._http

    async def aclose(self) -> None:
        """Close HTTP client (only when created by this instance)"""
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "DefiBrainClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def _request(
        self,
        config: ClientConfig,
        method: str,
        endpoint: str,
        fallback: str,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        passthrough: bool = True,
    ) -> Any:
        """
        Send an authenticated request and return the decoded JSON body

        Raises:
            NetworkError: On timeouts and connection failures
            ApiError: On non-2xx responses or undecodable bodies
        """
        headers = {"Authorization": f"Bearer {config.api_key}"}
        if body is not None:
            headers["Content-Type"] = "application/json"

        try:
            response = await self._get_client().request(
                method,
                f"{config.base_url}{endpoint}",
                json=body,
                params=params,
                headers=headers,
                timeout=config.timeout,
            )
        except httpx.TimeoutException as e:
            raise NetworkError.timeout(endpoint, e) from e
        except httpx.RequestError as e:
            raise NetworkError.request_failed(endpoint, e) from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            message = _error_message(data, fallback) if passthrough else fallback
            logger.debug(f"{method} {endpoint} -> {response.status_code}: {message}")
            raise ApiError(message, status_code=response.status_code, endpoint=endpoint, body=data)

        if data is None:
            raise ApiError(fallback, status_code=response.status_code, endpoint=endpoint)
        return data

    @staticmethod
    def _execution_context(config: ClientConfig) -> Dict[str, Any]:
        return drop_none({
            "chainId": config.chain_id,
            "mode": config.mode.value,
            "routerAddress": config.resolved_router_address,
        })

    # =========================================================================
    # Operations
    # =========================================================================

    async def optimize_yield(self, request: OptimizeYieldRequest) -> OptimizeYieldResponse:
        """
        Find the best yield opportunity for an asset

        In managed mode the returned transaction is replaced by a router
        executeAction call built from the selected protocol, action and params.

        Args:
            request: Asset, amount and optional strategy/risk constraints

        Returns:
            OptimizeYieldResponse

        Raises:
            ApiError: If the backend rejects the request
            EncodingError: If managed-mode params cannot be encoded
        """
        config = self._config
        body = {**request.to_payload(), **self._execution_context(config)}

        with CorrelationContext("yield") as cid:
            logger.info(f"[{cid}] optimize_yield asset={request.asset} amount={request.amount}")
            data = await _retry(
                lambda: self._request(config, "POST", "/optimize-yield", "Failed to optimize yield", body=body),
                config.retry,
                "optimize_yield",
            )

        result = OptimizeYieldResponse.from_dict(data)
        if config.is_managed:
            result = replace(
                result,
                transaction=build_managed_transaction(
                    config.resolved_router_address, result.protocol, result.action, result.params
                ),
            )
        return result

    async def find_optimal_swap(self, request: FindSwapRequest) -> FindSwapResponse:
        """
        Find the best swap route

        Args:
            request: Token pair, amount and slippage (percent, default 0.5)

        Returns:
            FindSwapResponse with the chosen protocol and route
        """
        config = self._config
        body = {**request.to_payload(), "chainId": config.chain_id}

        with CorrelationContext("swap") as cid:
            logger.info(f"[{cid}] find_optimal_swap {request.token_in} -> {request.token_out} amount={request.amount}")
            data = await _retry(
                lambda: self._request(config, "POST", "/swap/optimal", "Failed to find optimal swap", body=body),
                config.retry,
                "find_optimal_swap",
            )

        return FindSwapResponse.from_dict(data)

    async def execute_action(self, request: ExecuteActionRequest) -> ExecuteActionResponse:
        """Run a generic protocol action (not retried)"""
        config = self._config
        body = {**request.to_payload(), **self._execution_context(config)}
        data = await self._request(config, "POST", "/execute", "Failed to execute action", body=body)
        return ExecuteActionResponse.from_dict(data)

    async def execute_batch(self, request: ExecuteBatchRequest) -> ExecuteBatchResponse:
        """
        Execute several actions in one router transaction

        Raises:
            ConfigurationError: Unless the client is in managed mode with a
                router address (checked before any request is sent)
        """
        config = self._config
        if not config.is_managed or not config.resolved_router_address:
            raise ConfigurationError.batch_requires_managed()

        body = {**request.to_payload(), **self._execution_context(config)}
        data = await self._request(config, "POST", "/execute-batch", "Failed to execute batch", body=body)
        return ExecuteBatchResponse.from_dict(data)

    async def get_available_protocols(self, action: str) -> List[str]:
        """Protocols supporting an action on the current chain"""
        config = self._config
        data = await self._request(
            config,
            "GET",
            "/protocols/available",
            "Failed to get protocols",
            params={"action": action, "chainId": config.chain_id},
        )
        protocols = data.get("protocols") if isinstance(data, Mapping) else None
        return list(protocols or [])

    async def health_check(self) -> HealthCheckResponse:
        """Backend health; any failure raises ApiError("Health check failed")"""
        data = await self._request(
            self._config, "GET", "/health", HEALTH_CHECK_FAILED, passthrough=False
        )
        return HealthCheckResponse.from_dict(data)

    async def get_usage_stats(self) -> UsageStats:
        """API usage for the configured key"""
        data = await self._request(self._config, "GET", "/usage", "Failed to get usage stats")
        return UsageStats.from_dict(data)

    def build_managed_transaction(
        self,
        protocol: str,
        action: str,
        params: Mapping[str, Any],
    ) -> UnsignedTransaction:
        """
        Build a router executeAction transaction for the current configuration

        Raises:
            ConfigurationError: If no router address is configured
            EncodingError: If params cannot be encoded
        """
        router_address = self._config.resolved_router_address
        if not router_address:
            raise ConfigurationError.router_required(self._config.chain_id)
        return build_managed_transaction(router_address, protocol, action, params)

    def __repr__(self) -> str:
        return f"DefiBrainClient({self._config!r})"
