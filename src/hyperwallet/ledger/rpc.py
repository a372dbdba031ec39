"""
JSON-RPC client for a HyperSDK ledger.

Async httpx client covering the three API surfaces the wallet talks to:
the core API (ABI, simulation, submission), the indexer (latest blocks) and
the VM API (balances, asset metadata).
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import itertools
import logging
from typing import Any, Awaitable, Callable, Optional, Union

import httpx

from ..config import Endpoints
from ..errors import ExecutionError, FetchError, SubscriptionError, WalletError
from ..keys.signer import SignerEvents, address_from_public_key, signing_payload
from .abi import ABI, parse_abi
from .blocks import Block, parse_block
from .units import convert_to_native_tokens, format_native_tokens

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_POLL_INTERVAL = 1.0

BlockHandler = Callable[[Block], Union[None, Awaitable[None]]]
Unsubscribe = Callable[[], Awaitable[None]]


class LedgerClient:
    """Async client for one ledger endpoint set.

    Can be used as an async context manager; an ``httpx.AsyncClient`` passed in
    by the caller is left open on exit.
    """

    def __init__(
        self,
        endpoints: Optional[Endpoints] = None,
        *,
        signer_events: Optional[SignerEvents] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.endpoints = endpoints or Endpoints.from_env()
        self.signer_events = signer_events or SignerEvents()
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        self._ids = itertools.count(1)

    async def __aenter__(self) -> "LedgerClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # -- transport --------------------------------------------------------

    async def _rpc_call(
        self,
        url: str,
        method: str,
        params: dict[str, Any],
        error_cls: type[WalletError] = FetchError,
    ) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            url: Endpoint URL
            method: RPC method name (e.g., "hypersdk.getABI")
            params: RPC parameters
            error_cls: Exception raised on transport or RPC failure

        Returns:
            Result field from the RPC response
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        logger.debug("RPC %s -> %s", method, url)

        try:
            response = await self._http.post(url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise error_cls(f"{method} failed: {exc}") from exc
        except ValueError as exc:
            raise error_cls(f"{method} returned invalid JSON") from exc

        if "error" in data and data["error"]:
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise error_cls(message or f"{method} failed: {error}")

        return data.get("result")

    # -- core API ---------------------------------------------------------

    async def get_abi(self) -> ABI:
        result = await self._rpc_call(self.endpoints.core_api_url, "hypersdk.getABI", {})
        if not isinstance(result, dict) or "abi" not in result:
            raise FetchError("getABI reply has no abi")
        return parse_abi(result["abi"])

    async def ping(self) -> bool:
        result = await self._rpc_call(self.endpoints.core_api_url, "hypersdk.ping", {})
        return isinstance(result, dict) and bool(result.get("success"))

    def _actor(self) -> Optional[str]:
        signer = self.signer_events.signer
        return address_from_public_key(signer.public_key) if signer else None

    async def execute_actions(self, actions: list[dict[str, Any]]) -> Any:
        """Simulate actions against current state; nothing is committed."""
        params: dict[str, Any] = {"actions": actions}
        actor = self._actor()
        if actor:
            params["actor"] = actor
        result = await self._rpc_call(
            self.endpoints.core_api_url,
            "hypersdk.executeActions",
            params,
            error_cls=ExecutionError,
        )
        if isinstance(result, dict) and result.get("error"):
            raise ExecutionError(result["error"])
        return result

    async def send_transaction(self, actions: list[dict[str, Any]]) -> Any:
        """Sign ``actions`` with the connected signer and broadcast them.

        Returns the submit reply (the transaction ID); finality is asynchronous.
        """
        signer = self.signer_events.signer
        if signer is None:
            raise ExecutionError("No signer connected")

        signature = signer.sign(signing_payload(actions))
        params = {
            "actions": actions,
            "auth": {
                "signer": signer.public_key.hex(),
                "signature": signature.hex(),
            },
        }
        return await self._rpc_call(
            self.endpoints.core_api_url,
            "hypersdk.submitTx",
            params,
            error_cls=ExecutionError,
        )

    # -- VM API -----------------------------------------------------------

    async def get_balance(self, address: str, asset: str) -> int:
        result = await self._rpc_call(
            self.endpoints.vm_api_url,
            f"{self.endpoints.vm_rpc_prefix}.balance",
            {"address": address, "asset": asset},
        )
        try:
            return int(result["amount"])
        except (TypeError, KeyError, ValueError) as exc:
            raise FetchError(f"Malformed balance reply: {result!r}") from exc

    async def get_asset(self, asset: str) -> dict[str, Any]:
        result = await self._rpc_call(
            self.endpoints.vm_api_url,
            f"{self.endpoints.vm_rpc_prefix}.asset",
            {"asset": asset},
        )
        if not isinstance(result, dict):
            raise FetchError(f"Malformed asset reply for {asset}")
        return result

    # -- indexer ----------------------------------------------------------

    async def get_latest_block(self) -> Block:
        result = await self._rpc_call(
            self.endpoints.indexer_url, "indexer.getLatestBlock", {}
        )
        return parse_block(result)

    async def listen_to_blocks(
        self,
        handler: BlockHandler,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        include_empty: bool = False,
    ) -> Unsubscribe:
        """
        Deliver each newly indexed block to ``handler``.

        The indexer is polled every ``poll_interval`` seconds. Subscribing
        fetches the current tip first, so a dead indexer fails here with
        ``SubscriptionError`` instead of inside the background task.

        Returns:
            Coroutine function that stops delivery and waits for the poller
        """
        try:
            tip = await self.get_latest_block()
        except FetchError as exc:
            raise SubscriptionError(f"Cannot subscribe to blocks: {exc}") from exc

        async def deliver(block: Block) -> None:
            if not include_empty and not block.txs:
                return
            try:
                outcome = handler(block)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                logger.exception("Block handler failed for height %s", block.height)

        async def poll(last_height: int) -> None:
            while True:
                await asyncio.sleep(poll_interval)
                try:
                    block = await self.get_latest_block()
                except FetchError as exc:
                    logger.warning("Block poll failed: %s", exc)
                    continue
                except Exception:
                    logger.exception("Unexpected error while polling blocks")
                    continue
                if block.height > last_height:
                    last_height = block.height
                    await deliver(block)

        await deliver(tip)
        task = asyncio.create_task(poll(tip.height), name="hyperwallet-block-poll")

        async def unsubscribe() -> None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        return unsubscribe

    # -- units ------------------------------------------------------------

    @staticmethod
    def format_native_tokens(amount: int) -> str:
        return format_native_tokens(amount)

    @staticmethod
    def convert_to_native_tokens(value: str) -> int:
        return convert_to_native_tokens(value)
