"""Tests for the faucet client."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

import httpx
import pytest

from hyperwallet.errors import FetchError
from hyperwallet.ledger.faucet import FaucetClient

T = TypeVar("T")

ADDRESS = "00" + "cd" * 32


def run_faucet(
    handler: Callable[[httpx.Request], Any],
    body: Callable[[FaucetClient], Awaitable[T]],
    ready_timeout: float = 3.0,
) -> T:
    async def main() -> T:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            faucet = FaucetClient("http://faucet.test/", http_client=http, ready_timeout=ready_timeout)
            return await body(faucet)

    return asyncio.run(main())


class TestRequestTransfer:
    def test_posts_to_address_path(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"ok": True})

        run_faucet(handler, lambda f: f.request_transfer(ADDRESS))

        assert len(requests) == 1
        assert requests[0].method == "POST"
        assert str(requests[0].url) == f"http://faucet.test/faucet/{ADDRESS}"
        assert requests[0].content == b"{}"
        assert requests[0].headers["content-type"] == "application/json"

    @pytest.mark.parametrize("status", [400, 429, 500])
    def test_non_2xx_raises(self, status: int) -> None:
        with pytest.raises(FetchError, match=f"HTTP error! status: {status}"):
            run_faucet(lambda r: httpx.Response(status), lambda f: f.request_transfer(ADDRESS))

    def test_unreachable_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FetchError, match="Faucet request failed"):
            run_faucet(handler, lambda f: f.request_transfer(ADDRESS))


class TestIsReady:
    def test_ready(self) -> None:
        urls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            urls.append(str(request.url))
            return httpx.Response(200, text="ok")

        assert run_faucet(handler, lambda f: f.is_ready()) is True
        assert urls == ["http://faucet.test/readyz"]

    def test_unhealthy_status(self) -> None:
        assert run_faucet(lambda r: httpx.Response(503), lambda f: f.is_ready()) is False

    def test_connect_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        assert run_faucet(handler, lambda f: f.is_ready()) is False

    def test_timeout(self) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1)
            return httpx.Response(200)

        assert run_faucet(handler, lambda f: f.is_ready(), ready_timeout=0.05) is False
