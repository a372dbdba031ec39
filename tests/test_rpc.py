"""Tests for LedgerClient against an in-memory JSON-RPC transport."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable, TypeVar

import httpx
import pytest

from hyperwallet.config import Endpoints
from hyperwallet.errors import ExecutionError, FetchError, SubscriptionError
from hyperwallet.keys.signer import LocalSigner, SignerEvents, signing_payload, verify_signature
from hyperwallet.ledger.blocks import Block
from hyperwallet.ledger.rpc import LedgerClient

from conftest import ABI_PAYLOAD, RpcFailure, block_payload, rpc_transport

T = TypeVar("T")

SEED = "42" * 32


def run_with(
    endpoints: Endpoints,
    transport: httpx.MockTransport,
    body: Callable[[LedgerClient], Awaitable[T]],
    signer_events: SignerEvents | None = None,
) -> T:
    async def main() -> T:
        async with httpx.AsyncClient(transport=transport) as http:
            client = LedgerClient(endpoints, signer_events=signer_events, http_client=http)
            return await body(client)

    return asyncio.run(main())


class TestTransport:
    def test_rpc_error_becomes_fetch_error(self, endpoints: Endpoints) -> None:
        def handler(method: str, params: dict[str, Any]) -> Any:
            raise RpcFailure("vm not bootstrapped")

        with pytest.raises(FetchError, match="vm not bootstrapped"):
            run_with(endpoints, rpc_transport(handler), lambda c: c.get_abi())

    def test_http_status_becomes_fetch_error(self, endpoints: Endpoints) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(503))
        with pytest.raises(FetchError, match="hypersdk.getABI failed"):
            run_with(endpoints, transport, lambda c: c.get_abi())

    def test_invalid_json(self, endpoints: Endpoints) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"<html>"))
        with pytest.raises(FetchError, match="invalid JSON"):
            run_with(endpoints, transport, lambda c: c.get_abi())

    def test_request_ids_increase(self, endpoints: Endpoints) -> None:
        ids: list[int] = []

        def respond(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            ids.append(body["id"])
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": {"success": True}})

        async def body(client: LedgerClient) -> None:
            await client.ping()
            await client.ping()

        run_with(endpoints, httpx.MockTransport(respond), body)
        assert ids == [1, 2]

    def test_caller_http_client_is_left_open(self, endpoints: Endpoints) -> None:
        async def main() -> bool:
            async with httpx.AsyncClient(transport=rpc_transport(lambda m, p: None)) as http:
                async with LedgerClient(endpoints, http_client=http):
                    pass
                return http.is_closed

        assert asyncio.run(main()) is False


class TestCoreApi:
    def test_get_abi(self, endpoints: Endpoints) -> None:
        calls: list = []
        transport = rpc_transport(lambda method, params: {"abi": ABI_PAYLOAD}, calls)

        abi = run_with(endpoints, transport, lambda c: c.get_abi())

        assert abi.action_names() == ["Transfer", "CreateAsset", "Batch"]
        assert calls == [("http://node.test/ext/bc/nuklaivm/coreapi", "hypersdk.getABI", {})]

    def test_get_abi_without_abi_member(self, endpoints: Endpoints) -> None:
        with pytest.raises(FetchError):
            run_with(endpoints, rpc_transport(lambda m, p: {}), lambda c: c.get_abi())

    def test_execute_actions_includes_actor_when_connected(self, endpoints: Endpoints) -> None:
        calls: list = []
        events = SignerEvents()
        signer = LocalSigner.from_hex(SEED)
        events.connect(signer)
        actions = [{"actionName": "Transfer", "data": {"value": "1"}}]

        result = run_with(
            endpoints,
            rpc_transport(lambda m, p: {"outputs": [{"senderBalance": 9}]}, calls),
            lambda c: c.execute_actions(actions),
            signer_events=events,
        )

        assert result == {"outputs": [{"senderBalance": 9}]}
        _, method, params = calls[0]
        assert method == "hypersdk.executeActions"
        assert params == {"actions": actions, "actor": signer.address}

    def test_execute_actions_without_signer_has_no_actor(self, endpoints: Endpoints) -> None:
        calls: list = []
        run_with(endpoints, rpc_transport(lambda m, p: [], calls), lambda c: c.execute_actions([]))
        assert "actor" not in calls[0][2]

    def test_execute_actions_rpc_error(self, endpoints: Endpoints) -> None:
        def handler(method: str, params: dict[str, Any]) -> Any:
            raise RpcFailure("insufficient balance")

        with pytest.raises(ExecutionError, match="insufficient balance"):
            run_with(endpoints, rpc_transport(handler), lambda c: c.execute_actions([]))

    def test_execute_actions_result_error(self, endpoints: Endpoints) -> None:
        transport = rpc_transport(lambda m, p: {"error": "unknown action"})
        with pytest.raises(ExecutionError, match="unknown action"):
            run_with(endpoints, transport, lambda c: c.execute_actions([]))

    def test_send_transaction_requires_signer(self, endpoints: Endpoints) -> None:
        calls: list = []
        with pytest.raises(ExecutionError, match="No signer connected"):
            run_with(endpoints, rpc_transport(lambda m, p: "tx", calls), lambda c: c.send_transaction([]))
        assert calls == []

    def test_send_transaction_signs_canonical_actions(self, endpoints: Endpoints) -> None:
        calls: list = []
        events = SignerEvents()
        signer = LocalSigner.from_hex(SEED)
        events.connect(signer)
        actions = [{"actionName": "Transfer", "data": {"value": "3", "memo": "aGk="}}]

        tx_id = run_with(
            endpoints,
            rpc_transport(lambda m, p: {"txId": "2abc"}, calls),
            lambda c: c.send_transaction(actions),
            signer_events=events,
        )

        assert tx_id == {"txId": "2abc"}
        _, method, params = calls[0]
        assert method == "hypersdk.submitTx"
        assert params["actions"] == actions
        auth = params["auth"]
        assert auth["signer"] == signer.public_key.hex()
        assert verify_signature(
            bytes.fromhex(auth["signer"]),
            bytes.fromhex(auth["signature"]),
            signing_payload(actions),
        )


class TestVmApi:
    def test_get_balance(self, endpoints: Endpoints) -> None:
        calls: list = []
        amount = run_with(
            endpoints,
            rpc_transport(lambda m, p: {"amount": "12000000000"}, calls),
            lambda c: c.get_balance("00aa", "NAI"),
        )
        assert amount == 12_000_000_000
        assert calls == [
            (
                "http://node.test/ext/bc/nuklaivm/nuklaiapi",
                "nuklaiapi.balance",
                {"address": "00aa", "asset": "NAI"},
            )
        ]

    def test_get_balance_malformed(self, endpoints: Endpoints) -> None:
        with pytest.raises(FetchError, match="Malformed balance"):
            run_with(endpoints, rpc_transport(lambda m, p: {"amt": 1}), lambda c: c.get_balance("00aa", "NAI"))

    def test_get_asset(self, endpoints: Endpoints) -> None:
        info = run_with(
            endpoints,
            rpc_transport(lambda m, p: {"symbol": p["asset"], "decimals": 6}),
            lambda c: c.get_asset("USDC"),
        )
        assert info == {"symbol": "USDC", "decimals": 6}

    def test_native_token_helpers(self) -> None:
        assert LedgerClient.convert_to_native_tokens("1.5") == 1_500_000_000
        assert LedgerClient.format_native_tokens(1_500_000_000) == "1.5"


class ChainHead:
    """Indexer stand-in whose tip advances through ``heights``; the last one sticks."""

    def __init__(self, heights: list[tuple[int, int]]) -> None:
        self.heights = list(heights)
        self.down = False

    def __call__(self, method: str, params: dict[str, Any]) -> Any:
        assert method == "indexer.getLatestBlock"
        if self.down:
            raise RpcFailure("indexer offline")
        height, txs = self.heights[0]
        if len(self.heights) > 1:
            self.heights.pop(0)
        return block_payload(height, txs)


def collect_blocks(
    endpoints: Endpoints,
    head: ChainHead,
    want: int,
    *,
    include_empty: bool = False,
    handler_wrapper: Callable[[Callable[[Block], None]], Any] | None = None,
) -> list[int]:
    seen: list[int] = []

    async def body(client: LedgerClient) -> list[int]:
        done = asyncio.Event()

        def handler(block: Block) -> None:
            seen.append(block.height)
            if len(seen) >= want:
                done.set()

        wrapped = handler_wrapper(handler) if handler_wrapper else handler
        unsubscribe = await client.listen_to_blocks(
            wrapped, poll_interval=0.01, include_empty=include_empty
        )
        await asyncio.wait_for(done.wait(), timeout=5)
        await unsubscribe()
        return seen

    return run_with(endpoints, rpc_transport(head), body)


class TestListenToBlocks:
    def test_delivers_new_blocks_and_skips_empty(self, endpoints: Endpoints) -> None:
        head = ChainHead([(1, 1), (1, 1), (2, 0), (3, 2), (3, 2), (4, 1)])
        assert collect_blocks(endpoints, head, want=3) == [1, 3, 4]

    def test_include_empty(self, endpoints: Endpoints) -> None:
        head = ChainHead([(1, 0), (2, 0), (3, 1)])
        assert collect_blocks(endpoints, head, want=3, include_empty=True) == [1, 2, 3]

    def test_async_handler(self, endpoints: Endpoints) -> None:
        def make_async(handler: Callable[[Block], None]) -> Any:
            async def wrapped(block: Block) -> None:
                await asyncio.sleep(0)
                handler(block)

            return wrapped

        head = ChainHead([(5, 1), (6, 1)])
        assert collect_blocks(endpoints, head, want=2, handler_wrapper=make_async) == [5, 6]

    def test_failing_handler_keeps_polling(self, endpoints: Endpoints) -> None:
        def flaky(handler: Callable[[Block], None]) -> Any:
            def wrapped(block: Block) -> None:
                handler(block)
                if block.height == 1:
                    raise RuntimeError("render crashed")

            return wrapped

        head = ChainHead([(1, 1), (2, 1)])
        assert collect_blocks(endpoints, head, want=2, handler_wrapper=flaky) == [1, 2]

    def test_subscribe_fails_when_indexer_is_down(self, endpoints: Endpoints) -> None:
        head = ChainHead([(1, 1)])
        head.down = True

        with pytest.raises(SubscriptionError, match="indexer offline"):
            run_with(endpoints, rpc_transport(head), lambda c: c.listen_to_blocks(lambda b: None))

    def test_malformed_block_does_not_stop_polling(self, endpoints: Endpoints) -> None:
        garbage = block_payload(2)
        garbage["block"]["txs"] = ["garbage"]
        replies = [block_payload(1), garbage, garbage, block_payload(3)]

        def latest(method: str, params: dict[str, Any]) -> Any:
            return replies.pop(0) if len(replies) > 1 else replies[0]

        seen: list[int] = []

        async def body(client: LedgerClient) -> None:
            done = asyncio.Event()

            def handler(block: Block) -> None:
                seen.append(block.height)
                if block.height == 3:
                    done.set()

            unsubscribe = await client.listen_to_blocks(handler, poll_interval=0.01)
            await asyncio.wait_for(done.wait(), timeout=5)
            await unsubscribe()

        run_with(endpoints, rpc_transport(latest), body)
        assert seen == [1, 3]

    def test_poll_failures_are_retried(self, endpoints: Endpoints) -> None:
        head = ChainHead([(1, 1), (2, 1)])
        seen: list[int] = []

        async def body(client: LedgerClient) -> None:
            done = asyncio.Event()

            def handler(block: Block) -> None:
                seen.append(block.height)
                if block.height == 2:
                    done.set()

            unsubscribe = await client.listen_to_blocks(handler, poll_interval=0.01)
            head.down = True
            await asyncio.sleep(0.05)
            head.down = False
            await asyncio.wait_for(done.wait(), timeout=5)
            await unsubscribe()

        run_with(endpoints, rpc_transport(head), body)
        assert seen == [1, 2]
