"""Shared fixtures: sample ABI payloads, blocks and an in-memory ledger."""

from __future__ import annotations

import json
from typing import Any, Callable, Optional

import httpx
import pytest

from hyperwallet.config import Endpoints
from hyperwallet.ledger.abi import ABI, parse_abi
from hyperwallet.ledger.blocks import Block, parse_block

ABI_PAYLOAD: dict[str, Any] = {
    "actions": [
        {"id": 0, "name": "Transfer"},
        {"id": 4, "name": "CreateAsset"},
        {"id": 9, "name": "Batch"},
    ],
    "outputs": [{"id": 0, "name": "TransferResult"}],
    "types": [
        {
            "name": "Transfer",
            "fields": [
                {"name": "to", "type": "Address"},
                {"name": "assetAddress", "type": "Address"},
                {"name": "value", "type": "uint64"},
                {"name": "memo", "type": "[]uint8"},
            ],
        },
        {
            "name": "CreateAsset",
            "fields": [
                {"name": "name", "type": "string"},
                {"name": "decimals", "type": "uint8"},
                {"name": "memo", "type": "string"},
                {"name": "parentID", "type": "int32"},
            ],
        },
        {
            "name": "Batch",
            "fields": [
                {"name": "to", "type": "Address"},
                {"name": "recipients", "type": "[]Address"},
            ],
        },
        {
            "name": "TransferResult",
            "fields": [{"name": "senderBalance", "type": "uint64"}],
        },
    ],
}


def block_payload(height: int, txs: int = 1, timestamp: Optional[int] = None) -> dict[str, Any]:
    return {
        "blockID": f"block-{height}",
        "block": {
            "height": height,
            "timestamp": timestamp if timestamp is not None else 1_700_000_000_000 + height * 1000,
            "parent": f"parent-{height - 1}",
            "stateRoot": f"root-{height}",
            "txs": [
                {
                    "actions": [{"actionName": "Transfer", "data": {"value": str(i)}}],
                    "auth": {"signer": "11" * 32},
                }
                for i in range(txs)
            ],
        },
        "results": [
            {"success": i % 2 == 0, "outputs": [{"senderBalance": 100 - i}], "fee": 10}
            for i in range(txs)
        ],
    }


def make_block(height: int, txs: int = 1, timestamp: Optional[int] = None) -> Block:
    return parse_block(block_payload(height, txs, timestamp))


@pytest.fixture()
def abi() -> ABI:
    return parse_abi(ABI_PAYLOAD)


@pytest.fixture()
def abi_file(tmp_path) -> Any:
    path = tmp_path / "abi.json"
    path.write_text(json.dumps({"abi": ABI_PAYLOAD}), encoding="utf-8")
    return path


@pytest.fixture()
def endpoints() -> Endpoints:
    return Endpoints(
        api_host="http://node.test",
        vm_name="nuklaivm",
        vm_rpc_prefix="nuklaiapi",
        faucet_host="http://faucet.test",
    )


@pytest.fixture()
def wallet_env(tmp_path, monkeypatch):
    """Point key storage at a temp .env and start with no PRIVATE_KEY."""
    env_path = tmp_path / ".hyperwallet" / ".env"
    monkeypatch.setattr("hyperwallet.keys.signer.HYPERWALLET_ENV", env_path)
    # setenv (not delenv) so a key loaded from the file is undone afterwards
    monkeypatch.setenv("PRIVATE_KEY", "")
    return env_path


RpcHandler = Callable[[str, dict[str, Any]], Any]


def rpc_transport(handler: RpcHandler, calls: Optional[list] = None) -> httpx.MockTransport:
    """MockTransport answering JSON-RPC; ``handler`` returns the result or raises.

    Raising ``RpcFailure`` produces a JSON-RPC error member.
    """

    def respond(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if calls is not None:
            calls.append((str(request.url), body["method"], body["params"]))
        try:
            result = handler(body["method"], body["params"])
        except RpcFailure as exc:
            return httpx.Response(
                200, json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32000, "message": str(exc)}}
            )
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    return httpx.MockTransport(respond)


class RpcFailure(Exception):
    pass
