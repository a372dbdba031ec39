from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..errors import FetchError
from ..keys.signer import address_from_public_key
from ..utils import from_millis
from .schemas import SchemaRegistry, SchemaValidationError


@dataclass(frozen=True)
class Transaction:
    actions: tuple[Any, ...]
    auth: dict[str, Any] = field(default_factory=dict)
    base: dict[str, Any] = field(default_factory=dict)

    @property
    def sender(self) -> Optional[str]:
        signer = self.auth.get("signer")
        if not signer:
            return None
        try:
            return address_from_public_key(bytes.fromhex(signer.removeprefix("0x")))
        except ValueError:
            return None


@dataclass(frozen=True)
class ExecutionResult:
    success: bool
    outputs: tuple[Any, ...] = ()
    error: str = ""
    fee: int = 0


@dataclass(frozen=True)
class Block:
    """One indexed block; ``txs[i]`` was executed with outcome ``results[i]``."""

    height: int
    timestamp: int
    parent: str
    state_root: str
    txs: tuple[Transaction, ...] = ()
    results: tuple[ExecutionResult, ...] = ()
    block_id: str = ""
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def produced_at(self) -> datetime:
        return from_millis(self.timestamp)

    def entries(self) -> list[tuple[Transaction, ExecutionResult]]:
        return list(zip(self.txs, self.results))


def parse_block(payload: Any, registry: Optional[SchemaRegistry] = None) -> Block:
    """
    Convert an indexer ``getLatestBlock`` reply into a Block.

    Raises:
        FetchError: If the payload is malformed or txs and results disagree
    """
    registry = registry or SchemaRegistry.default()
    try:
        registry.validate_instance(payload, "block")
    except SchemaValidationError as exc:
        raise FetchError(str(exc)) from exc

    body = payload["block"]
    raw_txs = body.get("txs") or []
    raw_results = payload.get("results") or []
    if len(raw_txs) != len(raw_results):
        raise FetchError(
            f"Block {body['height']} has {len(raw_txs)} txs but {len(raw_results)} results"
        )

    try:
        txs = tuple(
            Transaction(
                actions=tuple(tx.get("actions") or []),
                auth=dict(tx.get("auth") or {}),
                base=dict(tx.get("base") or {}),
            )
            for tx in raw_txs
        )
        results = tuple(
            ExecutionResult(
                success=bool(result.get("success")),
                outputs=tuple(result.get("outputs") or []),
                error=result.get("error") or "",
                fee=int(result.get("fee") or 0),
            )
            for result in raw_results
        )
    except (AttributeError, TypeError, ValueError) as exc:
        raise FetchError(f"Block {body['height']} is malformed: {exc}") from exc
    return Block(
        height=body["height"],
        timestamp=body["timestamp"],
        parent=body["parent"],
        state_root=body["stateRoot"],
        txs=txs,
        results=results,
        block_id=payload.get("blockID", ""),
        raw=payload,
    )
