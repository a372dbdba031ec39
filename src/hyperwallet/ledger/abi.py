"""
ABI model - the action set a ledger describes about itself.

The ledger publishes its ABI over ``hypersdk.getABI``; it can also be read
from a JSON file for offline use. Either way the payload is validated against
the ABI schema and turned into immutable dataclasses.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from ..errors import FetchError
from .schemas import SchemaRegistry, SchemaValidationError


@dataclass(frozen=True)
class FieldDef:
    name: str
    type: str


@dataclass(frozen=True)
class TypeDef:
    name: str
    fields: tuple[FieldDef, ...]

    def field(self, name: str) -> Optional[FieldDef]:
        for field in self.fields:
            if field.name == name:
                return field
        return None


@dataclass(frozen=True)
class ActionDef:
    id: int
    name: str


@dataclass(frozen=True)
class ABI:
    actions: tuple[ActionDef, ...]
    types: tuple[TypeDef, ...]
    outputs: tuple[ActionDef, ...] = ()

    def action(self, name: str) -> Optional[ActionDef]:
        for action in self.actions:
            if action.name == name:
                return action
        return None

    def type_for(self, name: str) -> Optional[TypeDef]:
        """Find the TypeDef carrying the fields of ``name``.

        Actions and types are joined by name only.
        """
        for type_def in self.types:
            if type_def.name == name:
                return type_def
        return None

    def action_names(self) -> list[str]:
        return [action.name for action in self.actions]


def parse_abi(payload: Any, registry: Optional[SchemaRegistry] = None) -> ABI:
    """
    Validate and convert a raw ABI payload.

    Args:
        payload: Decoded JSON (``{"actions": [...], "types": [...]}``)
        registry: Schema registry (default: built-in schemas)

    Returns:
        Immutable ABI

    Raises:
        FetchError: If the payload does not describe a usable ABI
    """
    registry = registry or SchemaRegistry.default()
    try:
        registry.validate_instance(payload, "abi")
    except SchemaValidationError as exc:
        raise FetchError(str(exc)) from exc

    types = []
    for raw_type in payload["types"]:
        fields = tuple(FieldDef(name=f["name"], type=f["type"]) for f in raw_type["fields"])
        names = [f.name for f in fields]
        if len(set(names)) != len(names):
            raise FetchError(f"Duplicate field name in type {raw_type['name']}")
        types.append(TypeDef(name=raw_type["name"], fields=fields))

    return ABI(
        actions=tuple(ActionDef(id=a["id"], name=a["name"]) for a in payload["actions"]),
        types=tuple(types),
        outputs=tuple(ActionDef(id=o["id"], name=o["name"]) for o in payload.get("outputs") or []),
    )


def load_abi_file(path: Path) -> ABI:
    """Load an ABI from a JSON file (``getABI`` output saved to disk).

    Parsed files are cached until their modification time changes.
    """
    try:
        mtime_ns = path.stat().st_mtime_ns
    except OSError as exc:
        raise FetchError(f"Cannot read ABI file {path}: {exc}") from exc
    return _load_abi_file(path, mtime_ns)


@lru_cache(maxsize=16)
def _load_abi_file(path: Path, mtime_ns: int) -> ABI:
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise FetchError(f"Cannot read ABI file {path}: {exc}") from exc

    # Accept both the bare ABI and the {"abi": {...}} RPC reply shape
    if isinstance(payload, dict) and "abi" in payload:
        payload = payload["abi"]
    return parse_abi(payload)
