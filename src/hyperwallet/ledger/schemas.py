from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import jsonschema
from jsonschema import FormatChecker

_FIELD = {
    "type": "object",
    "required": ["name", "type"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "type": {"type": "string"},
    },
}

_TYPE = {
    "type": "object",
    "required": ["name", "fields"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "fields": {"type": "array", "items": _FIELD},
    },
}

_NAMED_ID = {
    "type": "object",
    "required": ["id", "name"],
    "properties": {
        "id": {"type": "integer", "minimum": 0},
        "name": {"type": "string", "minLength": 1},
    },
}

ABI_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "HyperSDK ABI",
    "type": "object",
    "required": ["actions", "types"],
    "properties": {
        "actions": {"type": "array", "items": _NAMED_ID},
        "outputs": {"type": "array", "items": _NAMED_ID},
        "types": {"type": "array", "items": _TYPE},
    },
}

_TX = {
    "type": "object",
    "properties": {
        "actions": {"type": ["array", "null"]},
        "auth": {"type": ["object", "null"]},
        "base": {"type": ["object", "null"]},
    },
}

_RESULT = {
    "type": "object",
    "properties": {
        "success": {"type": ["boolean", "null"]},
        "outputs": {"type": ["array", "null"]},
        "error": {"type": ["string", "null"]},
        "fee": {"type": ["integer", "string", "null"], "minimum": 0, "pattern": "^[0-9]+$"},
    },
}

BLOCK_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Indexer block",
    "type": "object",
    "required": ["block", "results"],
    "properties": {
        "blockID": {"type": "string"},
        "block": {
            "type": "object",
            "required": ["height", "timestamp", "parent", "stateRoot"],
            "properties": {
                "height": {"type": "integer", "minimum": 0},
                "timestamp": {"type": "integer"},
                "parent": {"type": "string"},
                "stateRoot": {"type": "string"},
                "txs": {"type": ["array", "null"], "items": _TX},
            },
        },
        "results": {"type": ["array", "null"], "items": _RESULT},
    },
}

SCHEMAS = {
    "abi": ABI_SCHEMA,
    "block": BLOCK_SCHEMA,
}


class SchemaValidationError(ValueError):
    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


@dataclass(frozen=True)
class SchemaRegistry:
    schemas: dict[str, dict[str, Any]] = field(default_factory=lambda: dict(SCHEMAS))

    @classmethod
    def default(cls) -> "SchemaRegistry":
        return _DEFAULT

    def validator_for(self, schema_name: str) -> jsonschema.Validator:
        schema = self.schemas[schema_name]
        validator_cls = jsonschema.validators.validator_for(schema)
        validator_cls.check_schema(schema)
        return validator_cls(schema, format_checker=FormatChecker())

    def validate_instance(self, instance: Any, schema_name: str) -> None:
        validator = self.validator_for(schema_name)
        errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
        if errors:
            formatted = [self._format_error(err) for err in errors]
            raise SchemaValidationError(
                f"Schema validation failed for {schema_name}: {formatted[0]}",
                errors=formatted,
            )

    @staticmethod
    def _format_error(error: jsonschema.ValidationError) -> str:
        location = "/".join(str(part) for part in error.path) or "<root>"
        return f"{location}: {error.message}"


_DEFAULT = SchemaRegistry()
