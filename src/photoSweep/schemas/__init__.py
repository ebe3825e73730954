"""JSON schemas for the documents photoSweep keeps on disk."""

from __future__ import annotations

from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from ..config import LEDGER_SCHEMA_ID, LIKED_SCHEMA_ID
from ..errors import DocumentCorruptedError

_ASSET_ID = {"type": "string", "minLength": 1}
_NON_NEGATIVE = {"type": "integer", "minimum": 0}

LEDGER_SCHEMA: dict[str, Any] = {
    "$id": "photoSweep/trash.schema.json",
    "type": "object",
    "required": ["schema", "entries"],
    "properties": {
        "schema": {"const": LEDGER_SCHEMA_ID},
        "entries": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": [
                    "asset_id",
                    "stored_name",
                    "trashed_at_ms",
                    "size_bytes",
                ],
                "properties": {
                    "asset_id": _ASSET_ID,
                    "name": {"type": "string"},
                    "locator": {"type": "string"},
                    "stored_name": {"type": "string", "minLength": 1},
                    "trashed_at_ms": _NON_NEGATIVE,
                    "size_bytes": _NON_NEGATIVE,
                },
            },
        },
    },
    "additionalProperties": True,
}

LIKED_SCHEMA: dict[str, Any] = {
    "$id": "photoSweep/liked.schema.json",
    "type": "object",
    "required": ["schema", "entries"],
    "properties": {
        "schema": {"const": LIKED_SCHEMA_ID},
        "entries": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["asset_id", "liked_at_ms"],
                "properties": {
                    "asset_id": _ASSET_ID,
                    "name": {"type": "string"},
                    "liked_at_ms": _NON_NEGATIVE,
                },
            },
        },
    },
    "additionalProperties": True,
}

_ledger_validator = Draft202012Validator(LEDGER_SCHEMA)
_liked_validator = Draft202012Validator(LIKED_SCHEMA)


def _validate(validator: Draft202012Validator, payload: Any, label: str) -> None:
    try:
        validator.validate(payload)
    except ValidationError as exc:
        location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
        raise DocumentCorruptedError(
            f"{label} failed validation at {location}: {exc.message}"
        ) from exc


def validate_ledger(payload: Any) -> None:
    """Raise :class:`DocumentCorruptedError` unless *payload* is a valid ledger."""

    _validate(_ledger_validator, payload, "Trash ledger")


def validate_liked(payload: Any) -> None:
    """Raise :class:`DocumentCorruptedError` unless *payload* is a valid liked set."""

    _validate(_liked_validator, payload, "Liked set")


__all__ = ["LEDGER_SCHEMA", "LIKED_SCHEMA", "validate_ledger", "validate_liked"]
