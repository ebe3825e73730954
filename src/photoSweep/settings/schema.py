"""Schema helpers for the application settings file."""

from __future__ import annotations

import os
from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from ..config import PAGE_SIZE, PRELOAD_THRESHOLD, SETTINGS_SCHEMA_ID

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "photoSweep/settings.schema.json",
    "type": "object",
    "required": ["schema", "catalog"],
    "properties": {
        "schema": {"const": SETTINGS_SCHEMA_ID},
        "data_dir": {"type": ["string", "null"]},
        "last_source": {"type": ["string", "null"]},
        "catalog": {
            "type": "object",
            "properties": {
                "page_size": {"type": "integer", "minimum": 1},
                "preload_threshold": {"type": "integer", "minimum": 0},
                "background_ingestion": {"type": "boolean"},
                "seed": {"type": ["integer", "null"]},
            },
            "additionalProperties": True,
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": SETTINGS_SCHEMA_ID,
    "data_dir": None,
    "last_source": None,
    "catalog": {
        "page_size": PAGE_SIZE,
        "preload_threshold": PRELOAD_THRESHOLD,
        "background_ingestion": True,
        "seed": None,
    },
}

_validator = Draft202012Validator(SETTINGS_SCHEMA)


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key == "catalog" and isinstance(value, dict):
                target = merged.setdefault("catalog", {})
                for sub_key, sub_value in value.items():
                    target[sub_key] = sub_value
                continue
            if key in {"data_dir", "last_source"} and value not in {None, ""}:
                try:
                    merged[key] = os.fspath(value)
                except TypeError:
                    continue
                continue
            merged[key] = value
    _validator.validate(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the settings schema."""

    _validator.validate(data)


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults", "validate_settings"]
