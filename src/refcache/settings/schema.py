"""Schema helpers for the refcache settings file."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from ..config import (
    MEMORY_CRITICAL_BYTES,
    MEMORY_WARNING_BYTES,
    PURGE_BATCH_SIZE,
    SETTINGS_SCHEMA_ID,
)

_CACHE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "policy": {"type": "string", "enum": ["weak", "soft"]},
    },
    "additionalProperties": False,
}

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "refcache/settings.schema.json",
    "type": "object",
    "required": ["schema", "purge_batch_size", "memory", "caches"],
    "properties": {
        "schema": {"const": SETTINGS_SCHEMA_ID},
        "purge_batch_size": {"type": "integer", "minimum": 1},
        "memory": {
            "type": "object",
            "required": ["warning_bytes", "critical_bytes"],
            "properties": {
                "warning_bytes": {"type": "integer", "minimum": 0},
                "critical_bytes": {"type": "integer", "minimum": 0},
            },
            "additionalProperties": False,
        },
        "caches": {
            "type": "object",
            "properties": {
                "fields": _CACHE_SCHEMA,
                "methods": _CACHE_SCHEMA,
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": SETTINGS_SCHEMA_ID,
    "purge_batch_size": PURGE_BATCH_SIZE,
    "memory": {
        "warning_bytes": MEMORY_WARNING_BYTES,
        "critical_bytes": MEMORY_CRITICAL_BYTES,
    },
    "caches": {
        "fields": {"policy": "weak"},
        "methods": {"policy": "weak"},
    },
}

_validator = Draft202012Validator(SETTINGS_SCHEMA)


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key == "memory" and isinstance(value, dict):
                merged["memory"].update(value)
                continue
            if key == "caches" and isinstance(value, dict):
                for name, cache in value.items():
                    if isinstance(cache, dict) and isinstance(merged["caches"].get(name), dict):
                        merged["caches"][name].update(cache)
                    else:
                        merged["caches"][name] = cache
                continue
            merged[key] = value
    _validator.validate(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the settings schema."""

    _validator.validate(data)


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults", "validate_settings"]
