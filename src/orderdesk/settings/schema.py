"""Schema helpers for the orderdesk settings file."""

from __future__ import annotations

import os
from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from ..config import (
    DEFAULT_PAGE_SIZE,
    PAGE_SIZE_OPTIONS,
    RECONCILE_DEBOUNCE_MS,
    TRASH_RETENTION_DAYS,
    UNDO_WINDOW_SEC,
)
from ..domain.models.tabs import Tab

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "orderdesk/settings.schema.json",
    "type": "object",
    "required": ["schema", "list", "realtime", "undo", "trash"],
    "properties": {
        "schema": {"const": "orderdesk/settings@1"},
        "database": {
            "type": "object",
            "properties": {
                "path": {"type": ["string", "null"]},
            },
            "additionalProperties": False,
        },
        "list": {
            "type": "object",
            "properties": {
                "page_size": {"type": "integer", "enum": list(PAGE_SIZE_OPTIONS)},
                "default_tab": {"type": "string", "enum": [tab.value for tab in Tab]},
            },
            "additionalProperties": True,
        },
        "realtime": {
            "type": "object",
            "properties": {
                "debounce_ms": {"type": "integer", "minimum": 50, "maximum": 10000},
            },
            "additionalProperties": True,
        },
        "undo": {
            "type": "object",
            "properties": {
                "window_seconds": {"type": "number", "exclusiveMinimum": 0, "maximum": 300},
            },
            "additionalProperties": True,
        },
        "trash": {
            "type": "object",
            "properties": {
                "retention_days": {"type": "integer", "minimum": 0},
            },
            "additionalProperties": True,
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": "orderdesk/settings@1",
    "database": {"path": None},
    "list": {
        "page_size": DEFAULT_PAGE_SIZE,
        "default_tab": Tab.ALL.value,
    },
    "realtime": {"debounce_ms": RECONCILE_DEBOUNCE_MS},
    "undo": {"window_seconds": UNDO_WINDOW_SEC},
    "trash": {"retention_days": TRASH_RETENTION_DAYS},
}

_validator = Draft202012Validator(SETTINGS_SCHEMA)

_SECTIONS = ("database", "list", "realtime", "undo", "trash")


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` section by section and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key in _SECTIONS and isinstance(value, dict):
                target = merged.setdefault(key, {})
                for sub_key, sub_value in value.items():
                    target[sub_key] = sub_value
                continue
            merged[key] = value
    db_path = merged["database"].get("path")
    if db_path not in (None, ""):
        merged["database"]["path"] = os.fspath(db_path)
    _validator.validate(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the settings schema."""

    _validator.validate(data)


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults", "validate_settings"]
