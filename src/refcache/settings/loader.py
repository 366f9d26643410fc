"""Load the refcache settings file from disk."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from jsonschema import ValidationError

from ..errors import SettingsLoadError, SettingsValidationError
from .schema import merge_with_defaults

LOGGER = logging.getLogger(__name__)


def load_settings(path: Path | None) -> dict[str, Any]:
    """Return validated settings from *path*, or the defaults when it is ``None`` or missing."""

    payload = None
    if path is not None and path.exists():
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise SettingsLoadError(f"Cannot read settings from {path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise SettingsLoadError(f"Settings in {path} must be a JSON object")
    elif path is not None:
        LOGGER.debug("Settings file %s not found; using defaults", path)
    try:
        return merge_with_defaults(payload)
    except ValidationError as exc:
        raise SettingsValidationError(exc.message) from exc
