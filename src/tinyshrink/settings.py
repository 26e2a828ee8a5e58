"""JSON-backed defaults for scanning, the remote client and the runner."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from tinyshrink.utils import xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "tinyshrink"
_SETTINGS_FILE = "settings.json"

# settings key -> CLI parameter name
_PARAM_KEYS = {
    "scan.extensions": "extensions",
    "scan.max_size": "max_size",
    "scan.recursive": "recursive",
    "client.endpoint": "endpoint",
    "client.timeout": "timeout",
    "runner.report_failures": "report_failures",
    "runner.abort_on_write_error": "abort_on_write_error",
}


class Settings:
    """Read-only settings backed by a JSON file.

    Uses dot-notation keys for nested access::

        settings.get("scan.max_size")  # reads data["scan"]["max_size"]

    Recognised keys are ``scan.extensions``, ``scan.max_size``,
    ``scan.recursive``, ``client.endpoint``, ``client.timeout``,
    ``runner.report_failures`` and ``runner.abort_on_write_error``.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or (xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE)
        self._data: dict[str, Any] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key."""
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def as_default_map(self) -> dict[str, Any]:
        """Translate the stored keys into click parameter defaults."""
        defaults: dict[str, Any] = {}
        for key, param in _PARAM_KEYS.items():
            value = self.get(key)
            if value is not None:
                defaults[param] = value
        return defaults

    def _load(self) -> None:
        """Load settings from disk, gracefully handling errors."""
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self._path, e)
            return
        if not isinstance(data, dict):
            log.warning("Ignoring settings in %s: top level is not an object", self._path)
            return
        self._data = data
