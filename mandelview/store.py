"""Persistence of the current viewport and render settings.

Values are kept as text in a flat key-value store, so the same stores work
over an in-memory dict or a JSON file on disk.
"""

from __future__ import annotations

import json
import math
import os
import warnings
from pathlib import Path
from typing import Dict, Optional, Protocol

from .errors import InvalidSettings
from .mapper import Viewport
from .settings import DEFAULT_SETTINGS, RenderSettings, settings_from_values

VIEWPORT_KEYS = ("x_min", "y_min", "x_max", "y_max")
ITERATIONS_KEY = "iterations"
COLOR_KEYS = ("color_interior", "color_escape_odd", "color_escape_even")


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    def __init__(self, values: Optional[Dict[str, str]] = None) -> None:
        self.values: Dict[str, str] = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = str(value)


class JsonFileStore:
    """Key-value store backed by a JSON object in ``path``.

    A missing file reads as empty. A file that is not a JSON object is
    reported with a warning and treated as empty; it is overwritten on the
    next write.
    """

    def __init__(self, path: os.PathLike | str) -> None:
        self.path = Path(path).expanduser()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            warnings.warn(f"Ignoring unreadable state file {self.path}: {exc}", UserWarning, stacklevel=3)
            return {}
        if not isinstance(data, dict):
            warnings.warn(f"Ignoring state file {self.path}: expected a JSON object.", UserWarning, stacklevel=3)
            return {}
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = str(value)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp_path, self.path)


class ViewStateStore:
    """Load and save the four viewport bounds as decimal text."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load(self) -> Optional[Viewport]:
        raw = [self.store.get(key) for key in VIEWPORT_KEYS]
        if raw[0] is None:
            return None
        try:
            values = [float(value) for value in raw]
        except (TypeError, ValueError):
            warnings.warn(f"Ignoring malformed stored viewport {raw!r}.", UserWarning, stacklevel=2)
            return None
        if not all(math.isfinite(value) for value in values):
            warnings.warn(f"Ignoring non-finite stored viewport {raw!r}.", UserWarning, stacklevel=2)
            return None
        if values[1] == values[3]:
            warnings.warn(f"Ignoring stored viewport without height {raw!r}.", UserWarning, stacklevel=2)
            return None
        return Viewport(*values)

    def save(self, viewport: Viewport) -> None:
        for key, value in zip(VIEWPORT_KEYS, viewport.as_tuple()):
            self.store.set(key, repr(float(value)))


class SettingsStore:
    """Load and save the iteration limit and the palette colors."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load(self) -> RenderSettings:
        iterations = self.store.get(ITERATIONS_KEY)
        if iterations is None:
            return DEFAULT_SETTINGS
        colors = [self.store.get(key) for key in COLOR_KEYS]
        try:
            return settings_from_values(iterations, colors)
        except InvalidSettings as exc:
            warnings.warn(f"Stored settings are invalid ({exc}); using defaults.", UserWarning, stacklevel=2)
            return DEFAULT_SETTINGS

    def save(self, settings: RenderSettings) -> None:
        settings.validate()
        self.store.set(ITERATIONS_KEY, str(settings.max_iterations))
        for key, color in zip(COLOR_KEYS, settings.palette.to_hex()):
            self.store.set(key, color)
