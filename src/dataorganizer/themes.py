"""Built-in themes and the key-value store that remembers the chosen one.

The theme id is the only state persisted across sessions.  Storage is
injected through the :class:`KeyValueStore` protocol; :class:`YamlFileStore`
is the shipped implementation and :class:`MemoryStore` serves tests and
ephemeral sessions.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

import yaml
from pydantic import BaseModel

THEME_KEY = "dataOrganizerTheme"


class Theme(BaseModel):
    id: str
    name: str
    background_color: str
    header_gradient_from: str
    header_gradient_to: str
    header_text_color: str
    text_color: str
    primary_button_bg: str
    secondary_button_bg: str
    danger_button_bg: str
    row_color_options: list[str]


DEFAULT_THEME = Theme(
    id="default",
    name="Default Blue",
    background_color="#f9fafb",
    header_gradient_from="#2563eb",
    header_gradient_to="#4338ca",
    header_text_color="#ffffff",
    text_color="#1f2937",
    primary_button_bg="#2563eb",
    secondary_button_bg="#10b981",
    danger_button_bg="#dc2626",
    row_color_options=["#ffffff", "#f0f9ff", "#f0fdf4", "#fef2f2", "#fffbeb", "#f5f3ff"],
)

THEMES: list[Theme] = [
    DEFAULT_THEME,
    Theme(
        id="dark",
        name="Dark Mode",
        background_color="#111827",
        header_gradient_from="#1e3a8a",
        header_gradient_to="#312e81",
        header_text_color="#f3f4f6",
        text_color="#e5e7eb",
        primary_button_bg="#3b82f6",
        secondary_button_bg="#10b981",
        danger_button_bg="#ef4444",
        row_color_options=["#1f2937", "#1e3a8a", "#064e3b", "#7f1d1d", "#78350f", "#4c1d95"],
    ),
    Theme(
        id="purple",
        name="Purple Passion",
        background_color="#f5f3ff",
        header_gradient_from="#7c3aed",
        header_gradient_to="#c026d3",
        header_text_color="#ffffff",
        text_color="#4b5563",
        primary_button_bg="#8b5cf6",
        secondary_button_bg="#d946ef",
        danger_button_bg="#f43f5e",
        row_color_options=["#ffffff", "#ede9fe", "#fae8ff", "#ffe4e6", "#dbeafe", "#ecfdf5"],
    ),
    Theme(
        id="nature",
        name="Natural Green",
        background_color="#f0fdf4",
        header_gradient_from="#16a34a",
        header_gradient_to="#0d9488",
        header_text_color="#ffffff",
        text_color="#374151",
        primary_button_bg="#22c55e",
        secondary_button_bg="#14b8a6",
        danger_button_bg="#f97316",
        row_color_options=["#ffffff", "#d1fae5", "#ccfbf1", "#e0f2fe", "#fff7ed", "#fef3c7"],
    ),
]


def find_theme(theme_id: str | None) -> Theme | None:
    for theme in THEMES:
        if theme.id == theme_id:
            return theme
    return None


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """In-process store; forgets everything when the process exits."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class YamlFileStore:
    """String key-value pairs kept in a small YAML file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        data = yaml.safe_load(self.path.read_text()) or {}
        return {str(k): str(v) for k, v in data.items()} if isinstance(data, dict) else {}

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(yaml.safe_dump(data, sort_keys=True))


def load_theme(store: KeyValueStore) -> Theme:
    """The saved theme, or the default when nothing (valid) is saved."""
    return find_theme(store.get(THEME_KEY)) or DEFAULT_THEME


def save_theme(store: KeyValueStore, theme_id: str) -> Theme:
    """Persist *theme_id*; unknown ids fall back to the default theme."""
    theme = find_theme(theme_id) or DEFAULT_THEME
    store.set(THEME_KEY, theme.id)
    return theme
