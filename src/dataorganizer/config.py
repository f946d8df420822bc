"""Application configuration loaded from ``dataorganizer.yaml``."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

CONFIG_FILE = "dataorganizer.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "default_table_name": "My Table",
    "include_index_column": True,
    "max_upload_bytes": 10 * 1024 * 1024,  # 10 MB
    "theme_store": ".dataorganizer/settings.yaml",
    "version_repo": "Brown1ie/QuickDatabase",
    "version_timeout_secs": 5.0,
    "logging_fsync": False,
}


def load_config(directory: Path) -> dict[str, Any]:
    """Load configuration from ``dataorganizer.yaml``, with defaults.

    Unknown keys are kept so callers can extend the file freely.

    Args:
        directory: Directory holding the config file.

    Returns:
        Merged configuration dict.
    """
    config = dict(DEFAULT_CONFIG)
    config_path = directory / CONFIG_FILE
    if config_path.exists():
        user_config = yaml.safe_load(config_path.read_text()) or {}
        if not isinstance(user_config, dict):
            raise ValueError(f"{config_path} must contain a mapping")
        config.update(user_config)
    return config


def resolve_path(directory: Path, value: str | Path) -> Path:
    """Resolve a config path relative to *directory*."""
    path = Path(value).expanduser()
    return path if path.is_absolute() else directory / path
