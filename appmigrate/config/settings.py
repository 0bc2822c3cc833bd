"""Pydantic-based configuration model and YAML loader for appmigrate."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


__all__ = ["AppMigrateSettings", "load_settings", "DEFAULT_HOME"]

DEFAULT_HOME = Path.home() / ".appmigrate"

_CONFIG_FILE_NAMES: list[str] = [
    "appmigrate.yaml",
    "appmigrate.yml",
    ".appmigrate.yaml",
    ".appmigrate.yml",
]


class AppMigrateSettings(BaseModel):
    """Top-level appmigrate configuration."""

    cache_dir: Path = Field(
        default_factory=lambda: DEFAULT_HOME / "metadata",
        description="Directory holding cached <Framework>.json migration metadata.",
    )
    resources_dir: Path = Field(
        default_factory=lambda: DEFAULT_HOME / "resources",
        description="Directory holding platform assets laid out as <framework>/<version>/<file>.",
    )
    configurations: list[str] = Field(
        default_factory=lambda: ["debug", "release"],
        description="Build configurations the project is expected to have.",
    )
    auto_upgrade_project_file: bool = Field(
        default=True,
        description="Re-save descriptors that were upgraded from a legacy layout on load.",
    )
    validate_descriptor: bool = Field(
        default=False,
        description="Validate descriptor properties against the framework schema on load.",
    )


def _find_config_file(search_dir: Path) -> Path | None:
    """Walk up from *search_dir* looking for a config file."""
    current = search_dir.resolve()
    while True:
        for name in _CONFIG_FILE_NAMES:
            candidate = current / name
            if candidate.is_file():
                return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def _resolve_relative(raw: dict[str, Any], base_dir: Path) -> dict[str, Any]:
    for key in ("cache_dir", "resources_dir"):
        value = raw.get(key)
        if value is not None and not Path(value).expanduser().is_absolute():
            raw[key] = base_dir / value
        elif value is not None:
            raw[key] = Path(value).expanduser()
    return raw


def load_settings(
    config_path: Path | None = None,
    search_dir: Path | None = None,
) -> AppMigrateSettings:
    """Load settings from a YAML file, falling back to defaults.

    Relative ``cache_dir`` / ``resources_dir`` values are resolved against the
    directory of the file that declared them.
    """
    raw: dict[str, Any] = {}
    found: Path | None = None

    if config_path is not None:
        resolved = Path(config_path).resolve()
        if resolved.is_file():
            found = resolved
    else:
        found = _find_config_file(search_dir or Path.cwd())

    if found is not None:
        raw = yaml.safe_load(found.read_text(encoding="utf-8")) or {}
        raw = _resolve_relative(raw, found.parent)

    return AppMigrateSettings(**raw)
