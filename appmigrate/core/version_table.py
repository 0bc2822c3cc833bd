"""Pydantic models for per-framework migration metadata."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from appmigrate.core.errors import MetadataUnavailable
from appmigrate.core.versioning import compare_versions, same_version, version_key

__all__ = ["RenameRecord", "FrameworkVersionInfo", "VersionTable", "load_version_table"]

EXPERIMENTAL_TAG = "Experimental"


class RenameRecord(BaseModel):
    """A plugin identifier that changed name starting at ``effective_version``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    effective_version: str = Field(alias="version")
    old_name: str = Field(alias="oldName")
    new_name: str = Field(alias="newName")


class FrameworkVersionInfo(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: str
    display_name: str = Field(default="", alias="displayName")
    modules_version: str | None = Field(default=None, alias="modulesVersion")

    @property
    def is_experimental(self) -> bool:
        return EXPERIMENTAL_TAG in self.display_name


class VersionTable(BaseModel):
    """Read-only catalog of renames and integrated plugins for one framework."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    framework: str = ""
    supported_versions: tuple[FrameworkVersionInfo, ...] = Field(default=(), alias="supportedVersions")
    deprecated_versions: tuple[FrameworkVersionInfo, ...] = Field(default=(), alias="deprecatedVersions")
    renames: tuple[RenameRecord, ...] = Field(default=(), alias="renamedPlugins")
    integrated_plugins: dict[str, frozenset[str]] = Field(default_factory=dict, alias="integratedPlugins")

    @field_validator("renames")
    @classmethod
    def _order_renames(cls, value: tuple[RenameRecord, ...]) -> tuple[RenameRecord, ...]:
        return tuple(sorted(value, key=lambda r: version_key(r.effective_version)))

    def integrated_plugins_for(self, version: str) -> frozenset[str] | None:
        """Return the integrated set for *version*, or ``None`` when untracked."""
        if version in self.integrated_plugins:
            return self.integrated_plugins[version]
        for key, plugins in self.integrated_plugins.items():
            if same_version(key, version):
                return plugins
        return None

    def plugins_for_version(self, version: str) -> list[str]:
        return sorted(self.integrated_plugins_for(version) or ())

    def find_version(self, version: str) -> FrameworkVersionInfo | None:
        for info in self.supported_versions:
            if same_version(info.version, version):
                return info
        return None

    def is_supported(self, version: str) -> bool:
        if not self.supported_versions:
            return True
        return self.find_version(version) is not None

    def is_deprecated(self, version: str) -> bool:
        return any(same_version(d.version, version) for d in self.deprecated_versions)

    def display_name(self, version: str) -> str:
        info = self.find_version(version)
        return info.display_name if info and info.display_name else version

    def latest_stable(self) -> FrameworkVersionInfo | None:
        stable = [v for v in self.supported_versions if not v.is_experimental]
        return stable[-1] if stable else None

    def latest_experimental_at_least(self, minimum: str) -> FrameworkVersionInfo | None:
        candidates = [
            v for v in self.supported_versions
            if v.is_experimental and compare_versions(v.version, minimum) >= 0
        ]
        return candidates[-1] if candidates else None


def load_version_table(path: Path, framework: str = "") -> VersionTable:
    """Parse a metadata JSON document into a :class:`VersionTable`."""
    try:
        raw: Any = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise MetadataUnavailable(f"No migration metadata for {framework or 'framework'} at {path}.")
    except (OSError, ValueError) as exc:
        raise MetadataUnavailable(f"Migration metadata at {path} is unreadable: {exc}") from exc
    if not isinstance(raw, dict):
        raise MetadataUnavailable(f"Migration metadata at {path} must be a JSON object.")
    raw.setdefault("framework", framework)
    try:
        return VersionTable.model_validate(raw)
    except ValidationError as exc:
        raise MetadataUnavailable(f"Migration metadata at {path} is invalid: {exc}") from exc
