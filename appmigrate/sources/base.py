"""Abstract sources the migration engine consumes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from appmigrate.core.version_table import VersionTable


__all__ = ["BaseMetadataSource", "BaseAssetSource"]


class BaseMetadataSource(ABC):
    """Supplies the rename and integrated-plugin catalog of a framework."""

    @abstractmethod
    def fetch_version_table(self, framework: str) -> VersionTable:
        """Return the materialised :class:`VersionTable` for *framework*."""


class BaseAssetSource(ABC):
    """Locates the generated platform files shipped for each framework version."""

    @abstractmethod
    def resolve_asset_path(self, framework: str, version: str, platform: str) -> Path:
        """Return the file to copy in for *platform* when targeting *version*."""
