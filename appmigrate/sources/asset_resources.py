"""Platform assets served from a local resources directory."""

from __future__ import annotations

from pathlib import Path

from appmigrate.project.frameworks import get_framework
from appmigrate.sources.base import BaseAssetSource

__all__ = ["LocalAssetSource"]


class LocalAssetSource(BaseAssetSource):
    """Resolves ``<resources_dir>/<framework>/<version>/<asset file>``."""

    def __init__(self, resources_dir: Path) -> None:
        self.resources_dir = Path(resources_dir).expanduser()

    def resolve_asset_path(self, framework: str, version: str, platform: str) -> Path:
        capabilities = get_framework(framework)
        if capabilities is None:
            raise ValueError(f"Unknown framework '{framework}'")
        return self.resources_dir / capabilities.name.lower() / version / capabilities.asset_file_name(platform)
