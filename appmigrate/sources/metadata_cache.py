"""Migration metadata served from a local on-disk cache."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from appmigrate.core.errors import MetadataUnavailable
from appmigrate.core.version_table import VersionTable, load_version_table
from appmigrate.sources.base import BaseMetadataSource

__all__ = ["CachedMetadataSource"]

logger = logging.getLogger(__name__)


class CachedMetadataSource(BaseMetadataSource):
    """Reads ``<cache_dir>/<Framework>.json`` files kept fresh by an external updater."""

    def __init__(self, cache_dir: Path) -> None:
        self.cache_dir = Path(cache_dir).expanduser()
        self._tables: dict[str, VersionTable] = {}

    def metadata_path(self, framework: str) -> Path:
        return self.cache_dir / f"{framework}.json"

    def fetch_version_table(self, framework: str) -> VersionTable:
        if framework not in self._tables:
            path = self.metadata_path(framework)
            logger.debug("Loading %s migration metadata from %s", framework, path)
            self._tables[framework] = load_version_table(path, framework)
        return self._tables[framework]

    def import_metadata(self, framework: str, source: Path) -> VersionTable:
        """Validate *source* and install it as the cached metadata for *framework*."""
        table = load_version_table(source, framework)
        target = self.metadata_path(framework)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            if Path(source).resolve() != target.resolve():
                shutil.copyfile(source, target)
        except OSError as exc:
            raise MetadataUnavailable(f"Unable to install {framework} metadata into {target}: {exc}") from exc
        logger.debug("Installed %s metadata into %s", framework, target)
        self._tables[framework] = table
        return table
