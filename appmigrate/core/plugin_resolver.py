"""Resolution of plugin identifiers across framework versions."""

from __future__ import annotations

import logging

from appmigrate.core.version_table import RenameRecord, VersionTable
from appmigrate.core.versioning import compare_versions, same_version

__all__ = ["PluginRenameResolver"]

logger = logging.getLogger(__name__)


class PluginRenameResolver:
    """Applies the rename chain and availability pruning of a :class:`VersionTable`."""

    def __init__(self, table: VersionTable) -> None:
        self.table = table

    def migrate(self, plugins: list[str], from_version: str, to_version: str) -> list[str]:
        if same_version(from_version, to_version):
            return list(plugins)

        upgrade = compare_versions(to_version, from_version) > 0
        renames = self._renames_in_window(from_version, to_version, upgrade)
        available = self.table.integrated_plugins_for(to_version)

        result: list[str] = []
        for plugin in plugins:
            name = self._follow_chain(plugin, renames, upgrade)
            if available is not None and name not in available:
                logger.debug("Dropping %s: not available in version %s", name, to_version)
                continue
            result.append(name)
        return result

    def _renames_in_window(self, from_version: str, to_version: str, upgrade: bool) -> list[RenameRecord]:
        low, high = (from_version, to_version) if upgrade else (to_version, from_version)
        window = [
            r for r in self.table.renames
            if compare_versions(r.effective_version, low) > 0
            and compare_versions(r.effective_version, high) <= 0
        ]
        if not upgrade:
            window.reverse()
        return window

    @staticmethod
    def _follow_chain(plugin: str, renames: list[RenameRecord], upgrade: bool) -> str:
        name = plugin
        for rename in renames:
            if upgrade and name == rename.old_name:
                logger.debug("Renaming %s to %s (%s)", name, rename.new_name, rename.effective_version)
                name = rename.new_name
            elif not upgrade and name == rename.new_name:
                logger.debug("Renaming %s to %s (%s)", name, rename.old_name, rename.effective_version)
                name = rename.old_name
        return name
