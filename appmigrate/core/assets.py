"""Sequential, reversible replacement of generated platform files."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

from appmigrate.core.errors import AssetReplacementFailed

__all__ = ["AssetReplacement", "ChangedFile", "MigrationAttempt", "BACKUP_SUFFIX"]

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"


@dataclass(frozen=True)
class AssetReplacement:
    """Overwrite ``target`` by calling ``write(target)``."""

    target: Path
    write: Callable[[Path], None]
    description: str = ""


@dataclass(frozen=True)
class ChangedFile:
    path: Path
    backup_path: Path | None


@dataclass
class MigrationAttempt:
    """Tracks files copied aside during one replacement run.

    A file is recorded as soon as its backup is complete and before it is
    overwritten, so ``changed_files`` is always a prefix of the attempted
    replacements. Files that did not exist beforehand have no backup and are
    removed on rollback.
    """

    changed_files: list[ChangedFile] = field(default_factory=list)

    def replace_all(self, replacements: Iterable[AssetReplacement]) -> list[Path]:
        try:
            for replacement in replacements:
                self._replace(replacement)
        except Exception as exc:
            logger.debug("Asset replacement failed: %s. Restoring previous state.", exc)
            inconsistent = self.rollback()
            raise AssetReplacementFailed(
                f"Replacing platform assets failed: {exc}.",
                rolled_back=not inconsistent,
                inconsistent_files=inconsistent,
            ) from exc

        replaced = [c.path for c in self.changed_files]
        self._discard_backups(self.changed_files)
        self.changed_files = []
        return replaced

    def _replace(self, replacement: AssetReplacement) -> None:
        target = replacement.target
        logger.debug("Replacing %s", replacement.description or target)
        backup: Path | None = None
        if target.exists():
            backup = target.with_name(target.name + BACKUP_SUFFIX)
            shutil.copy2(target, backup)
        self.changed_files.append(ChangedFile(path=target, backup_path=backup))
        replacement.write(target)

    def rollback(self) -> list[Path]:
        """Restore every recorded file in the order it was changed.

        Returns the files that could not be restored; their backups are kept.
        """
        inconsistent: list[Path] = []
        restored: list[ChangedFile] = []
        for changed in self.changed_files:
            logger.debug("Reverting %s", changed.path)
            try:
                if changed.backup_path is None:
                    changed.path.unlink(missing_ok=True)
                else:
                    shutil.copy2(changed.backup_path, changed.path)
            except OSError:
                logger.warning("Unable to restore %s", changed.path, exc_info=True)
                inconsistent.append(changed.path)
            else:
                restored.append(changed)
        self._discard_backups(restored)
        self.changed_files = []
        return inconsistent

    @staticmethod
    def _discard_backups(changed_files: list[ChangedFile]) -> None:
        for changed in changed_files:
            if changed.backup_path is None:
                continue
            try:
                changed.backup_path.unlink(missing_ok=True)
            except OSError:
                logger.warning("Unable to delete backup %s", changed.backup_path, exc_info=True)
