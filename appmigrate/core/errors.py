"""Error taxonomy for descriptor loading and framework migration."""

from __future__ import annotations

from pathlib import Path

from appmigrate.core.stages import MigrationStage

__all__ = [
    "AppMigrateError",
    "NotAProject",
    "CorruptDescriptor",
    "UnsupportedSchemaVersion",
    "IncompatibleDependentVersion",
    "UnsupportedFrameworkVersion",
    "MetadataUnavailable",
    "AssetReplacementFailed",
    "PersistFailed",
    "InvalidProperty",
]


class AppMigrateError(Exception):
    """Base class for every error surfaced to the CLI."""

    def __init__(self, message: str, *, stage: MigrationStage | None = None) -> None:
        self.stage = stage
        super().__init__(message)


class NotAProject(AppMigrateError):
    def __init__(self, start_dir: Path) -> None:
        self.start_dir = start_dir
        super().__init__(f"No project found at or above '{start_dir}'.")


class CorruptDescriptor(AppMigrateError):
    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(
            f"The project file {path} is corrupted. Consider restoring an earlier "
            f"version from source control or backup. Additional technical info: {detail}"
        )


class UnsupportedSchemaVersion(AppMigrateError):
    def __init__(self, path: Path, found: int, supported: int) -> None:
        self.path = path
        self.found = found
        self.supported = supported
        super().__init__(
            f"The project file {path} uses schema version {found} but this tool "
            f"understands up to version {supported}. Upgrade appmigrate to work with it."
        )


class IncompatibleDependentVersion(AppMigrateError):
    pass


class UnsupportedFrameworkVersion(AppMigrateError):
    pass


class MetadataUnavailable(AppMigrateError):
    pass


class AssetReplacementFailed(AppMigrateError):
    """Raised after a failed asset replacement step.

    ``rolled_back`` is ``True`` when every touched file was restored. Otherwise
    ``inconsistent_files`` lists the files that may differ from their
    pre-migration contents.
    """

    def __init__(
        self,
        message: str,
        *,
        rolled_back: bool,
        inconsistent_files: list[Path] | None = None,
        stage: MigrationStage | None = MigrationStage.REPLACING_PLATFORM_ASSETS,
    ) -> None:
        self.rolled_back = rolled_back
        self.inconsistent_files = list(inconsistent_files or [])
        if self.inconsistent_files:
            listing = ", ".join(str(p) for p in self.inconsistent_files)
            message = f"{message} Rollback incomplete; these files may be inconsistent: {listing}"
        super().__init__(message, stage=stage)


class PersistFailed(AppMigrateError):
    def __init__(self, path: Path, detail: str, *, stage: MigrationStage | None = None) -> None:
        self.path = path
        super().__init__(f"Unable to save {path}: {detail}", stage=stage)


class InvalidProperty(AppMigrateError):
    pass
