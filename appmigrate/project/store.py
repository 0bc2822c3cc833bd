"""Reading and writing project descriptors and their overlay files."""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any

from appmigrate.config.settings import AppMigrateSettings
from appmigrate.core.errors import (
    CorruptDescriptor,
    NotAProject,
    PersistFailed,
    UnsupportedSchemaVersion,
)
from appmigrate.project.descriptor import ProjectDescriptor
from appmigrate.project.frameworks import (
    CORDOVA,
    FRAMEWORK_PROPERTY,
    SCHEMA_VERSION_PROPERTY,
    get_framework,
)

__all__ = ["ConfigurationStore", "PROJECT_FILE_NAME", "SUPPORTED_SCHEMA_VERSION", "overlay_file_name"]

logger = logging.getLogger(__name__)

PROJECT_FILE_NAME = ".abproject"
SUPPORTED_SCHEMA_VERSION = 1

_OVERLAY_FILE_RE = re.compile(r"^\.([-_A-Za-z0-9]+?)\.abproject$", re.IGNORECASE)
_LEGACY_FRAMEWORK_KEY = "projectType"


def overlay_file_name(configuration: str) -> str:
    return f".{configuration.lower()}{PROJECT_FILE_NAME}"


class ConfigurationStore:
    """Owns the on-disk layout of a project's descriptor files."""

    def __init__(self, settings: AppMigrateSettings | None = None) -> None:
        self.settings = settings or AppMigrateSettings()

    def find_project_dir(self, start: Path) -> Path | None:
        current = Path(start).resolve()
        while True:
            logger.debug("Looking for project in '%s'", current)
            if (current / PROJECT_FILE_NAME).is_file():
                logger.debug("Project directory is '%s'.", current)
                return current
            parent = current.parent
            if parent == current:
                logger.debug("No project found at or above '%s'.", start)
                return None
            current = parent

    def load(self, root_path: Path) -> ProjectDescriptor:
        project_dir = self.find_project_dir(root_path)
        if project_dir is None:
            raise NotAProject(Path(root_path).resolve())

        project_file = project_dir / PROJECT_FILE_NAME
        data = self._read_json(project_file)
        upgraded = self._upgrade_legacy(project_file, data)

        framework = data[FRAMEWORK_PROPERTY]
        capabilities = get_framework(framework) if isinstance(framework, str) else None
        if capabilities is None:
            raise CorruptDescriptor(project_file, f"unknown framework '{framework}'")
        if self.settings.validate_descriptor:
            problems = capabilities.schema.validate_properties(data)
            if problems:
                raise CorruptDescriptor(project_file, "; ".join(problems))

        overlays = self._read_overlays(project_dir)
        descriptor = ProjectDescriptor(
            data,
            project_dir=project_dir,
            configuration_overlays=overlays,
            known_configurations=self.settings.configurations,
        )

        if upgraded and self.settings.auto_upgrade_project_file:
            logger.debug("Saving upgraded project file %s", project_file)
            self.save(descriptor)
        return descriptor

    def save(self, descriptor: ProjectDescriptor, root_path: Path | None = None) -> None:
        """Write the base file and every overlay; each file is replaced atomically."""
        project_dir = Path(root_path or descriptor.project_dir or Path.cwd())
        _write_json_atomic(project_dir / PROJECT_FILE_NAME, descriptor.properties)
        for configuration, overlay in descriptor.configuration_overlays.items():
            _write_json_atomic(project_dir / overlay_file_name(configuration), overlay)
        descriptor.project_dir = project_dir

    def add_configuration(self, descriptor: ProjectDescriptor, configuration: str) -> Path:
        """Create an empty overlay file for *configuration* if it does not exist yet."""
        project_dir = Path(descriptor.project_dir or Path.cwd())
        path = project_dir / overlay_file_name(configuration)
        if not path.exists():
            _write_json_atomic(path, {})
        descriptor.enable_build_configuration(configuration)
        return path

    @staticmethod
    def _read_json(path: Path) -> dict[str, Any]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise CorruptDescriptor(path, str(exc)) from exc
        if not isinstance(data, dict):
            raise CorruptDescriptor(path, "top-level value must be an object")
        return data

    @staticmethod
    def _upgrade_legacy(path: Path, data: dict[str, Any]) -> bool:
        """Check the schema version and fill in properties older tools omitted."""
        upgraded = False
        version = data.get(SCHEMA_VERSION_PROPERTY)
        if version is None:
            data[SCHEMA_VERSION_PROPERTY] = SUPPORTED_SCHEMA_VERSION
            upgraded = True
        elif not isinstance(version, int) or isinstance(version, bool):
            raise CorruptDescriptor(path, f"'{SCHEMA_VERSION_PROPERTY}' must be an integer")
        elif version > SUPPORTED_SCHEMA_VERSION:
            raise UnsupportedSchemaVersion(path, version, SUPPORTED_SCHEMA_VERSION)

        if FRAMEWORK_PROPERTY not in data:
            data[FRAMEWORK_PROPERTY] = data.pop(_LEGACY_FRAMEWORK_KEY, CORDOVA)
            upgraded = True
        return upgraded

    def _read_overlays(self, project_dir: Path) -> dict[str, dict[str, Any]]:
        overlays: dict[str, dict[str, Any]] = {}
        for entry in sorted(project_dir.iterdir()):
            match = _OVERLAY_FILE_RE.match(entry.name)
            if not match or not entry.is_file():
                continue
            overlays[match.group(1).lower()] = self._read_json(entry)
            logger.debug("Loaded %s configuration from %s", match.group(1).lower(), entry.name)
        return overlays


def _write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    tmp_name: str | None = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=path.name, suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2)
            handle.write("\n")
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise PersistFailed(path, str(exc)) from exc
