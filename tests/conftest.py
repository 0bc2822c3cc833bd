"""Shared pytest fixtures for the appmigrate test suite."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from appmigrate.config.settings import AppMigrateSettings
from appmigrate.core.engine import FrameworkMigrationEngine
from appmigrate.project.store import ConfigurationStore
from appmigrate.sources.asset_resources import LocalAssetSource
from appmigrate.sources.metadata_cache import CachedMetadataSource

AUDIO = "org.apache.cordova.AudioHandler"
MEDIA = "org.apache.cordova.media"
CAMERA = "org.apache.cordova.camera"
STATUSBAR = "org.apache.cordova.statusbar"

CORDOVA_METADATA = {
    "supportedVersions": [
        {"version": "3.5.0", "displayName": "Cordova 3.5.0"},
        {"version": "3.7.0", "displayName": "Cordova 3.7.0"},
        {"version": "4.0.0", "displayName": "Cordova 4.0.0 (Experimental)"},
    ],
    "deprecatedVersions": [{"version": "3.5.0"}],
    "renamedPlugins": [{"version": "3.7.0", "oldName": AUDIO, "newName": MEDIA}],
    "integratedPlugins": {
        "3.5.0": [AUDIO, CAMERA, STATUSBAR],
        "3.7.0": [MEDIA, CAMERA],
    },
}

NATIVESCRIPT_METADATA = {
    "supportedVersions": [
        {"version": "2.0.0", "displayName": "NativeScript 2.0.0", "modulesVersion": "2.0.1"},
        {"version": "2.1.0", "displayName": "NativeScript 2.1.0", "modulesVersion": "2.1.1"},
        {"version": "2.2.0", "displayName": "NativeScript 2.2.0"},
    ],
    "renamedPlugins": [],
    "integratedPlugins": {},
}

PLATFORMS = ("android", "ios", "wp8")


def write_project(root: Path, properties: dict, overlays: dict[str, dict] | None = None) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / ".abproject").write_text(json.dumps(properties), encoding="utf-8")
    for name, data in (overlays or {}).items():
        (root / f".{name}.abproject").write_text(json.dumps(data), encoding="utf-8")
    return root


def read_json(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def metadata_dir(tmp_path: Path) -> Path:
    cache = tmp_path / "cache"
    cache.mkdir()
    (cache / "Cordova.json").write_text(json.dumps(CORDOVA_METADATA), encoding="utf-8")
    (cache / "NativeScript.json").write_text(json.dumps(NATIVESCRIPT_METADATA), encoding="utf-8")
    return cache


@pytest.fixture
def resources_dir(tmp_path: Path) -> Path:
    resources = tmp_path / "resources"
    for version in ("3.5.0", "3.7.0", "4.0.0"):
        version_dir = resources / "cordova" / version
        version_dir.mkdir(parents=True)
        for platform in PLATFORMS:
            (version_dir / f"cordova.{platform}.js").write_text(f"// cordova {version} {platform}\n")
    return resources


@pytest.fixture
def settings(metadata_dir: Path, resources_dir: Path) -> AppMigrateSettings:
    return AppMigrateSettings(cache_dir=metadata_dir, resources_dir=resources_dir)


@pytest.fixture
def cordova_project(tmp_path: Path) -> Path:
    root = write_project(tmp_path / "app", {
        "Framework": "Cordova",
        "FrameworkVersion": "3.5.0",
        "schemaVersion": 1,
        "ProjectName": "app",
        "CorePlugins": [AUDIO, CAMERA, STATUSBAR],
        "WPSdk": "8.0",
    })
    for platform in PLATFORMS:
        (root / f"cordova.{platform}.js").write_text(f"// project copy {platform}\n")
    return root


@pytest.fixture
def nativescript_project(tmp_path: Path) -> Path:
    root = write_project(tmp_path / "ns-app", {
        "Framework": "NativeScript",
        "FrameworkVersion": "2.0.0",
        "schemaVersion": 1,
        "ProjectName": "ns-app",
    })
    (root / "package.json").write_text(json.dumps({
        "name": "ns-app",
        "dependencies": {"tns-core-modules": "2.0.1", "lodash": "4.0.0"},
    }))
    return root


@pytest.fixture
def make_engine(settings: AppMigrateSettings):
    """Build an engine whose prompts are answered by *answer* and recorded in ``questions``."""

    def factory(answer: bool | None = None, questions: list[str] | None = None) -> FrameworkMigrationEngine:
        confirm = None
        if answer is not None:
            def confirm(question: str) -> bool:
                if questions is not None:
                    questions.append(question)
                return answer
        return FrameworkMigrationEngine(
            store=ConfigurationStore(settings),
            metadata_source=CachedMetadataSource(settings.cache_dir),
            asset_source=LocalAssetSource(settings.resources_dir),
            confirm=confirm,
        )

    return factory
