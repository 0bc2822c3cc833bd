"""Tests for ConfigurationStore discovery, loading and saving."""
from __future__ import annotations
import json
import pytest
from appmigrate.config.settings import AppMigrateSettings
from appmigrate.core.errors import CorruptDescriptor, NotAProject, PersistFailed, UnsupportedSchemaVersion
from appmigrate.project.store import ConfigurationStore
from tests.conftest import read_json, write_project

BASE = {"Framework": "Cordova", "FrameworkVersion": "3.7.0", "schemaVersion": 1, "CorePlugins": ["a"]}


class TestDiscovery:
    def test_finds_project_in_parent(self, tmp_path) -> None:
        write_project(tmp_path, BASE)
        child = tmp_path / "www" / "js"
        child.mkdir(parents=True)
        assert ConfigurationStore().find_project_dir(child) == tmp_path.resolve()

    def test_not_a_project(self, tmp_path) -> None:
        with pytest.raises(NotAProject):
            ConfigurationStore().load(tmp_path)


class TestLoad:
    def test_loads_base_and_overlays(self, tmp_path) -> None:
        write_project(tmp_path, BASE, {"Debug": {"CorePlugins": ["b"]}, "release": {}})
        d = ConfigurationStore().load(tmp_path)
        assert d.framework == "Cordova" and d.project_dir == tmp_path.resolve()
        assert d.has_build_configurations
        assert d.get_property("CorePlugins", "debug") == ["b"]
        assert d.get_property("CorePlugins", "release") == ["a"]

    def test_no_overlays_means_no_build_configurations(self, tmp_path) -> None:
        write_project(tmp_path, BASE)
        assert not ConfigurationStore().load(tmp_path).has_build_configurations

    @pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
    def test_corrupt_base_file(self, tmp_path, content) -> None:
        (tmp_path / ".abproject").write_text(content)
        with pytest.raises(CorruptDescriptor):
            ConfigurationStore().load(tmp_path)

    def test_corrupt_overlay(self, tmp_path) -> None:
        write_project(tmp_path, BASE)
        (tmp_path / ".debug.abproject").write_text("nope")
        with pytest.raises(CorruptDescriptor):
            ConfigurationStore().load(tmp_path)

    def test_unknown_framework(self, tmp_path) -> None:
        write_project(tmp_path, {**BASE, "Framework": "Flutter"})
        with pytest.raises(CorruptDescriptor):
            ConfigurationStore().load(tmp_path)

    def test_newer_schema_version_rejected_without_mutation(self, tmp_path) -> None:
        write_project(tmp_path, {"FrameworkVersion": "3.7.0", "schemaVersion": 2})
        before = (tmp_path / ".abproject").read_bytes()
        with pytest.raises(UnsupportedSchemaVersion) as exc_info:
            ConfigurationStore().load(tmp_path)
        assert exc_info.value.found == 2
        assert (tmp_path / ".abproject").read_bytes() == before

    def test_legacy_project_upgraded_and_saved(self, tmp_path) -> None:
        write_project(tmp_path, {"projectType": "NativeScript", "FrameworkVersion": "2.0.0"})
        d = ConfigurationStore().load(tmp_path)
        assert d.framework == "NativeScript" and d.schema_version == 1
        on_disk = read_json(tmp_path / ".abproject")
        assert on_disk["Framework"] == "NativeScript" and "projectType" not in on_disk

    def test_legacy_upgrade_not_saved_when_disabled(self, tmp_path) -> None:
        write_project(tmp_path, {"FrameworkVersion": "3.7.0"})
        d = ConfigurationStore(AppMigrateSettings(auto_upgrade_project_file=False)).load(tmp_path)
        assert d.framework == "Cordova"
        assert "Framework" not in read_json(tmp_path / ".abproject")

    def test_schema_validation_on_load(self, tmp_path) -> None:
        write_project(tmp_path, {**BASE, "CorePlugins": "not-a-list"})
        with pytest.raises(CorruptDescriptor):
            ConfigurationStore(AppMigrateSettings(validate_descriptor=True)).load(tmp_path)


class TestSave:
    def test_save_writes_base_and_overlays(self, tmp_path) -> None:
        write_project(tmp_path, BASE, {"debug": {}, "release": {}})
        store = ConfigurationStore()
        d = store.load(tmp_path)
        d.set_property("DisplayName", "Release App", "release")
        d.framework_version = "4.0.0"
        store.save(d)
        assert read_json(tmp_path / ".abproject")["FrameworkVersion"] == "4.0.0"
        assert read_json(tmp_path / ".release.abproject") == {"DisplayName": "Release App"}
        assert read_json(tmp_path / ".debug.abproject") == {}
        assert not list(tmp_path.glob("*.tmp"))

    def test_add_configuration_creates_overlay_file(self, tmp_path) -> None:
        write_project(tmp_path, BASE)
        store = ConfigurationStore()
        d = store.load(tmp_path)
        path = store.add_configuration(d, "Release")
        assert path.name == ".release.abproject" and read_json(path) == {}
        assert d.has_build_configurations
        assert store.load(tmp_path).has_build_configurations

    def test_save_failure_is_persist_failed(self, tmp_path) -> None:
        write_project(tmp_path, BASE)
        store = ConfigurationStore()
        d = store.load(tmp_path)
        with pytest.raises(PersistFailed):
            store.save(d, tmp_path / "missing-dir")

    def test_saved_file_is_json(self, tmp_path) -> None:
        write_project(tmp_path, BASE)
        store = ConfigurationStore()
        store.save(store.load(tmp_path))
        assert json.loads((tmp_path / ".abproject").read_text())["CorePlugins"] == ["a"]
