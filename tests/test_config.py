"""Tests for configuration loading."""
from __future__ import annotations
from pathlib import Path
from appmigrate.config.settings import DEFAULT_HOME, AppMigrateSettings, load_settings


class TestAppMigrateSettings:
    def test_defaults(self) -> None:
        s = AppMigrateSettings()
        assert s.cache_dir == DEFAULT_HOME / "metadata" and s.resources_dir == DEFAULT_HOME / "resources"
        assert s.configurations == ["debug", "release"]
        assert s.auto_upgrade_project_file and not s.validate_descriptor

    def test_custom_values(self) -> None:
        s = AppMigrateSettings(cache_dir="/tmp/meta", validate_descriptor=True)
        assert s.cache_dir == Path("/tmp/meta") and s.validate_descriptor


class TestLoadSettings:
    def test_load_defaults_no_file(self, tmp_path) -> None:
        assert load_settings(search_dir=tmp_path).configurations == ["debug", "release"]

    def test_load_from_yaml(self, tmp_path) -> None:
        (tmp_path / "appmigrate.yaml").write_text("configurations: [debug, release, staging]\nauto_upgrade_project_file: false\n")
        s = load_settings(search_dir=tmp_path)
        assert s.configurations == ["debug", "release", "staging"] and not s.auto_upgrade_project_file

    def test_relative_dirs_resolved_against_config_file(self, tmp_path) -> None:
        (tmp_path / "appmigrate.yaml").write_text("cache_dir: meta\nresources_dir: /opt/res\n")
        s = load_settings(search_dir=tmp_path)
        assert s.cache_dir == tmp_path.resolve() / "meta" and s.resources_dir == Path("/opt/res")

    def test_explicit_path_takes_precedence(self, tmp_path) -> None:
        (tmp_path / "appmigrate.yaml").write_text("validate_descriptor: false\n")
        explicit = tmp_path / "custom.yaml"
        explicit.write_text("validate_descriptor: true\n")
        assert load_settings(config_path=explicit, search_dir=tmp_path).validate_descriptor

    def test_empty_yaml_returns_defaults(self, tmp_path) -> None:
        (tmp_path / "appmigrate.yaml").write_text("")
        assert load_settings(search_dir=tmp_path).auto_upgrade_project_file

    def test_parent_dir_search(self, tmp_path) -> None:
        (tmp_path / ".appmigrate.yml").write_text("validate_descriptor: true\n")
        child = tmp_path / "child" / "subdir"
        child.mkdir(parents=True)
        assert load_settings(search_dir=child).validate_descriptor
