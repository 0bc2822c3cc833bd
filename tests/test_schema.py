"""Tests for descriptor schema validation and property updates."""
from __future__ import annotations
import pytest
from appmigrate.core.errors import InvalidProperty
from appmigrate.project.frameworks import get_framework


@pytest.fixture
def schema():
    return get_framework("cordova").schema


class TestNormalizeName:
    def test_matches_schema_case_insensitively(self, schema) -> None:
        assert schema.normalize_property_name("coreplugins") == "CorePlugins"

    def test_falls_back_to_existing_data(self, schema) -> None:
        assert schema.normalize_property_name("customkey", {"CustomKey": 1}) == "CustomKey"

    def test_unknown(self, schema) -> None:
        assert schema.normalize_property_name("nothing") is None


class TestValidateProperties:
    def test_valid_descriptor(self, schema) -> None:
        props = {"Framework": "Cordova", "schemaVersion": 1, "CorePlugins": ["a"], "WPSdk": "8.1"}
        assert schema.validate_properties(props) == []

    def test_reports_each_problem(self, schema) -> None:
        problems = schema.validate_properties({
            "CorePlugins": "a", "schemaVersion": "1", "WPSdk": "7.0", "iOSDeviceFamily": ["3"],
        })
        assert len(problems) == 4

    def test_unknown_properties_ignored(self, schema) -> None:
        assert schema.validate_properties({"Anything": object()}) == []


class TestUpdatedValue:
    def test_set_scalar(self, schema) -> None:
        assert schema.updated_value("DisplayName", "Old", "set", ["New"]) == "New"

    def test_scalar_requires_single_value(self, schema) -> None:
        with pytest.raises(InvalidProperty):
            schema.updated_value("DisplayName", None, "set", ["a", "b"])

    def test_add_to_scalar_rejected(self, schema) -> None:
        with pytest.raises(InvalidProperty, match="not a collection"):
            schema.updated_value("DisplayName", "x", "add", ["y"])

    def test_integer_conversion(self, schema) -> None:
        assert schema.updated_value("schemaVersion", 1, "set", ["2"]) == 2
        with pytest.raises(InvalidProperty):
            schema.updated_value("schemaVersion", 1, "set", ["two"])

    def test_array_add_skips_duplicates(self, schema) -> None:
        assert schema.updated_value("CorePlugins", ["a"], "add", ["a", "b"]) == ["a", "b"]

    def test_array_del(self, schema) -> None:
        assert schema.updated_value("CorePlugins", ["a", "b"], "del", ["a"]) == ["b"]
        with pytest.raises(InvalidProperty):
            schema.updated_value("CorePlugins", ["a"], "del", ["z"])

    def test_array_set_replaces(self, schema) -> None:
        assert schema.updated_value("CorePlugins", ["a"], "set", ["c", "d"]) == ["c", "d"]

    def test_valid_values_enforced(self, schema) -> None:
        with pytest.raises(InvalidProperty, match="Valid values are 8.0, 8.1"):
            schema.updated_value("WPSdk", "8.0", "set", ["9.0"])

    def test_unknown_mode(self, schema) -> None:
        with pytest.raises(InvalidProperty):
            schema.updated_value("CorePlugins", [], "toggle", ["a"])
