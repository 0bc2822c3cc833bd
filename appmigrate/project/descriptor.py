"""In-memory project descriptor with per-configuration overlays."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from appmigrate.project.frameworks import (
    CORE_PLUGINS_PROPERTY,
    FRAMEWORK_PROPERTY,
    FRAMEWORK_VERSION_PROPERTY,
    SCHEMA_VERSION_PROPERTY,
    FrameworkCapabilities,
    get_framework,
)
from appmigrate.project.schema import DescriptorSchema

__all__ = ["ProjectDescriptor", "DescriptorSnapshot", "DEFAULT_CONFIGURATIONS"]

DEFAULT_CONFIGURATIONS: tuple[str, ...] = ("debug", "release")


@dataclass(frozen=True)
class DescriptorSnapshot:
    properties: dict[str, Any]
    overlays: dict[str, dict[str, Any]]
    has_build_configurations: bool


class ProjectDescriptor:
    """Base properties plus configuration overlays.

    Reads for a configuration return the overlay value when present and the
    base value otherwise. Writes go to the overlay only when the project has
    build configurations; otherwise they go to the base map.
    """

    def __init__(
        self,
        properties: dict[str, Any],
        *,
        project_dir: Path | None = None,
        configuration_overlays: dict[str, dict[str, Any]] | None = None,
        has_build_configurations: bool | None = None,
        known_configurations: tuple[str, ...] | list[str] = DEFAULT_CONFIGURATIONS,
        schema: DescriptorSchema | None = None,
    ) -> None:
        self.properties = properties
        self.project_dir = project_dir
        self.configuration_overlays: dict[str, dict[str, Any]] = {
            name.lower(): data for name, data in (configuration_overlays or {}).items()
        }
        if has_build_configurations is None:
            has_build_configurations = bool(self.configuration_overlays)
        self._has_build_configurations = has_build_configurations
        self._known_configurations = tuple(c.lower() for c in known_configurations)
        self._schema = schema

    @property
    def framework(self) -> str:
        return self.properties.get(FRAMEWORK_PROPERTY, "")

    @property
    def capabilities(self) -> FrameworkCapabilities | None:
        return get_framework(self.framework)

    @property
    def schema(self) -> DescriptorSchema | None:
        if self._schema is not None:
            return self._schema
        capabilities = self.capabilities
        return capabilities.schema if capabilities else None

    @property
    def framework_version(self) -> str:
        return self.properties.get(FRAMEWORK_VERSION_PROPERTY, "")

    @framework_version.setter
    def framework_version(self, value: str) -> None:
        self.properties[FRAMEWORK_VERSION_PROPERTY] = value

    @property
    def schema_version(self) -> int | None:
        return self.properties.get(SCHEMA_VERSION_PROPERTY)

    @property
    def secondary_sdk_version(self) -> str | None:
        capabilities = self.capabilities
        if capabilities is None or capabilities.secondary_sdk is None:
            return None
        return self.properties.get(capabilities.secondary_sdk.property_name) or None

    @secondary_sdk_version.setter
    def secondary_sdk_version(self, value: str | None) -> None:
        capabilities = self.capabilities
        if capabilities is None or capabilities.secondary_sdk is None:
            raise ValueError(f"{self.framework} projects do not carry a secondary SDK version")
        name = capabilities.secondary_sdk.property_name
        if value is None:
            self.properties.pop(name, None)
        else:
            self.properties[name] = value

    @property
    def has_build_configurations(self) -> bool:
        return self._has_build_configurations

    @property
    def configurations(self) -> list[str]:
        names = list(self._known_configurations)
        names.extend(c for c in self.configuration_overlays if c not in names)
        return names

    def enable_build_configuration(self, configuration: str) -> None:
        self.configuration_overlays.setdefault(configuration.lower(), {})
        self._has_build_configurations = True

    def get_property(self, name: str, configuration: str | None = None) -> Any:
        if configuration is not None:
            overlay = self.configuration_overlays.get(configuration.lower())
            if overlay is not None and name in overlay:
                return overlay[name]
        return self.properties.get(name)

    def set_property(self, name: str, value: Any, configuration: str | None = None) -> None:
        if self._has_build_configurations and configuration is not None:
            overlay = self.configuration_overlays.setdefault(configuration.lower(), {})
            overlay[name] = value
        else:
            self.properties[name] = value

    def core_plugins(self, configuration: str | None = None) -> list[str] | None:
        plugins = self.get_property(CORE_PLUGINS_PROPERTY, configuration)
        return list(plugins) if plugins is not None else None

    def snapshot(self) -> DescriptorSnapshot:
        return DescriptorSnapshot(
            properties=copy.deepcopy(self.properties),
            overlays=copy.deepcopy(self.configuration_overlays),
            has_build_configurations=self._has_build_configurations,
        )

    def restore(self, snapshot: DescriptorSnapshot) -> None:
        self.properties = copy.deepcopy(snapshot.properties)
        self.configuration_overlays = copy.deepcopy(snapshot.overlays)
        self._has_build_configurations = snapshot.has_build_configurations
