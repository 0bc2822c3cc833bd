"""Per-framework capability table: asset layout, secondary SDK rules and schema."""

from __future__ import annotations

from dataclasses import dataclass

from appmigrate.core.versioning import compare_versions
from appmigrate.project.schema import DescriptorSchema, PropertySpec

__all__ = [
    "CORDOVA",
    "NATIVESCRIPT",
    "FRAMEWORK_PROPERTY",
    "FRAMEWORK_VERSION_PROPERTY",
    "CORE_PLUGINS_PROPERTY",
    "SCHEMA_VERSION_PROPERTY",
    "SecondarySdkRule",
    "FrameworkCapabilities",
    "FRAMEWORKS",
    "get_framework",
]

CORDOVA = "Cordova"
NATIVESCRIPT = "NativeScript"

FRAMEWORK_PROPERTY = "Framework"
FRAMEWORK_VERSION_PROPERTY = "FrameworkVersion"
CORE_PLUGINS_PROPERTY = "CorePlugins"
SCHEMA_VERSION_PROPERTY = "schemaVersion"


@dataclass(frozen=True)
class SecondarySdkRule:
    """A dependent SDK whose newer versions need a minimum framework version.

    SDK versions above ``threshold`` require the framework to be at least
    ``minimum_framework_version``. ``fallback_version`` is the SDK version
    offered when the framework is moved below that minimum.
    """

    property_name: str
    label: str
    supported_versions: tuple[str, ...]
    threshold: str
    minimum_framework_version: str
    fallback_version: str

    def requires_minimum_framework(self, sdk_version: str) -> bool:
        return compare_versions(sdk_version, self.threshold) > 0

    def is_compatible(self, sdk_version: str, framework_version: str) -> bool:
        if not self.requires_minimum_framework(sdk_version):
            return True
        return compare_versions(framework_version, self.minimum_framework_version) >= 0


@dataclass(frozen=True)
class FrameworkCapabilities:
    name: str
    schema: DescriptorSchema
    platforms: tuple[str, ...] = ()
    asset_file_template: str | None = None
    manifest_file: str | None = None
    manifest_dependency: str | None = None
    secondary_sdk: SecondarySdkRule | None = None

    def asset_file_name(self, platform: str) -> str:
        if self.asset_file_template is None:
            raise ValueError(f"{self.name} projects have no platform asset files")
        return self.asset_file_template.format(platform=platform).lower()


_COMMON_PROPERTIES: dict[str, PropertySpec] = {
    FRAMEWORK_PROPERTY: PropertySpec(description="Target framework of the project."),
    FRAMEWORK_VERSION_PROPERTY: PropertySpec(description="Framework version in Major.Minor.Patch form."),
    SCHEMA_VERSION_PROPERTY: PropertySpec(type="integer", description="Descriptor schema version."),
    "ProjectName": PropertySpec(description="Name of the project."),
    "ProjectGuid": PropertySpec(description="Unique project identifier."),
    "AppIdentifier": PropertySpec(description="Application identifier, e.g. com.example.app."),
    "DisplayName": PropertySpec(description="Name shown on the device home screen."),
    "BundleVersion": PropertySpec(description="Application version."),
    "AndroidPermissions": PropertySpec(type="array", description="Android permissions requested by the app."),
    "iOSDeviceFamily": PropertySpec(
        type="array", description="Supported iOS device families.", valid_values=["1", "2"],
    ),
}

_WP_SDK = SecondarySdkRule(
    property_name="WPSdk",
    label="Windows Phone SDK",
    supported_versions=("8.0", "8.1"),
    threshold="8.0",
    minimum_framework_version="3.7.0",
    fallback_version="8.0",
)

FRAMEWORKS: dict[str, FrameworkCapabilities] = {
    CORDOVA: FrameworkCapabilities(
        name=CORDOVA,
        schema=DescriptorSchema(
            framework=CORDOVA,
            properties={
                **_COMMON_PROPERTIES,
                CORE_PLUGINS_PROPERTY: PropertySpec(type="array", description="Integrated Cordova plugins."),
                "WPSdk": PropertySpec(
                    description="Windows Phone SDK version.", valid_values=list(_WP_SDK.supported_versions),
                ),
            },
        ),
        platforms=("Android", "iOS", "WP8"),
        asset_file_template="cordova.{platform}.js",
        secondary_sdk=_WP_SDK,
    ),
    NATIVESCRIPT: FrameworkCapabilities(
        name=NATIVESCRIPT,
        schema=DescriptorSchema(
            framework=NATIVESCRIPT,
            properties={
                **_COMMON_PROPERTIES,
                CORE_PLUGINS_PROPERTY: PropertySpec(type="array", description="Integrated NativeScript plugins."),
            },
        ),
        manifest_file="package.json",
        manifest_dependency="tns-core-modules",
    ),
}


def get_framework(name: str) -> FrameworkCapabilities | None:
    """Look up capabilities by framework name (case-insensitive)."""
    for key, capabilities in FRAMEWORKS.items():
        if key.lower() == name.lower():
            return capabilities
    return None
