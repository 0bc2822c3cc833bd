"""Orchestration of framework and secondary SDK version changes."""

from __future__ import annotations

import json
import logging
import shutil
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator

from appmigrate.core.assets import AssetReplacement, MigrationAttempt
from appmigrate.core.errors import (
    AppMigrateError,
    AssetReplacementFailed,
    IncompatibleDependentVersion,
    UnsupportedFrameworkVersion,
)
from appmigrate.core.plugin_resolver import PluginRenameResolver
from appmigrate.core.stages import MigrationStage
from appmigrate.core.version_table import FrameworkVersionInfo, VersionTable
from appmigrate.core.versioning import compare_versions, same_version
from appmigrate.project.descriptor import ProjectDescriptor
from appmigrate.project.frameworks import CORE_PLUGINS_PROPERTY, FrameworkCapabilities, SecondarySdkRule
from appmigrate.project.store import ConfigurationStore
from appmigrate.sources.base import BaseAssetSource, BaseMetadataSource

__all__ = ["FrameworkMigrationEngine", "MigrationResult", "PluginChange"]

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


@dataclass(frozen=True)
class PluginChange:
    configuration: str | None
    before: list[str]
    after: list[str]

    @property
    def removed(self) -> list[str]:
        return [p for p in self.before if p not in self.after]

    @property
    def added(self) -> list[str]:
        return [p for p in self.after if p not in self.before]


@dataclass
class MigrationResult:
    framework: str
    from_version: str
    to_version: str
    display_name: str = ""
    stage: MigrationStage = MigrationStage.IDLE
    from_secondary: str | None = None
    to_secondary: str | None = None
    plugin_changes: list[PluginChange] = field(default_factory=list)
    replaced_files: list[Path] = field(default_factory=list)
    deprecated: bool = False

    @property
    def changed(self) -> bool:
        return self.from_version != self.to_version or self.from_secondary != self.to_secondary


class FrameworkMigrationEngine:
    """Central orchestrator for version changes of a single project.

    Runs sequentially and assumes exclusive access to the project directory.
    """

    def __init__(
        self,
        store: ConfigurationStore,
        metadata_source: BaseMetadataSource,
        asset_source: BaseAssetSource,
        confirm: Confirm | None = None,
    ) -> None:
        self.store = store
        self.metadata_source = metadata_source
        self.asset_source = asset_source
        self._confirm = confirm

    # -- public operations -------------------------------------------------

    def change_framework_version(self, descriptor: ProjectDescriptor, new_version: str) -> MigrationResult:
        result = self._new_result(descriptor, new_version, descriptor.secondary_sdk_version)
        if same_version(new_version, descriptor.framework_version):
            logger.debug("Project already targets %s %s", descriptor.framework, new_version)
            result.to_version = descriptor.framework_version
            result.stage = MigrationStage.COMMITTED
            return result

        result.stage = MigrationStage.VALIDATING_TARGET
        with _stage_errors(result):
            capabilities = self._capabilities(descriptor)
            table = self.metadata_source.fetch_version_table(capabilities.name)
            self._validate_framework_target(table, capabilities, new_version, result)
            result.to_secondary = self._reconcile_secondary(descriptor, capabilities, result.to_version)
        return self._migrate(descriptor, capabilities, table, result)

    def change_secondary_sdk_version(self, descriptor: ProjectDescriptor, new_sdk: str) -> MigrationResult:
        current_version = descriptor.framework_version
        result = self._new_result(descriptor, current_version, new_sdk)
        result.stage = MigrationStage.VALIDATING_TARGET
        with _stage_errors(result):
            capabilities = self._capabilities(descriptor)
            rule = capabilities.secondary_sdk
            if rule is None:
                raise IncompatibleDependentVersion(
                    f"{capabilities.name} projects do not have a secondary SDK version."
                )
            if descriptor.secondary_sdk_version is not None and same_version(new_sdk, descriptor.secondary_sdk_version):
                result.stage = MigrationStage.COMMITTED
                return result
            self._validate_secondary_target(rule, new_sdk)

            table: VersionTable | None = None
            if not rule.is_compatible(new_sdk, current_version):
                table = self.metadata_source.fetch_version_table(capabilities.name)
                selected = self._select_compatible_framework(table, rule)
                if selected is None or not self._ask(
                    f"You are trying to use a version of {rule.label} that is not supported by "
                    f"your project's {capabilities.name} version. Do you want to use {selected.display_name or selected.version}?"
                ):
                    raise IncompatibleDependentVersion(
                        f"Unable to use {rule.label} {new_sdk} as the current {capabilities.name} "
                        f"version {current_version} does not support it. You should target at least "
                        f"{capabilities.name} {rule.minimum_framework_version}."
                    )
                result.to_version = selected.version
                self._validate_framework_target(table, capabilities, selected.version, result)

        logger.info("Migrating to %s %s", rule.label, new_sdk)
        return self._migrate(descriptor, capabilities, table, result)

    # -- validation ----------------------------------------------------------

    @staticmethod
    def _capabilities(descriptor: ProjectDescriptor) -> FrameworkCapabilities:
        capabilities = descriptor.capabilities
        if capabilities is None:
            raise UnsupportedFrameworkVersion(f"Unknown framework '{descriptor.framework}'.")
        return capabilities

    @staticmethod
    def _validate_framework_target(
        table: VersionTable,
        capabilities: FrameworkCapabilities,
        new_version: str,
        result: MigrationResult,
    ) -> None:
        if not table.is_supported(new_version):
            supported = ", ".join(v.version for v in table.supported_versions)
            raise UnsupportedFrameworkVersion(
                f"The selected version {new_version} is not supported. Supported versions are {supported}."
            )
        info = table.find_version(new_version)
        if capabilities.manifest_dependency is not None:
            if info is None or not info.modules_version:
                raise UnsupportedFrameworkVersion(
                    f"No {capabilities.manifest_dependency} version is known for "
                    f"{capabilities.name} {new_version}. Refresh the migration metadata."
                )
        if info is not None:
            result.to_version = info.version
        result.display_name = table.display_name(new_version)
        if table.is_deprecated(new_version):
            result.deprecated = True
            logger.warning(
                "%s %s is deprecated and will not be available in a future release.",
                capabilities.name, new_version,
            )

    def _reconcile_secondary(
        self,
        descriptor: ProjectDescriptor,
        capabilities: FrameworkCapabilities,
        new_version: str,
    ) -> str | None:
        """Return the secondary SDK version to commit alongside *new_version*."""
        rule = capabilities.secondary_sdk
        current = descriptor.secondary_sdk_version
        if rule is None or current is None or rule.is_compatible(current, new_version):
            return current

        if not self._ask(
            f"You are trying to use a version of {capabilities.name} that does not support the "
            f"current {rule.label} version. Do you want to use {rule.label} {rule.fallback_version}?"
        ):
            raise IncompatibleDependentVersion(
                f"Unable to use {capabilities.name} version {new_version}. The project uses "
                f"{rule.label} {current} which is not supported in this {capabilities.name} version."
            )
        self._validate_secondary_target(rule, rule.fallback_version)
        if not rule.is_compatible(rule.fallback_version, new_version):
            raise IncompatibleDependentVersion(
                f"{rule.label} {rule.fallback_version} is not compatible with {capabilities.name} {new_version}."
            )
        return rule.fallback_version

    @staticmethod
    def _validate_secondary_target(rule: SecondarySdkRule, sdk: str) -> None:
        if sdk not in rule.supported_versions:
            raise IncompatibleDependentVersion(
                f"The selected version {sdk} is not supported. "
                f"Supported versions are {', '.join(rule.supported_versions)}."
            )

    @staticmethod
    def _select_compatible_framework(table: VersionTable, rule: SecondarySdkRule) -> FrameworkVersionInfo | None:
        selected = table.latest_stable()
        if selected is not None and compare_versions(selected.version, rule.minimum_framework_version) >= 0:
            return selected
        return table.latest_experimental_at_least(rule.minimum_framework_version)

    def _ask(self, question: str) -> bool:
        if self._confirm is None:
            logger.debug("No prompt available, declining: %s", question)
            return False
        return self._confirm(question)

    # -- mutation --------------------------------------------------------------

    def _migrate(
        self,
        descriptor: ProjectDescriptor,
        capabilities: FrameworkCapabilities,
        table: VersionTable | None,
        result: MigrationResult,
    ) -> MigrationResult:
        snapshot = descriptor.snapshot()
        old_version = descriptor.framework_version

        if table is not None and not same_version(result.to_version, old_version):
            logger.info("Migrating to %s version %s", capabilities.name, result.display_name or result.to_version)
            result.stage = MigrationStage.MIGRATING_PLUGINS
            self._migrate_plugins(descriptor, table, old_version, result)

            result.stage = MigrationStage.REPLACING_PLATFORM_ASSETS
            try:
                result.replaced_files = MigrationAttempt().replace_all(
                    self._asset_replacements(descriptor, capabilities, table, result.to_version)
                )
            except AssetReplacementFailed as exc:
                descriptor.restore(snapshot)
                result.stage = MigrationStage.ROLLED_BACK
                if exc.rolled_back:
                    exc.stage = MigrationStage.ROLLED_BACK
                raise

        result.stage = MigrationStage.COMMITTING
        descriptor.framework_version = result.to_version
        if result.to_secondary != result.from_secondary:
            descriptor.secondary_sdk_version = result.to_secondary
        with _stage_errors(result):
            self.store.save(descriptor)

        result.stage = MigrationStage.COMMITTED
        logger.info("Successfully migrated to version %s", result.display_name or result.to_version)
        return result

    def _migrate_plugins(
        self,
        descriptor: ProjectDescriptor,
        table: VersionTable,
        old_version: str,
        result: MigrationResult,
    ) -> None:
        resolver = PluginRenameResolver(table)
        configurations: list[str | None] = (
            list(descriptor.configurations) if descriptor.has_build_configurations else [None]
        )
        for configuration in configurations:
            plugins = descriptor.core_plugins(configuration)
            if plugins is None:
                continue
            migrated = resolver.migrate(plugins, old_version, result.to_version)
            logger.debug("Migrated core plugins (%s) to: %s", configuration or "base", ", ".join(migrated))
            descriptor.set_property(CORE_PLUGINS_PROPERTY, migrated, configuration)
            result.plugin_changes.append(PluginChange(configuration, plugins, migrated))

    def _asset_replacements(
        self,
        descriptor: ProjectDescriptor,
        capabilities: FrameworkCapabilities,
        table: VersionTable,
        new_version: str,
    ) -> Iterator[AssetReplacement]:
        project_dir = Path(descriptor.project_dir or Path.cwd())

        if capabilities.asset_file_template is not None:
            for platform in capabilities.platforms:
                target = project_dir / capabilities.asset_file_name(platform)
                source = self.asset_source.resolve_asset_path(capabilities.name, new_version, platform)
                yield AssetReplacement(
                    target=target,
                    write=_copy_from(source),
                    description=f"{target.name} for {platform} platform",
                )

        if capabilities.manifest_file and capabilities.manifest_dependency:
            info = table.find_version(new_version)
            modules_version = info.modules_version if info else None
            yield AssetReplacement(
                target=project_dir / capabilities.manifest_file,
                write=_pin_dependency(capabilities.manifest_dependency, modules_version or ""),
                description=f"{capabilities.manifest_dependency} dependency in {capabilities.manifest_file}",
            )

    @staticmethod
    def _new_result(descriptor: ProjectDescriptor, to_version: str, to_secondary: str | None) -> MigrationResult:
        return MigrationResult(
            framework=descriptor.framework,
            from_version=descriptor.framework_version,
            to_version=to_version,
            from_secondary=descriptor.secondary_sdk_version,
            to_secondary=to_secondary,
        )


def _copy_from(source: Path) -> Callable[[Path], None]:
    def write(target: Path) -> None:
        shutil.copyfile(source, target)
    return write


def _pin_dependency(name: str, version: str) -> Callable[[Path], None]:
    def write(target: Path) -> None:
        manifest: dict = {}
        if target.exists():
            manifest = json.loads(target.read_text(encoding="utf-8"))
        manifest.setdefault("dependencies", {})[name] = version
        target.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
    return write


@contextmanager
def _stage_errors(result: MigrationResult) -> Iterator[None]:
    """Stamp the current stage onto domain errors that do not carry one."""
    try:
        yield
    except AppMigrateError as exc:
        if exc.stage is None:
            exc.stage = result.stage
        raise
