"""appmigrate CLI – Typer multi-command application."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape

from appmigrate.config.settings import AppMigrateSettings, load_settings
from appmigrate.core.engine import FrameworkMigrationEngine, MigrationResult
from appmigrate.core.errors import (
    AppMigrateError,
    AssetReplacementFailed,
    InvalidProperty,
    PersistFailed,
)
from appmigrate.core.stages import MigrationStage
from appmigrate.project.descriptor import ProjectDescriptor
from appmigrate.project.frameworks import FRAMEWORK_VERSION_PROPERTY, get_framework
from appmigrate.project.store import ConfigurationStore
from appmigrate.sources.asset_resources import LocalAssetSource
from appmigrate.sources.metadata_cache import CachedMetadataSource
from appmigrate.utils.logger import (
    configure_logging,
    console,
    create_summary_panel,
    create_table,
    print_error,
    print_file_action,
    print_info,
    print_stage,
    print_success,
    print_warning,
)

__all__ = ["app"]

app = typer.Typer(
    name="appmigrate",
    help="Manage Cordova / NativeScript project descriptors and migrate them between framework versions.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
prop_app = typer.Typer(help="Print and edit project properties.", no_args_is_help=True)
app.add_typer(prop_app, name="prop")

_STAGE_HINTS = {
    MigrationStage.IDLE: "Nothing on disk was modified.",
    MigrationStage.VALIDATING_TARGET: "Nothing on disk was modified.",
    MigrationStage.MIGRATING_PLUGINS: "Nothing on disk was modified.",
    MigrationStage.REPLACING_PLATFORM_ASSETS: "Platform asset files may have been modified.",
    MigrationStage.ROLLED_BACK: "Platform asset files were restored to their previous state.",
    MigrationStage.COMMITTING: "Platform asset files were updated but the project file may be stale.",
}


class _Session:
    def __init__(self, settings: AppMigrateSettings, root: Path, assume_yes: bool) -> None:
        self.settings = settings
        self.root = root
        self.store = ConfigurationStore(settings)
        self.metadata = CachedMetadataSource(settings.cache_dir)
        self.engine = FrameworkMigrationEngine(
            store=self.store,
            metadata_source=self.metadata,
            asset_source=LocalAssetSource(settings.resources_dir),
            confirm=(lambda _question: True) if assume_yes else _confirm,
        )

    def load(self) -> ProjectDescriptor:
        return self.store.load(self.root)


def _confirm(question: str) -> bool:
    return typer.confirm(question, default=False)


def _session(config: Path | None, project_dir: Path | None, assume_yes: bool, verbose: bool) -> _Session:
    configure_logging(verbose)
    root = (project_dir or Path.cwd()).resolve()
    settings = load_settings(config_path=config, search_dir=root)
    return _Session(settings, root, assume_yes)


def _fail(exc: AppMigrateError) -> None:
    print_error(str(exc))
    if exc.stage is not None:
        hint = _STAGE_HINTS.get(exc.stage)
        if isinstance(exc, AssetReplacementFailed) and exc.inconsistent_files:
            hint = None
        print_stage(exc.stage.value, hint)
    code = 2 if isinstance(exc, (AssetReplacementFailed, PersistFailed)) else 1
    raise typer.Exit(code=code)


def _print_result(result: MigrationResult) -> None:
    if not result.changed:
        print_info(f"Project already targets {result.framework} {result.to_version}.")
        return

    fields = [("Framework", result.framework)]
    if result.from_version != result.to_version:
        fields.append(("Version", f"{result.from_version} → {result.display_name or result.to_version}"))
    if result.from_secondary != result.to_secondary:
        fields.append(("SDK", f"{result.from_secondary or '-'} → {result.to_secondary or '-'}"))
    fields.append(("Stage", result.stage.value))
    console.print(create_summary_panel("🔁 Migration", fields))

    changed_plugins = [c for c in result.plugin_changes if c.before != c.after]
    if changed_plugins:
        console.print(create_table(
            "🧩 Core plugins",
            [("Configuration", "bold"), ("Removed", "red"), ("Added", "green")],
            [[c.configuration or "all", "\n".join(c.removed), "\n".join(c.added)] for c in changed_plugins],
        ))
    for path in result.replaced_files:
        print_file_action("replaced", path)
    if result.deprecated:
        print_warning(
            f"{result.framework} {result.to_version} is deprecated and will not be available in a future release."
        )
    print_success(f"Successfully migrated to version {result.display_name or result.to_version}.")


@app.command()
def migrate(
    version: str = typer.Argument(..., help="Target framework version, e.g. 3.7.0"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to appmigrate.yaml"),
    project_dir: Optional[Path] = typer.Option(None, "--dir", "-d", help="Project directory"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Accept dependent version changes without prompting"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Migrate the project to another framework version."""
    session = _session(config, project_dir, yes, verbose)
    try:
        descriptor = session.load()
        result = session.engine.change_framework_version(descriptor, version)
    except AppMigrateError as exc:
        _fail(exc)
    _print_result(result)


@app.command()
def sdk(
    version: str = typer.Argument(..., help="Target secondary SDK version, e.g. 8.1"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to appmigrate.yaml"),
    project_dir: Optional[Path] = typer.Option(None, "--dir", "-d", help="Project directory"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Accept framework version changes without prompting"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Change the secondary SDK version (Windows Phone SDK for Cordova projects)."""
    session = _session(config, project_dir, yes, verbose)
    try:
        descriptor = session.load()
        result = session.engine.change_secondary_sdk_version(descriptor, version)
    except AppMigrateError as exc:
        _fail(exc)
    _print_result(result)


@app.command()
def versions(
    framework: Optional[str] = typer.Option(None, "--framework", "-f", help="Framework to list (defaults to the project's)"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to appmigrate.yaml"),
    project_dir: Optional[Path] = typer.Option(None, "--dir", "-d", help="Project directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """List the framework versions known to the migration metadata."""
    session = _session(config, project_dir, False, verbose)
    current: str | None = None
    try:
        if framework is None:
            descriptor = session.load()
            framework, current = descriptor.framework, descriptor.framework_version
        table = session.metadata.fetch_version_table(_framework_name(framework))
    except AppMigrateError as exc:
        _fail(exc)

    rows = []
    for info in table.supported_versions:
        status = []
        if current == info.version:
            status.append("[accent]current[/accent]")
        if info.is_experimental:
            status.append("[warning]experimental[/warning]")
        if table.is_deprecated(info.version):
            status.append("[error]deprecated[/error]")
        rows.append([info.version, info.display_name or info.version, ", ".join(status)])
    console.print(create_table(
        f"📦 {table.framework} versions", [("Version", "bold"), ("Display name", ""), ("Status", "")], rows,
    ))


@app.command()
def plugins(
    version: Optional[str] = typer.Option(None, "--version", help="Framework version (defaults to the project's)"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to appmigrate.yaml"),
    project_dir: Optional[Path] = typer.Option(None, "--dir", "-d", help="Project directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """List the integrated plugins of a framework version."""
    session = _session(config, project_dir, False, verbose)
    try:
        descriptor = session.load()
        table = session.metadata.fetch_version_table(descriptor.framework)
    except AppMigrateError as exc:
        _fail(exc)

    target = version or descriptor.framework_version
    configurations: list[str | None] = (
        list(descriptor.configurations) if descriptor.has_build_configurations else [None]
    )
    enabled = [set(descriptor.core_plugins(c) or []) for c in configurations]
    available = table.plugins_for_version(target)
    if not available:
        print_warning(f"No integrated plugins are recorded for {descriptor.framework} {target}.")
        raise typer.Exit(code=0)
    console.print(create_table(
        f"🧩 Integrated plugins for {descriptor.framework} {target}",
        [("Plugin", "bold")] + [(f"Enabled ({c})" if c else "Enabled", "green") for c in configurations],
        [[name] + ["yes" if name in e else "" for e in enabled] for name in available],
    ))


@app.command("import-metadata")
def import_metadata(
    path: Path = typer.Argument(..., help="Migration metadata JSON file"),
    framework: str = typer.Option(..., "--framework", "-f", help="Framework the metadata describes"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to appmigrate.yaml"),
    project_dir: Optional[Path] = typer.Option(None, "--dir", "-d", help="Directory used to locate appmigrate.yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Validate a metadata file and install it into the local cache."""
    session = _session(config, project_dir, False, verbose)
    try:
        table = session.metadata.import_metadata(_framework_name(framework), path)
    except AppMigrateError as exc:
        _fail(exc)
    print_success(
        f"Installed {table.framework} metadata: {len(table.supported_versions)} version(s), "
        f"{len(table.renames)} rename(s)."
    )


def _framework_name(name: str) -> str:
    capabilities = get_framework(name)
    if capabilities is None:
        _fail(InvalidProperty(f"Unknown framework '{name}'."))
    return capabilities.name


@prop_app.command("print")
def prop_print(
    name: Optional[str] = typer.Argument(None, help="Property to print (all when omitted)"),
    configuration: Optional[str] = typer.Option(None, "--configuration", "-C", help="Build configuration, e.g. debug"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to appmigrate.yaml"),
    project_dir: Optional[Path] = typer.Option(None, "--dir", "-d", help="Project directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Print one or all project properties."""
    session = _session(config, project_dir, False, verbose)
    try:
        descriptor = session.load()
        if name is not None:
            normalized = _normalize(descriptor, name)
            if descriptor.get_property(normalized, configuration) is None:
                raise InvalidProperty(f"Unrecognized project property '{name}'.")
            console.print(escape(_format_value(descriptor.get_property(normalized, configuration))))
            return
    except AppMigrateError as exc:
        _fail(exc)

    names = set(descriptor.properties)
    if configuration is not None:
        names.update(descriptor.configuration_overlays.get(configuration.lower(), {}))
    for key in sorted(names, key=str.upper):
        console.print(f"{escape(key)}: {escape(_format_value(descriptor.get_property(key, configuration)))}")


def _update_property(
    mode: str,
    name: str,
    values: list[str],
    configuration: str | None,
    config: Path | None,
    project_dir: Path | None,
    yes: bool,
    verbose: bool,
) -> None:
    session = _session(config, project_dir, yes, verbose)
    try:
        descriptor = session.load()
        normalized = _normalize(descriptor, name)
        capabilities = descriptor.capabilities
        rule = capabilities.secondary_sdk if capabilities else None

        if mode == "set" and normalized == FRAMEWORK_VERSION_PROPERTY and len(values) == 1:
            _print_result(session.engine.change_framework_version(descriptor, values[0]))
            return
        if mode == "set" and rule is not None and normalized == rule.property_name and len(values) == 1:
            _print_result(session.engine.change_secondary_sdk_version(descriptor, values[0]))
            return

        current = descriptor.get_property(normalized, configuration)
        new_value = descriptor.schema.updated_value(normalized, current, mode, values)
        if configuration is not None:
            session.store.add_configuration(descriptor, configuration)
        descriptor.set_property(normalized, new_value, configuration)
        session.store.save(descriptor)
    except AppMigrateError as exc:
        _fail(exc)
    console.print(f"{escape(normalized)}: {escape(_format_value(new_value))}")


def _normalize(descriptor: ProjectDescriptor, name: str) -> str:
    schema = descriptor.schema
    normalized = schema.normalize_property_name(name, descriptor.properties) if schema else None
    if normalized is None:
        raise InvalidProperty(f"Invalid property name '{name}'.")
    return normalized


def _format_value(value: object) -> str:
    if isinstance(value, list):
        return " ".join(str(v) for v in value)
    return "" if value is None else str(value)


@prop_app.command("set")
def prop_set(
    name: str = typer.Argument(..., help="Property name"),
    values: List[str] = typer.Argument(..., help="One or more values"),
    configuration: Optional[str] = typer.Option(None, "--configuration", "-C", help="Build configuration, e.g. release"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to appmigrate.yaml"),
    project_dir: Optional[Path] = typer.Option(None, "--dir", "-d", help="Project directory"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Accept dependent version changes without prompting"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Set a property. FrameworkVersion and the secondary SDK go through migration."""
    _update_property("set", name, values, configuration, config, project_dir, yes, verbose)


@prop_app.command("add")
def prop_add(
    name: str = typer.Argument(..., help="Property name"),
    values: List[str] = typer.Argument(..., help="One or more values"),
    configuration: Optional[str] = typer.Option(None, "--configuration", "-C", help="Build configuration, e.g. release"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to appmigrate.yaml"),
    project_dir: Optional[Path] = typer.Option(None, "--dir", "-d", help="Project directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Add values to a collection property such as CorePlugins."""
    _update_property("add", name, values, configuration, config, project_dir, False, verbose)


@prop_app.command("remove")
def prop_remove(
    name: str = typer.Argument(..., help="Property name"),
    values: List[str] = typer.Argument(..., help="One or more values"),
    configuration: Optional[str] = typer.Option(None, "--configuration", "-C", help="Build configuration, e.g. release"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to appmigrate.yaml"),
    project_dir: Optional[Path] = typer.Option(None, "--dir", "-d", help="Project directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Remove values from a collection property such as CorePlugins."""
    _update_property("del", name, values, configuration, config, project_dir, False, verbose)


if __name__ == "__main__":
    app()
