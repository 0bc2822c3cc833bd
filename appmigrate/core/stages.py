"""Migration state-machine stages."""

from __future__ import annotations

from enum import Enum

__all__ = ["MigrationStage"]


class MigrationStage(str, Enum):
    """Stages of one version change, in the order they are entered.

    A run ends in ``COMMITTED`` or ``ROLLED_BACK``; errors carry the stage
    that was reached when they were raised.
    """

    IDLE = "Idle"
    VALIDATING_TARGET = "ValidatingTarget"
    MIGRATING_PLUGINS = "MigratingPlugins"
    REPLACING_PLATFORM_ASSETS = "ReplacingPlatformAssets"
    COMMITTING = "Committing"
    COMMITTED = "Committed"
    ROLLED_BACK = "RolledBack"
