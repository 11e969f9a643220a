"""Versioned machine-state snapshots."""

from .context import LoadContext, SaveContext
from .engine import (
    DEFAULT_SNAPSHOT_NAME,
    SNAPSHOT_FILE_VERSION,
    PowerCycleHooks,
    SnapshotEngine,
    SnapshotHooks,
    SnapshotResult,
    SnapshotStatus,
)
from .reconciler import ConfigurationReconciler
from .units import UnitHandler, UnitRegistry, default_unit_registry

__all__ = [
    "DEFAULT_SNAPSHOT_NAME",
    "SNAPSHOT_FILE_VERSION",
    "ConfigurationReconciler",
    "LoadContext",
    "PowerCycleHooks",
    "SaveContext",
    "SnapshotEngine",
    "SnapshotHooks",
    "SnapshotResult",
    "SnapshotStatus",
    "UnitHandler",
    "UnitRegistry",
    "default_unit_registry",
]
