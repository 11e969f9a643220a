"""Apple II machine-state snapshot engine."""

from .config import ResolvedConfiguration, SnapshotSettings
from .errors import (
    LegacySnapshotError,
    SnapshotError,
    SnapshotFormatError,
    SnapshotIOError,
)
from .machine import Apple2Machine
from .models import Apple2Type, CardType, CpuType
from .snapshot import (
    ConfigurationReconciler,
    PowerCycleHooks,
    SnapshotEngine,
    SnapshotHooks,
    SnapshotResult,
    SnapshotStatus,
)

__all__ = [
    "Apple2Machine",
    "Apple2Type",
    "CardType",
    "ConfigurationReconciler",
    "CpuType",
    "LegacySnapshotError",
    "PowerCycleHooks",
    "ResolvedConfiguration",
    "SnapshotEngine",
    "SnapshotError",
    "SnapshotFormatError",
    "SnapshotHooks",
    "SnapshotIOError",
    "SnapshotResult",
    "SnapshotSettings",
    "SnapshotStatus",
]
