"""Configuration for the snapshot engine."""

from .machine_config import FIXED_SLOT_CARDS, HDD_SLOT, ResolvedConfiguration
from .snapshot_settings import SnapshotSettings

__all__ = ["FIXED_SLOT_CARDS", "HDD_SLOT", "ResolvedConfiguration", "SnapshotSettings"]
