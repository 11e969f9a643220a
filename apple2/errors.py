"""Exception hierarchy for snapshot save/load failures."""

from __future__ import annotations


class SnapshotError(Exception):
    """Base class for every failure reported by the snapshot engine."""


class SnapshotIOError(SnapshotError):
    """The snapshot file could not be opened or created."""


class SnapshotFormatError(SnapshotError):
    """The document is malformed, mis-versioned, or names unknown content."""


class LegacySnapshotError(SnapshotError):
    """The file uses the retired first-generation binary format."""


__all__ = [
    "SnapshotError",
    "SnapshotIOError",
    "SnapshotFormatError",
    "LegacySnapshotError",
]
