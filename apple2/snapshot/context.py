"""State threaded through unit and card routines for one save or load."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

from ..cards.registry import CardRegistry
from ..config import ResolvedConfiguration, SnapshotSettings

if TYPE_CHECKING:
    from ..machine import Apple2Machine
    from .engine import SnapshotHooks


@dataclass
class LoadContext:
    """``old`` is the configuration before the load; ``new`` fills in as units load."""

    machine: "Apple2Machine"
    cards: CardRegistry
    settings: SnapshotSettings
    hooks: "SnapshotHooks"
    old: ResolvedConfiguration
    new: ResolvedConfiguration
    base_path: str = ""
    slots_skipped: bool = False
    units_loaded: List[str] = field(default_factory=list)


@dataclass
class SaveContext:
    machine: "Apple2Machine"
    cards: CardRegistry


__all__ = ["LoadContext", "SaveContext"]
