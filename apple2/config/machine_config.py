"""Resolved hardware configuration: model, CPU, slot table, aux card, HDD."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Union

from ..models import NUM_SLOTS, Apple2Type, CardType, CpuType

if TYPE_CHECKING:
    from ..machine import Apple2Machine

# Slots whose occupants the current build fixes regardless of live state
FIXED_SLOT_CARDS: Dict[int, CardType] = {
    1: CardType.GENERIC_PRINTER,
    2: CardType.SSC,
    6: CardType.DISK2,
}
HDD_SLOT = 7


def _empty_slots() -> List[CardType]:
    return [CardType.EMPTY] * NUM_SLOTS


@dataclass
class ResolvedConfiguration:
    """One machine configuration as compared by the reconciler."""

    apple2_type: Apple2Type = Apple2Type.APPLE2E_ENHANCED
    cpu_type: CpuType = CpuType.CPU_65C02
    slots: List[CardType] = field(default_factory=_empty_slots)
    slot_aux: CardType = CardType.EMPTY
    enable_hdd: bool = False

    def __post_init__(self) -> None:
        if len(self.slots) != NUM_SLOTS:
            raise ValueError(f"Expected {NUM_SLOTS} slots, got {len(self.slots)}")

    @classmethod
    def from_machine(cls, machine: "Apple2Machine") -> "ResolvedConfiguration":
        """Capture the running configuration.

        Slots 1, 2 and 6 always report the build's fixed cards and slot 7
        reports the HDD only while it is enabled; every other slot and the
        aux slot come from what is actually installed.
        """

        slots = [machine.card_type(slot) for slot in range(NUM_SLOTS)]
        for slot, card_type in FIXED_SLOT_CARDS.items():
            slots[slot] = card_type
        hdd = machine.hdd_enabled
        slots[HDD_SLOT] = CardType.GENERIC_HDD if hdd else CardType.EMPTY
        return cls(
            apple2_type=machine.apple2_type,
            cpu_type=machine.cpu_type,
            slots=slots,
            slot_aux=machine.memory.aux_card,
            enable_hdd=hdd,
        )

    @classmethod
    def for_loading(cls, machine: "Apple2Machine") -> "ResolvedConfiguration":
        """Blank slate filled in as units load: nothing installed, HDD off."""

        return cls(apple2_type=machine.apple2_type, cpu_type=machine.cpu_type)

    def copy(self) -> "ResolvedConfiguration":
        return ResolvedConfiguration(
            apple2_type=self.apple2_type,
            cpu_type=self.cpu_type,
            slots=list(self.slots),
            slot_aux=self.slot_aux,
            enable_hdd=self.enable_hdd,
        )

    def differences(self, other: "ResolvedConfiguration") -> List[str]:
        """Human-readable list of fields that differ from ``other``."""

        diffs = []
        if self.apple2_type != other.apple2_type:
            diffs.append(f"model: {self.apple2_type.value} -> {other.apple2_type.value}")
        if self.cpu_type != other.cpu_type:
            diffs.append(f"cpu: {self.cpu_type.value} -> {other.cpu_type.value}")
        for slot, (mine, theirs) in enumerate(zip(self.slots, other.slots)):
            if mine != theirs:
                diffs.append(f"slot {slot}: {mine.value} -> {theirs.value}")
        if self.slot_aux != other.slot_aux:
            diffs.append(f"aux: {self.slot_aux.value} -> {other.slot_aux.value}")
        if self.enable_hdd != other.enable_hdd:
            diffs.append(f"hdd: {self.enable_hdd} -> {other.enable_hdd}")
        return diffs

    def to_dict(self) -> dict:
        return {
            "apple2_type": self.apple2_type.value,
            "cpu_type": self.cpu_type.value,
            "slots": [card.value for card in self.slots],
            "slot_aux": self.slot_aux.value,
            "enable_hdd": self.enable_hdd,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ResolvedConfiguration":
        return cls(
            apple2_type=Apple2Type(data.get("apple2_type", Apple2Type.APPLE2E_ENHANCED.value)),
            cpu_type=CpuType(data.get("cpu_type", CpuType.CPU_65C02.value)),
            slots=[CardType(value) for value in data.get("slots", [])] or _empty_slots(),
            slot_aux=CardType(data.get("slot_aux", CardType.EMPTY.value)),
            enable_hdd=bool(data.get("enable_hdd", False)),
        )

    def save(self, path: Union[str, Path]) -> None:
        """Save configuration to JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ResolvedConfiguration":
        """Load configuration from JSON file."""
        with open(path, "r") as f:
            return cls.from_dict(json.load(f))


__all__ = ["FIXED_SLOT_CARDS", "HDD_SLOT", "ResolvedConfiguration"]
