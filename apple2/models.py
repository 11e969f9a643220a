"""Machine, CPU and card type tags shared across the snapshot engine."""

from __future__ import annotations

from enum import Enum

from .errors import SnapshotFormatError

NUM_SLOTS = 8


class CpuType(Enum):
    """Main CPU variants; values are the snapshot spellings."""

    CPU_6502 = "6502"
    CPU_65C02 = "65C02"
    CPU_Z80 = "Z80"

    @classmethod
    def from_snapshot_name(cls, name: str) -> "CpuType":
        for member in cls:
            if member.value == name:
                return member
        raise SnapshotFormatError(f"Load: Unknown main CPU type: {name}")


class Apple2Type(Enum):
    """Recognised machine models; values are the snapshot spellings."""

    APPLE2 = "Apple]["
    APPLE2PLUS = "Apple][+"
    APPLE2E = "Apple//e"
    APPLE2E_ENHANCED = "Enhanced Apple//e"
    APPLE2C = "Apple2c"
    PRAVETS82 = "Pravets82"
    PRAVETS8M = "Pravets8M"
    PRAVETS8A = "Pravets8A"
    TK3000_2E = "TK3000//e"

    @classmethod
    def from_snapshot_name(cls, name: str) -> "Apple2Type":
        for member in cls:
            if member.value == name:
                return member
        raise SnapshotFormatError(f"Load: Unknown Apple2 type: {name}")

    @property
    def snapshot_name(self) -> str:
        return self.value

    @property
    def is_apple2_plus_or_clone(self) -> bool:
        """True for models without the //e auxiliary slot."""

        return self in _APPLE2_PLUS_OR_CLONE

    @property
    def is_pravets(self) -> bool:
        return self in (
            Apple2Type.PRAVETS82,
            Apple2Type.PRAVETS8M,
            Apple2Type.PRAVETS8A,
        )

    @property
    def default_cpu(self) -> CpuType:
        if self in _65C02_MODELS:
            return CpuType.CPU_65C02
        return CpuType.CPU_6502


_APPLE2_PLUS_OR_CLONE = frozenset(
    {
        Apple2Type.APPLE2,
        Apple2Type.APPLE2PLUS,
        Apple2Type.PRAVETS82,
        Apple2Type.PRAVETS8M,
        Apple2Type.PRAVETS8A,
    }
)

_65C02_MODELS = frozenset(
    {
        Apple2Type.APPLE2E_ENHANCED,
        Apple2Type.APPLE2C,
        Apple2Type.PRAVETS8A,
        Apple2Type.TK3000_2E,
    }
)


class CardType(Enum):
    """Tags recorded in the per-slot configuration table."""

    EMPTY = "Empty"
    DISK2 = "Disk2"
    SSC = "SSC"
    MOCKINGBOARD_C = "MockingboardC"
    GENERIC_PRINTER = "GenericPrinter"
    GENERIC_HDD = "GenericHDD"
    MOUSE_INTERFACE = "MouseInterface"
    Z80 = "Z80"
    PHASOR = "Phasor"
    LANGUAGE_CARD = "LanguageCard"
    SATURN_128K = "Saturn128K"
    # Auxiliary slot occupants
    COL80 = "80Col"
    EXTENDED_80COL = "Extended80Col"
    RAMWORKS_III = "RamWorksIII"


__all__ = ["NUM_SLOTS", "Apple2Type", "CpuType", "CardType"]
