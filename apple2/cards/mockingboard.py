"""Mockingboard C and Phasor sound cards (two SY6522 + AY8910 pairs)."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..errors import SnapshotFormatError
from ..models import CardType
from ..yaml_helper import YamlLoadHelper, YamlSaveHelper
from .base import Card, load_bytes, require_sub_map, save_bytes

NUM_SUBUNITS = 2
SY6522_REGS = 16
AY8910_REGS = 16

PHASOR_MODE_MOCKINGBOARD = 0
PHASOR_MODE_PHASOR = 5


@dataclass
class SoundSubunit:
    via_regs: bytearray = field(default_factory=lambda: bytearray(SY6522_REGS))
    ay_regs: bytearray = field(default_factory=lambda: bytearray(AY8910_REGS))
    timer1_active: bool = False

    def reset(self) -> None:
        self.via_regs[:] = bytes(SY6522_REGS)
        self.ay_regs[:] = bytes(AY8910_REGS)
        self.timer1_active = False


class MockingboardCard(Card):
    SNAPSHOT_NAME = "Mockingboard C"
    SNAPSHOT_VERSION = 1
    CARD_TYPE = CardType.MOCKINGBOARD_C
    ALLOWED_SLOTS = (4, 5)

    def __init__(self) -> None:
        self.units = [SoundSubunit() for _ in range(NUM_SUBUNITS)]
        self.reset()

    def reset(self) -> None:
        for unit in self.units:
            unit.reset()

    def _save_state(self, writer: YamlSaveHelper) -> None:
        for index, unit in enumerate(self.units):
            with writer.label(f"Unit{index}"):
                save_bytes(writer, "SY6522", unit.via_regs)
                save_bytes(writer, "AY8910", unit.ay_regs)
                writer.save_bool("Timer1 Active", unit.timer1_active)

    def _load_state(self, loader: YamlLoadHelper, version: int) -> None:
        _ = version
        for index, unit in enumerate(self.units):
            require_sub_map(loader, f"Unit{index}")
            unit.via_regs = load_bytes(loader, "SY6522", SY6522_REGS)
            unit.ay_regs = load_bytes(loader, "AY8910", AY8910_REGS)
            unit.timer1_active = loader.load_bool("Timer1 Active")
            loader.pop_map()


class PhasorCard(MockingboardCard):
    """Mockingboard superset with a selectable Phasor mode."""

    SNAPSHOT_NAME = "Phasor"
    CARD_TYPE = CardType.PHASOR
    ALLOWED_SLOTS = (4,)

    def reset(self) -> None:
        super().reset()
        self.phasor_mode = PHASOR_MODE_MOCKINGBOARD
        self.clock_scale = 1

    def _save_state(self, writer: YamlSaveHelper) -> None:
        writer.save_uint("Phasor Mode", self.phasor_mode)
        writer.save_uint("Clock Scale", self.clock_scale)
        super()._save_state(writer)

    def _load_state(self, loader: YamlLoadHelper, version: int) -> None:
        mode = loader.load_uint("Phasor Mode")
        if mode not in (PHASOR_MODE_MOCKINGBOARD, PHASOR_MODE_PHASOR):
            raise SnapshotFormatError(f"Phasor: Unknown mode: {mode}")
        self.phasor_mode = mode
        self.clock_scale = loader.load_uint("Clock Scale")
        super()._load_state(loader, version)


__all__ = ["MockingboardCard", "PhasorCard", "SoundSubunit"]
