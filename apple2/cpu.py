"""Main CPU register file and its snapshot block."""

from __future__ import annotations

from .errors import SnapshotFormatError
from .models import CpuType
from .yaml_helper import YamlLoadHelper, YamlSaveHelper

SS_YAML_KEY_CPU = "CPU"

# P register: unused bit and IRQ-disable set after reset
_P_RESET = 0x24


class Cpu:
    """6502/65C02 register state as seen by the snapshot engine."""

    def __init__(self, cpu_type: CpuType = CpuType.CPU_6502) -> None:
        self.cpu_type = cpu_type
        self.reset_registers()

    def reset_registers(self) -> None:
        self.a = 0
        self.x = 0
        self.y = 0
        self.p = _P_RESET
        self.s = 0xFF
        self.pc = 0
        self.cumulative_cycles = 0
        self.irq_pending = False
        self.nmi_pending = False

    def save_snapshot(self, writer: YamlSaveHelper) -> None:
        with writer.label(SS_YAML_KEY_CPU):
            writer.save_string("Type", self.cpu_type.value)
            writer.save_hex("A", self.a)
            writer.save_hex("X", self.x)
            writer.save_hex("Y", self.y)
            writer.save_hex("P", self.p)
            writer.save_hex("S", self.s)
            writer.save_hex("PC", self.pc, 4)
            writer.save_uint("Cumulative Cycles", self.cumulative_cycles)
            writer.save_bool("IRQ Pending", self.irq_pending)
            writer.save_bool("NMI Pending", self.nmi_pending)

    def load_snapshot(self, loader: YamlLoadHelper, version: int) -> None:
        """Restore registers; unit v2 also carries the CPU type."""

        if not loader.get_sub_map(SS_YAML_KEY_CPU):
            raise SnapshotFormatError(f"Expected sub-map name: {SS_YAML_KEY_CPU}")

        if version >= 2:
            self.cpu_type = CpuType.from_snapshot_name(loader.load_string("Type"))
        self.a = loader.load_uint("A") & 0xFF
        self.x = loader.load_uint("X") & 0xFF
        self.y = loader.load_uint("Y") & 0xFF
        self.p = loader.load_uint("P") & 0xFF
        self.s = loader.load_uint("S") & 0xFF
        self.pc = loader.load_uint("PC") & 0xFFFF
        self.cumulative_cycles = loader.load_uint("Cumulative Cycles")
        self.irq_pending = loader.load_bool("IRQ Pending")
        self.nmi_pending = loader.load_bool("NMI Pending")

        loader.pop_map()


__all__ = ["Cpu", "SS_YAML_KEY_CPU"]
