"""Z80 SoftCard."""

from __future__ import annotations

from typing import Dict

from ..models import CardType
from ..yaml_helper import YamlLoadHelper, YamlSaveHelper
from .base import Card

Z80_REGISTERS = ("AF", "BC", "DE", "HL", "IX", "IY", "SP", "PC")


class Z80Card(Card):
    SNAPSHOT_NAME = "Z80"
    SNAPSHOT_VERSION = 1
    CARD_TYPE = CardType.Z80
    ALLOWED_SLOTS = (4, 5)

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.registers: Dict[str, int] = {name: 0 for name in Z80_REGISTERS}
        self.active = False

    def _save_state(self, writer: YamlSaveHelper) -> None:
        writer.save_bool("Active", self.active)
        for name in Z80_REGISTERS:
            writer.save_hex(name, self.registers[name], 4)

    def _load_state(self, loader: YamlLoadHelper, version: int) -> None:
        _ = version
        self.active = loader.load_bool("Active")
        self.registers = {
            name: loader.load_uint(name) & 0xFFFF for name in Z80_REGISTERS
        }


__all__ = ["Z80Card"]
