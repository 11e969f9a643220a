"""Slot-0 memory expansions for Apple ][ and ][+: Language Card and Saturn."""

from __future__ import annotations

from typing import List

import numpy as np

from ..errors import SnapshotFormatError
from ..models import CardType
from ..yaml_helper import YamlLoadHelper, YamlSaveHelper
from .base import Card, require_sub_map

BANK_SIZE = 0x4000
SATURN_BANKS = 8

LC_DEFAULT_MODE = 0x0410  # bank 2, write RAM


class LanguageCard(Card):
    SNAPSHOT_NAME = "Language Card"
    SNAPSHOT_VERSION = 1
    CARD_TYPE = CardType.LANGUAGE_CARD
    ALLOWED_SLOTS = (0,)

    def __init__(self) -> None:
        self.ram = np.zeros(BANK_SIZE, dtype=np.uint8)
        self.reset()

    def reset(self) -> None:
        self.mode = LC_DEFAULT_MODE
        self.last_ram_write = False

    def _save_state(self, writer: YamlSaveHelper) -> None:
        writer.save_hex("Memory Mode", self.mode, 8)
        writer.save_bool("Last RAM Write", self.last_ram_write)
        with writer.label("Memory Bank00"):
            writer.save_memory(self.ram)

    def _load_state(self, loader: YamlLoadHelper, version: int) -> None:
        _ = version
        self.mode = loader.load_uint("Memory Mode")
        self.last_ram_write = loader.load_bool("Last RAM Write")
        require_sub_map(loader, "Memory Bank00")
        self.ram[:] = loader.load_memory(BANK_SIZE)
        loader.pop_map()


class Saturn128KCard(Card):
    SNAPSHOT_NAME = "Saturn 128"
    SNAPSHOT_VERSION = 1
    CARD_TYPE = CardType.SATURN_128K
    ALLOWED_SLOTS = (0,)

    def __init__(self) -> None:
        self.banks: List[np.ndarray] = [
            np.zeros(BANK_SIZE, dtype=np.uint8) for _ in range(SATURN_BANKS)
        ]
        self.reset()

    def reset(self) -> None:
        self.mode = LC_DEFAULT_MODE
        self.last_ram_write = False
        self.active_bank = 0

    def _save_state(self, writer: YamlSaveHelper) -> None:
        writer.save_hex("Memory Mode", self.mode, 8)
        writer.save_bool("Last RAM Write", self.last_ram_write)
        writer.save_uint("Num Banks", len(self.banks))
        writer.save_uint("Active Bank", self.active_bank)
        for index, bank in enumerate(self.banks):
            with writer.label(f"Memory Bank{index:02X}"):
                writer.save_memory(bank)

    def _load_state(self, loader: YamlLoadHelper, version: int) -> None:
        _ = version
        self.mode = loader.load_uint("Memory Mode")
        self.last_ram_write = loader.load_bool("Last RAM Write")
        num_banks = loader.load_uint("Num Banks")
        if not 1 <= num_banks <= SATURN_BANKS:
            raise SnapshotFormatError(f"Saturn 128: Bad number of banks: {num_banks}")
        active = loader.load_uint("Active Bank")
        if active >= num_banks:
            raise SnapshotFormatError(f"Saturn 128: Bad active bank: {active}")
        banks = []
        for index in range(num_banks):
            key = f"Memory Bank{index:02X}"
            require_sub_map(loader, key)
            banks.append(loader.load_memory(BANK_SIZE))
            loader.pop_map()
        self.banks = banks
        self.active_bank = active


__all__ = ["LanguageCard", "Saturn128KCard"]
