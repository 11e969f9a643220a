"""Apple II memory state: main RAM, auxiliary banks, and paging switches."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np

from .errors import SnapshotFormatError
from .models import Apple2Type, CardType
from .yaml_helper import YamlLoadHelper, YamlSaveHelper

logger = logging.getLogger(__name__)

MEM_MAIN_SIZE = 0x10000
AUX_BANK_SIZE = 0x10000
ROM_SIZE = 0x3000  # $D000-$FFFF
F8_ROM_SIZE = 0x800
MAX_AUX_BANKS = 0x7F

SS_YAML_KEY_MEMORY = "Memory"
SS_YAML_KEY_MAIN_MEMORY = "Main Memory"

AUX_UNIT_NAME = "Auxiliary Slot"
AUX_UNIT_VERSION = 2

AUX_CARD_NAMES: Dict[CardType, str] = {
    CardType.COL80: "80 Column",
    CardType.EXTENDED_80COL: "Extended 80 Column",
    CardType.RAMWORKS_III: "RamWorksIII",
}

# Memory mode flags
MF_80STORE = 0x0001
MF_ALTZP = 0x0002
MF_AUXREAD = 0x0004
MF_AUXWRITE = 0x0008
MF_BANK2 = 0x0010
MF_HIGHRAM = 0x0020
MF_HIRES = 0x0040
MF_PAGE2 = 0x0080
MF_SLOTC3ROM = 0x0100
MF_INTCXROM = 0x0200
MF_WRITERAM = 0x0400

MEMMODE_DEFAULT = MF_BANK2 | MF_SLOTC3ROM | MF_WRITERAM


class Memory:
    """Owns RAM images and the derived paging table."""

    def __init__(self, rom_images: Optional[Dict[Apple2Type, bytes]] = None) -> None:
        self.main = np.zeros(MEM_MAIN_SIZE, dtype=np.uint8)
        self.rom = np.zeros(ROM_SIZE, dtype=np.uint8)
        self.rom_images: Dict[Apple2Type, bytes] = dict(rom_images or {})
        self.rom_model: Optional[Apple2Type] = None
        self.custom_f8_rom: Optional[bytes] = None

        self.aux_card = CardType.EXTENDED_80COL
        self.aux_banks: List[np.ndarray] = [np.zeros(AUX_BANK_SIZE, dtype=np.uint8)]
        self.active_aux_bank = 0

        self.expansion_mem_type = CardType.EMPTY
        self.io_cards: tuple[CardType, ...] = ()
        self.expansion_rom_slot = 0
        self.paging: Dict[str, str] = {}
        self.paging_updates = 0
        self._paged_memmode: Optional[int] = None

        self.reset()

    # ------------------------------------------------------------------ #
    # Reset and initialisation
    # ------------------------------------------------------------------ #
    def reset(self) -> None:
        """Clear RAM and return every soft switch to its power-on state."""

        self.main.fill(0)
        for bank in self.aux_banks:
            bank.fill(0)
        self.active_aux_bank = 0
        self.memmode = MEMMODE_DEFAULT
        self.last_write_ram = False
        self.peripheral_rom_slot = 0
        self.expansion_rom_slot = 0
        self._paged_memmode = None

    def set_expansion_mem_type(self, card_type: CardType) -> None:
        self.expansion_mem_type = card_type

    def set_aux_card(self, card_type: CardType, num_banks: int) -> None:
        if card_type not in AUX_CARD_NAMES and card_type != CardType.EMPTY:
            raise ValueError(f"{card_type} cannot occupy the auxiliary slot")
        self.aux_card = card_type
        self.aux_banks = [
            np.zeros(AUX_BANK_SIZE, dtype=np.uint8) for _ in range(num_banks)
        ]
        self.active_aux_bank = 0

    def initialize_rom(self, apple2_type: Apple2Type) -> None:
        image = self.rom_images.get(apple2_type)
        self.rom.fill(0)
        if image is not None:
            data = np.frombuffer(image[-ROM_SIZE:], dtype=np.uint8)
            self.rom[ROM_SIZE - len(data) :] = data
        self.rom_model = apple2_type

    def initialize_custom_f8_rom(self) -> None:
        if self.custom_f8_rom is None:
            return
        if len(self.custom_f8_rom) != F8_ROM_SIZE:
            logger.warning(
                "Ignoring custom F8 ROM of %d bytes (expected %d)",
                len(self.custom_f8_rom),
                F8_ROM_SIZE,
            )
            return
        self.rom[ROM_SIZE - F8_ROM_SIZE :] = np.frombuffer(
            self.custom_f8_rom, dtype=np.uint8
        )

    def initialize_io(self, slot_cards: Sequence[CardType]) -> None:
        """Rebuild the $C0n0 I/O dispatch from the current slot occupants."""

        self.io_cards = tuple(slot_cards)

    def initialize_card_expansion_rom_from_snapshot(self) -> None:
        """Re-select the $C800 expansion ROM owner recorded in the snapshot."""

        slot = self.peripheral_rom_slot
        if 0 < slot < len(self.io_cards) and self.io_cards[slot] != CardType.EMPTY:
            self.expansion_rom_slot = slot
        else:
            self.expansion_rom_slot = 0

    def update_paging(self, initialize: bool = False) -> None:
        """Recompute the paging table; ``initialize`` forces a full rebuild."""

        if not initialize and self._paged_memmode == self.memmode:
            return
        mode = self.memmode
        self.paging = {
            "zp": "aux" if mode & MF_ALTZP else "main",
            "read": "aux" if mode & MF_AUXREAD else "main",
            "write": "aux" if mode & MF_AUXWRITE else "main",
            "lc_read": "ram" if mode & MF_HIGHRAM else "rom",
            "lc_write": "ram" if mode & MF_WRITERAM else "rom",
            "lc_bank": "2" if mode & MF_BANK2 else "1",
            "cx_rom": "internal" if mode & MF_INTCXROM else "slot",
            "c3_rom": "slot" if mode & MF_SLOTC3ROM else "internal",
        }
        self._paged_memmode = mode
        self.paging_updates += 1

    # ------------------------------------------------------------------ #
    # Apple2 unit block
    # ------------------------------------------------------------------ #
    def save_snapshot(self, writer: YamlSaveHelper) -> None:
        with writer.label(SS_YAML_KEY_MEMORY):
            writer.save_hex("Mode", self.memmode, 8)
            writer.save_bool("Last Write RAM", self.last_write_ram)
            writer.save_uint("Peripheral ROM Slot", self.peripheral_rom_slot)
            with writer.label(SS_YAML_KEY_MAIN_MEMORY):
                writer.save_memory(self.main)

    def load_snapshot(self, loader: YamlLoadHelper, version: int) -> None:
        """Unit v2 adds the expansion ROM owner slot."""

        if not loader.get_sub_map(SS_YAML_KEY_MEMORY):
            raise SnapshotFormatError(f"Expected sub-map name: {SS_YAML_KEY_MEMORY}")

        self.memmode = loader.load_uint("Mode")
        self.last_write_ram = loader.load_bool("Last Write RAM")
        if version >= 2:
            slot = loader.load_uint("Peripheral ROM Slot")
            if slot > 7:
                raise SnapshotFormatError(f"Memory: Invalid peripheral ROM slot: {slot}")
            self.peripheral_rom_slot = slot

        if not loader.get_sub_map(SS_YAML_KEY_MAIN_MEMORY):
            raise SnapshotFormatError(
                f"Expected sub-map name: {SS_YAML_KEY_MAIN_MEMORY}"
            )
        self.main[:] = loader.load_memory(MEM_MAIN_SIZE)
        loader.pop_map()

        loader.pop_map()

    # ------------------------------------------------------------------ #
    # Auxiliary Slot unit
    # ------------------------------------------------------------------ #
    def save_snapshot_aux(self, writer: YamlSaveHelper, apple2_type: Apple2Type) -> None:
        if apple2_type.is_apple2_plus_or_clone:
            return  # no aux slot
        if self.aux_card not in AUX_CARD_NAMES:
            return

        with writer.unit(AUX_UNIT_NAME, AUX_UNIT_VERSION):
            writer.save_string("Card", AUX_CARD_NAMES[self.aux_card])
            writer.save_hex("Num Aux Banks", len(self.aux_banks))
            writer.save_hex("Active Aux Bank", self.active_aux_bank)
            for index, bank in enumerate(self.aux_banks):
                with writer.label(f"Memory Bank{index:02X}"):
                    writer.save_memory(bank)

    def load_snapshot_aux(self, loader: YamlLoadHelper, version: int) -> CardType:
        """Restore the aux card and its banks; returns the aux card type."""

        if version == 0 or version > AUX_UNIT_VERSION:
            raise SnapshotFormatError("Unit: Aux Slot: Version mismatch")

        name = loader.load_string("Card")
        card_type = next(
            (ct for ct, card_name in AUX_CARD_NAMES.items() if card_name == name),
            None,
        )
        if card_type is None:
            raise SnapshotFormatError(f"Aux Slot: Unknown card: {name}")

        num_banks = loader.load_uint("Num Aux Banks")
        if card_type == CardType.COL80 and num_banks != 0:
            raise SnapshotFormatError("Aux Slot: 80 Column card has no aux memory")
        if card_type == CardType.EXTENDED_80COL and num_banks != 1:
            raise SnapshotFormatError("Aux Slot: Extended 80 Column card needs 1 bank")
        if card_type == CardType.RAMWORKS_III and not 1 <= num_banks <= MAX_AUX_BANKS:
            raise SnapshotFormatError(f"Aux Slot: Bad number of aux banks: {num_banks}")

        active_bank = loader.load_uint("Active Aux Bank") if version >= 2 else 0
        if active_bank >= max(num_banks, 1):
            raise SnapshotFormatError(f"Aux Slot: Bad active aux bank: {active_bank}")

        banks: List[np.ndarray] = []
        for index in range(num_banks):
            key = f"Memory Bank{index:02X}"
            if not loader.get_sub_map(key):
                raise SnapshotFormatError(f"Expected sub-map name: {key}")
            banks.append(loader.load_memory(AUX_BANK_SIZE))
            loader.pop_map()

        self.aux_card = card_type
        self.aux_banks = banks
        self.active_aux_bank = active_bank
        return card_type


__all__ = [
    "AUX_CARD_NAMES",
    "AUX_UNIT_NAME",
    "AUX_UNIT_VERSION",
    "MEMMODE_DEFAULT",
    "MEM_MAIN_SIZE",
    "Memory",
]
