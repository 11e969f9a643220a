"""Apple II machine: owning subsystems plus the expansion slot table."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from .cards import Card, Disk2Card, HardDiskCard, PrinterCard, SuperSerialCard, create_card
from .config.machine_config import HDD_SLOT, ResolvedConfiguration
from .cpu import Cpu
from .joystick import Joystick
from .keyboard import Keyboard
from .memory import AUX_CARD_NAMES, Memory
from .models import NUM_SLOTS, Apple2Type, CardType, CpuType
from .sound import Speaker, Speech
from .video import Video

logger = logging.getLogger(__name__)


def default_slot_cards() -> Dict[int, Card]:
    return {1: PrinterCard(), 2: SuperSerialCard(), 6: Disk2Card()}


class Apple2Machine:
    """Holds the live state that snapshots capture and restore."""

    def __init__(
        self,
        apple2_type: Apple2Type = Apple2Type.APPLE2E_ENHANCED,
        slot_cards: Optional[Dict[int, Card]] = None,
        rom_images: Optional[Dict[Apple2Type, bytes]] = None,
    ) -> None:
        self.apple2_type = apple2_type
        self.cpu = Cpu(apple2_type.default_cpu)
        self.joystick = Joystick()
        self.keyboard = Keyboard()
        self.speaker = Speaker()
        self.speech = Speech()
        self.video = Video(apple2_type)
        self.memory = Memory(rom_images)
        if apple2_type.is_apple2_plus_or_clone:
            self.memory.set_aux_card(CardType.EMPTY, 0)

        self.slots: List[Optional[Card]] = [None] * NUM_SLOTS
        cards = default_slot_cards() if slot_cards is None else slot_cards
        for slot, card in cards.items():
            self.insert_card(slot, card)

        self.loaded_save_state = False
        self.configuration = ResolvedConfiguration.from_machine(self)
        self.pending_configuration: Optional[ResolvedConfiguration] = None
        self.initialize_memory()

    # ------------------------------------------------------------------ #
    # Model and CPU
    # ------------------------------------------------------------------ #
    @property
    def cpu_type(self) -> CpuType:
        return self.cpu.cpu_type

    def set_apple2_type(self, apple2_type: Apple2Type) -> None:
        """Switch model; the CPU follows the model's default."""

        if apple2_type != self.apple2_type:
            logger.info("Model: %s -> %s", self.apple2_type.value, apple2_type.value)
        self.apple2_type = apple2_type
        self.cpu.cpu_type = apple2_type.default_cpu

    def set_main_cpu(self, cpu_type: CpuType) -> None:
        self.cpu.cpu_type = cpu_type

    # ------------------------------------------------------------------ #
    # Slot table
    # ------------------------------------------------------------------ #
    def card_in_slot(self, slot: int) -> Optional[Card]:
        return self.slots[slot]

    def card_type(self, slot: int) -> CardType:
        card = self.slots[slot]
        return CardType.EMPTY if card is None else card.card_type

    def insert_card(self, slot: int, card: Card) -> None:
        if not 0 <= slot < NUM_SLOTS:
            raise ValueError(f"Invalid slot: {slot}")
        if slot not in card.ALLOWED_SLOTS:
            raise ValueError(f"{card.SNAPSHOT_NAME} cannot be installed in slot {slot}")
        previous = self.slots[slot]
        if previous is not None and previous is not card:
            logger.debug("Slot %d: replacing %s", slot, previous.SNAPSHOT_NAME)
        self.slots[slot] = card

    def remove_card(self, slot: int) -> Optional[Card]:
        card = self.slots[slot]
        self.slots[slot] = None
        return card

    def configure_slot(self, slot: int, card_type: CardType) -> None:
        """Make ``slot`` hold a card of ``card_type``, keeping a matching one."""

        if card_type == CardType.EMPTY:
            if self.remove_card(slot) is not None:
                logger.debug("Slot %d: removed card", slot)
            return
        if self.card_type(slot) == card_type:
            return
        self.insert_card(slot, create_card(card_type))

    def cards(self) -> Iterator[Tuple[int, Card]]:
        for slot, card in enumerate(self.slots):
            if card is not None:
                yield slot, card

    @property
    def hdd_enabled(self) -> bool:
        card = self.slots[HDD_SLOT]
        return isinstance(card, HardDiskCard) and card.enabled

    def set_hdd_enabled(self, enabled: bool) -> None:
        card = self.slots[HDD_SLOT]
        if not isinstance(card, HardDiskCard):
            if not enabled:
                return
            card = HardDiskCard()
            self.insert_card(HDD_SLOT, card)
        card.enabled = enabled

    def set_aux_card(self, card_type: CardType) -> None:
        banks = 1 if card_type in (CardType.EXTENDED_80COL, CardType.RAMWORKS_III) else 0
        self.memory.set_aux_card(card_type, banks)

    # ------------------------------------------------------------------ #
    # Reset / initialisation
    # ------------------------------------------------------------------ #
    def reset_for_snapshot(self) -> None:
        """Reset owning subsystems ahead of a load; the HDD ends up disabled."""

        self.memory.reset()
        for _, card in self.cards():
            card.reset()
        self.keyboard.reset()
        self.video.reset_state()
        self.speech.reset()
        self.set_hdd_enabled(False)

    def initialize_memory(self) -> None:
        """Rebuild ROM, slot I/O and paging from the current configuration."""

        self.memory.initialize_rom(self.apple2_type)
        self.memory.initialize_custom_f8_rom()
        self.memory.initialize_io([self.card_type(slot) for slot in range(NUM_SLOTS)])
        self.memory.initialize_card_expansion_rom_from_snapshot()
        self.memory.update_paging(initialize=True)

    def apply_configuration(self, config: ResolvedConfiguration) -> None:
        self.set_apple2_type(config.apple2_type)
        self.set_main_cpu(config.cpu_type)
        for slot, card_type in enumerate(config.slots):
            self.configure_slot(slot, card_type)
        if config.slot_aux in AUX_CARD_NAMES or config.slot_aux == CardType.EMPTY:
            if config.slot_aux != self.memory.aux_card:
                self.set_aux_card(config.slot_aux)
        self.set_hdd_enabled(config.enable_hdd)
        self.configuration = config.copy()

    def power_cycle(self) -> None:
        """Cold restart, picking up any configuration queued by settings."""

        if self.pending_configuration is not None:
            self.apply_configuration(self.pending_configuration)
            self.pending_configuration = None
        self.cpu.reset_registers()
        self.memory.reset()
        for _, card in self.cards():
            card.reset()
        self.keyboard.reset()
        self.video.reset_state()
        self.video.reinitialize(self.apple2_type)
        self.speech.reset()
        self.loaded_save_state = False
        self.initialize_memory()


__all__ = ["Apple2Machine", "default_slot_cards"]
