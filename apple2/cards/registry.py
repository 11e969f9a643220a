"""Card dispatch table keyed by the name a card declares in snapshots."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Iterator, Optional, Type, TypeVar

from ..models import CardType
from ..yaml_helper import YamlLoadHelper, YamlSaveHelper
from .base import Card
from .disk2 import Disk2Card
from .hdd import HardDiskCard
from .language_card import LanguageCard, Saturn128KCard
from .mockingboard import MockingboardCard, PhasorCard
from .mouse import MouseCard
from .printer import PrinterCard
from .ssc import SuperSerialCard
from .z80 import Z80Card

if TYPE_CHECKING:
    from ..snapshot.context import LoadContext

logger = logging.getLogger(__name__)

LoadRoutine = Callable[["LoadContext", YamlLoadHelper, int, int], None]
SaveRoutine = Callable[[YamlSaveHelper, Card, int], None]
CardT = TypeVar("CardT", bound=Card)


@dataclass(frozen=True)
class CardEntry:
    name: str
    card_type: CardType
    load: LoadRoutine
    save: SaveRoutine


def _save_card(writer: YamlSaveHelper, card: Card, slot: int) -> None:
    card.save_snapshot(writer, slot)


def _restore_card(
    ctx: "LoadContext", card_class: Type[CardT], loader: YamlLoadHelper, slot: int, version: int
) -> CardT:
    existing = ctx.machine.card_in_slot(slot)
    card: CardT = existing if type(existing) is card_class else card_class()  # type: ignore[assignment]
    card.load_snapshot(loader, slot, version)
    if card is not existing:
        ctx.machine.insert_card(slot, card)
    return card


def make_slot_loader(card_class: Type[Card]) -> LoadRoutine:
    """Build a load routine that restores ``card_class`` into the given slot.

    A card of the same class already in the slot is reused; otherwise a fresh
    instance is created and only inserted once its state loaded cleanly.
    """

    def load(ctx: "LoadContext", loader: YamlLoadHelper, slot: int, version: int) -> None:
        _restore_card(ctx, card_class, loader, slot, version)

    return load


def _load_hdd(ctx: "LoadContext", loader: YamlLoadHelper, slot: int, version: int) -> None:
    card = _restore_card(ctx, HardDiskCard, loader, slot, version)
    card.enabled = True
    card.image_directory = ctx.base_path
    ctx.new.enable_hdd = True


def _memory_expansion_loader(card_class: Type[Card]) -> LoadRoutine:
    inner = make_slot_loader(card_class)

    def load(ctx: "LoadContext", loader: YamlLoadHelper, slot: int, version: int) -> None:
        ctx.machine.memory.set_expansion_mem_type(card_class.CARD_TYPE)
        inner(ctx, loader, slot, version)

    return load


class CardRegistry:
    """Name → entry table; lookups are exact string matches."""

    def __init__(self) -> None:
        self._by_name: Dict[str, CardEntry] = {}
        self._by_type: Dict[CardType, CardEntry] = {}

    def register(self, entry: CardEntry) -> None:
        if entry.name in self._by_name:
            raise ValueError(f"Card already registered: {entry.name}")
        if entry.card_type in self._by_type:
            raise ValueError(f"Card type already registered: {entry.card_type}")
        self._by_name[entry.name] = entry
        self._by_type[entry.card_type] = entry
        logger.debug("Registered card %s (%s)", entry.name, entry.card_type.value)

    def register_card_class(
        self, card_class: Type[Card], load: Optional[LoadRoutine] = None
    ) -> CardEntry:
        entry = CardEntry(
            name=card_class.SNAPSHOT_NAME,
            card_type=card_class.CARD_TYPE,
            load=load or make_slot_loader(card_class),
            save=_save_card,
        )
        self.register(entry)
        return entry

    def lookup(self, name: str) -> Optional[CardEntry]:
        return self._by_name.get(name)

    def for_card_type(self, card_type: CardType) -> Optional[CardEntry]:
        return self._by_type.get(card_type)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[CardEntry]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)


def default_card_registry() -> CardRegistry:
    registry = CardRegistry()
    for card_class in (
        PrinterCard,
        SuperSerialCard,
        MockingboardCard,
        MouseCard,
        Z80Card,
        PhasorCard,
        Disk2Card,
    ):
        registry.register_card_class(card_class)
    registry.register_card_class(HardDiskCard, load=_load_hdd)
    for card_class in (LanguageCard, Saturn128KCard):
        registry.register_card_class(card_class, load=_memory_expansion_loader(card_class))
    return registry


__all__ = [
    "CardEntry",
    "CardRegistry",
    "LoadRoutine",
    "SaveRoutine",
    "default_card_registry",
    "make_slot_loader",
]
