"""Unit registry: top-level snapshot sections and their load/save routines."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional

from ..errors import SnapshotFormatError
from ..memory import AUX_UNIT_NAME
from ..models import NUM_SLOTS, Apple2Type
from ..tracing import tracer
from ..yaml_helper import (
    KEY_CARD,
    KEY_STATE,
    KEY_TYPE,
    KEY_VERSION,
    YamlLoadHelper,
    YamlReader,
    YamlSaveHelper,
)
from .context import LoadContext, SaveContext

logger = logging.getLogger(__name__)

UNIT_APPLE2 = "Apple2"
UNIT_APPLE2_VER = 2
UNIT_SLOTS = "Slots"
UNIT_SLOTS_VER = 1

SS_YAML_KEY_MODEL = "Model"

UnitLoad = Callable[[LoadContext, YamlLoadHelper, int], None]
UnitSave = Callable[[SaveContext, YamlSaveHelper], None]


@dataclass(frozen=True)
class UnitHandler:
    name: str
    load: UnitLoad
    save: UnitSave


class UnitRegistry:
    """Units are saved in registration order and looked up by ``Type`` on load."""

    def __init__(self) -> None:
        self._handlers: Dict[str, UnitHandler] = {}

    def register(self, handler: UnitHandler) -> None:
        if handler.name in self._handlers:
            raise ValueError(f"Unit already registered: {handler.name}")
        self._handlers[handler.name] = handler

    def get(self, name: str) -> Optional[UnitHandler]:
        return self._handlers.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __iter__(self) -> Iterator[UnitHandler]:
        return iter(self._handlers.values())

    def __len__(self) -> int:
        return len(self._handlers)

    def parse_unit(self, reader: YamlReader, ctx: LoadContext) -> str:
        """Load one ``Unit`` map from ``reader``; returns the unit type."""

        loader = YamlLoadHelper(reader)
        unit_type = loader.load_string(KEY_TYPE)
        version = loader.load_uint(KEY_VERSION)
        if not loader.get_sub_map(KEY_STATE):
            raise SnapshotFormatError(f"Unit: Expected sub-map name: {KEY_STATE}")

        handler = self.get(unit_type)
        if handler is None:
            raise SnapshotFormatError(f"Unit: Unknown type: {unit_type}")

        logger.debug("Loading unit %s v%d", unit_type, version)
        with tracer.slice("Units", unit_type, {"version": version}):
            handler.load(ctx, loader, version)
        loader.pop_map()
        ctx.units_loaded.append(unit_type)
        return unit_type


# ---------------------------------------------------------------------- #
# Apple2
# ---------------------------------------------------------------------- #
def load_apple2_unit(ctx: LoadContext, loader: YamlLoadHelper, version: int) -> None:
    if version == 0 or version > UNIT_APPLE2_VER:
        raise SnapshotFormatError(f"Unit: {UNIT_APPLE2}: Version mismatch")

    machine = ctx.machine
    model = Apple2Type.from_snapshot_name(loader.load_string(SS_YAML_KEY_MODEL))
    machine.set_apple2_type(model)

    machine.cpu.load_snapshot(loader, version)
    machine.joystick.load_snapshot(loader, version)
    machine.keyboard.load_snapshot(loader, version)
    machine.speaker.load_snapshot(loader, version)
    machine.video.load_snapshot(loader, version)
    machine.memory.load_snapshot(loader, version)

    ctx.new.apple2_type = model
    ctx.new.cpu_type = machine.cpu_type

    machine.video.reinitialize(model)
    ctx.hooks.update_frame(model)


def save_apple2_unit(ctx: SaveContext, writer: YamlSaveHelper) -> None:
    machine = ctx.machine
    with writer.unit(UNIT_APPLE2, UNIT_APPLE2_VER):
        writer.save_string(SS_YAML_KEY_MODEL, machine.apple2_type.snapshot_name)
        machine.cpu.save_snapshot(writer)
        machine.joystick.save_snapshot(writer)
        machine.keyboard.save_snapshot(writer)
        machine.speaker.save_snapshot(writer)
        machine.video.save_snapshot(writer)
        machine.memory.save_snapshot(writer)


# ---------------------------------------------------------------------- #
# Auxiliary Slot
# ---------------------------------------------------------------------- #
def load_aux_unit(ctx: LoadContext, loader: YamlLoadHelper, version: int) -> None:
    ctx.new.slot_aux = ctx.machine.memory.load_snapshot_aux(loader, version)


def save_aux_unit(ctx: SaveContext, writer: YamlSaveHelper) -> None:
    ctx.machine.memory.save_snapshot_aux(writer, ctx.machine.apple2_type)


# ---------------------------------------------------------------------- #
# Slots
# ---------------------------------------------------------------------- #
def _parse_slot_number(key: str) -> int:
    if not (key.isascii() and key.isdigit()) or int(key) >= NUM_SLOTS:
        raise SnapshotFormatError(f"{UNIT_SLOTS}: Invalid slot #: {key}")
    return int(key)


def _skip_slots(ctx: LoadContext, loader: YamlLoadHelper) -> None:
    logger.warning("Achievements mode: leaving slot configuration unchanged")
    loader.discard()
    ctx.slots_skipped = True
    ctx.new.slots = list(ctx.old.slots)
    ctx.new.enable_hdd = ctx.old.enable_hdd
    if ctx.old.enable_hdd:
        ctx.machine.set_hdd_enabled(True)


def load_slots_unit(ctx: LoadContext, loader: YamlLoadHelper, version: int) -> None:
    if ctx.settings.achievements_mode:
        _skip_slots(ctx, loader)
        return

    if version != UNIT_SLOTS_VER:
        raise SnapshotFormatError(f"Unit: {UNIT_SLOTS}: Version mismatch")

    while True:
        key = loader.get_map_next_slot_number()
        if key is None:
            break

        slot = _parse_slot_number(key)
        if not loader.get_sub_map(key):
            raise SnapshotFormatError(f"{UNIT_SLOTS}: Expected sub-map name: {key}")

        card_name = loader.load_string(KEY_CARD)
        card_version = loader.load_uint(KEY_VERSION)
        if not loader.get_sub_map(KEY_STATE):
            raise SnapshotFormatError(f"Card: Expected sub-map name: {KEY_STATE}")

        entry = ctx.cards.lookup(card_name)
        if entry is None:
            raise SnapshotFormatError(f"{UNIT_SLOTS}: Unknown card: {card_name}")

        tracer.instant("Cards", card_name, {"slot": slot, "version": card_version})
        entry.load(ctx, loader, slot, card_version)
        ctx.new.slots[slot] = entry.card_type
        logger.debug("Slot %d: loaded %s v%d", slot, card_name, card_version)

        loader.pop_map()  # State
        loader.pop_map()  # slot


def save_slots_unit(ctx: SaveContext, writer: YamlSaveHelper) -> None:
    machine = ctx.machine
    with writer.unit(UNIT_SLOTS, UNIT_SLOTS_VER):
        for slot, card in machine.cards():
            if slot == 0 and not machine.apple2_type.is_apple2_plus_or_clone:
                continue
            if not card.snapshot_enabled:
                continue
            entry = ctx.cards.for_card_type(card.card_type)
            if entry is None:
                logger.debug("Slot %d: no snapshot support for %s", slot, card.card_type.value)
                continue
            entry.save(writer, card, slot)


def default_unit_registry() -> UnitRegistry:
    registry = UnitRegistry()
    registry.register(UnitHandler(UNIT_APPLE2, load_apple2_unit, save_apple2_unit))
    registry.register(UnitHandler(AUX_UNIT_NAME, load_aux_unit, save_aux_unit))
    registry.register(UnitHandler(UNIT_SLOTS, load_slots_unit, save_slots_unit))
    return registry


__all__ = [
    "UNIT_APPLE2",
    "UNIT_APPLE2_VER",
    "UNIT_SLOTS",
    "UNIT_SLOTS_VER",
    "UnitHandler",
    "UnitRegistry",
    "default_unit_registry",
]
