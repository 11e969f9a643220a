"""Peripheral card models and the snapshot dispatch table."""

from __future__ import annotations

from typing import Dict, Type

from ..models import CardType
from .base import Card
from .disk2 import Disk2Card
from .hdd import HardDiskCard
from .language_card import LanguageCard, Saturn128KCard
from .mockingboard import MockingboardCard, PhasorCard
from .mouse import MouseCard
from .printer import PrinterCard
from .registry import CardEntry, CardRegistry, default_card_registry
from .ssc import SuperSerialCard
from .z80 import Z80Card

CARD_CLASSES: Dict[CardType, Type[Card]] = {
    cls.CARD_TYPE: cls
    for cls in (
        Disk2Card,
        HardDiskCard,
        LanguageCard,
        MockingboardCard,
        MouseCard,
        PhasorCard,
        PrinterCard,
        Saturn128KCard,
        SuperSerialCard,
        Z80Card,
    )
}


def create_card(card_type: CardType) -> Card:
    try:
        return CARD_CLASSES[card_type]()
    except KeyError:
        raise ValueError(f"No slot card for {card_type.value}") from None


__all__ = [
    "CARD_CLASSES",
    "Card",
    "CardEntry",
    "CardRegistry",
    "Disk2Card",
    "HardDiskCard",
    "LanguageCard",
    "MockingboardCard",
    "MouseCard",
    "PhasorCard",
    "PrinterCard",
    "Saturn128KCard",
    "SuperSerialCard",
    "Z80Card",
    "create_card",
    "default_card_registry",
]
