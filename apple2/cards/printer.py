"""Parallel printer card spooling to a host file."""

from __future__ import annotations

from ..models import CardType
from ..yaml_helper import YamlLoadHelper, YamlSaveHelper
from .base import Card


class PrinterCard(Card):
    SNAPSHOT_NAME = "Generic Printer"
    SNAPSHOT_VERSION = 1
    CARD_TYPE = CardType.GENERIC_PRINTER
    ALLOWED_SLOTS = (1,)

    def __init__(self, filename: str = "Printer.txt") -> None:
        self.filename = filename
        self.dump_to_printer = False
        self.convert_encoding = False
        self.filter_unprintable = False
        self.reset()

    def reset(self) -> None:
        self.inactivity = 0

    def _save_state(self, writer: YamlSaveHelper) -> None:
        writer.save_uint("Inactivity", self.inactivity)
        writer.save_string("Printer Filename", self.filename)
        writer.save_bool("Dump To Printer", self.dump_to_printer)
        writer.save_bool("Convert Encoding", self.convert_encoding)
        writer.save_bool("Filter Unprintable", self.filter_unprintable)

    def _load_state(self, loader: YamlLoadHelper, version: int) -> None:
        _ = version
        self.inactivity = loader.load_uint("Inactivity")
        self.filename = loader.load_string("Printer Filename")
        self.dump_to_printer = loader.load_bool("Dump To Printer")
        self.convert_encoding = loader.load_bool("Convert Encoding")
        self.filter_unprintable = loader.load_bool("Filter Unprintable")


__all__ = ["PrinterCard"]
