"""Disk II floppy controller card."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ..errors import SnapshotFormatError
from ..models import CardType
from ..yaml_helper import YamlLoadHelper, YamlSaveHelper
from .base import Card, require_sub_map

NUM_DRIVES = 2
MAX_PHASE = 79


@dataclass
class FloppyDrive:
    """Head position and inserted image for one drive."""

    filename: str = ""
    phase: int = 0
    track: int = 0
    byte: int = 0
    write_protected: bool = False


class Disk2Card(Card):
    SNAPSHOT_NAME = "Disk]["
    SNAPSHOT_VERSION = 2
    CARD_TYPE = CardType.DISK2
    ALLOWED_SLOTS = (5, 6)

    def __init__(self) -> None:
        self.drives: List[FloppyDrive] = [FloppyDrive() for _ in range(NUM_DRIVES)]
        self.enhance_disk = True
        self.reset()

    def reset(self) -> None:
        """Controller reset; inserted images and head positions survive."""

        self.current_drive = 0
        self.motor_on = False
        self.latch = 0
        self.write_mode = False

    def _save_state(self, writer: YamlSaveHelper) -> None:
        writer.save_uint("Current Drive", self.current_drive)
        writer.save_bool("Floppy Motor On", self.motor_on)
        writer.save_hex("Floppy Latch", self.latch)
        writer.save_bool("Floppy Write Mode", self.write_mode)
        writer.save_bool("Enhance Disk", self.enhance_disk)
        for index, drive in enumerate(self.drives):
            with writer.label(f"Disk][ Drive {index}"):
                writer.save_string("Filename", drive.filename)
                writer.save_uint("Phase", drive.phase)
                writer.save_uint("Track", drive.track)
                writer.save_hex("Byte", drive.byte, 4)
                writer.save_bool("Write Protected", drive.write_protected)

    def _load_state(self, loader: YamlLoadHelper, version: int) -> None:
        current = loader.load_uint("Current Drive")
        if current >= NUM_DRIVES:
            raise SnapshotFormatError(f"Disk][: Invalid drive: {current}")
        self.current_drive = current
        self.motor_on = loader.load_bool("Floppy Motor On")
        self.latch = loader.load_uint("Floppy Latch") & 0xFF
        self.write_mode = loader.load_bool("Floppy Write Mode")
        if version >= 2:
            self.enhance_disk = loader.load_bool("Enhance Disk")

        for index, drive in enumerate(self.drives):
            require_sub_map(loader, f"Disk][ Drive {index}")
            drive.filename = loader.load_string("Filename")
            drive.phase = loader.load_uint("Phase")
            if drive.phase > MAX_PHASE:
                raise SnapshotFormatError(f"Disk][: Invalid phase: {drive.phase}")
            drive.track = loader.load_uint("Track")
            drive.byte = loader.load_uint("Byte")
            drive.write_protected = loader.load_bool("Write Protected")
            loader.pop_map()


__all__ = ["Disk2Card", "FloppyDrive", "NUM_DRIVES"]
