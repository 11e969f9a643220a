"""Generic hard disk controller card."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional

from ..errors import SnapshotFormatError
from ..models import CardType
from ..yaml_helper import YamlLoadHelper, YamlSaveHelper
from .base import Card, require_sub_map

NUM_HARDDISKS = 2


@dataclass
class HardDiskDrive:
    filename: str = ""
    block: int = 0
    buf_ptr: int = 0

    def resolved_path(self, image_directory: Optional[str]) -> str:
        """Image path, relative names resolved against the snapshot folder."""

        if not self.filename or os.path.isabs(self.filename) or not image_directory:
            return self.filename
        return os.path.join(image_directory, self.filename)


class HardDiskCard(Card):
    SNAPSHOT_NAME = "Generic HDD"
    SNAPSHOT_VERSION = 1
    CARD_TYPE = CardType.GENERIC_HDD
    ALLOWED_SLOTS = (7,)

    def __init__(self) -> None:
        self.drives: List[HardDiskDrive] = [
            HardDiskDrive() for _ in range(NUM_HARDDISKS)
        ]
        self.enabled = True
        self.image_directory: Optional[str] = None
        self.reset()

    @property
    def snapshot_enabled(self) -> bool:
        return self.enabled

    def reset(self) -> None:
        self.current_drive = 0
        self.status = 0
        for drive in self.drives:
            drive.buf_ptr = 0

    def _save_state(self, writer: YamlSaveHelper) -> None:
        writer.save_uint("Current Unit", self.current_drive)
        writer.save_hex("Command Status", self.status)
        for index, drive in enumerate(self.drives):
            with writer.label(f"Hard Disk{index}"):
                writer.save_string("Filename", drive.filename)
                writer.save_hex("Block", drive.block, 8)
                writer.save_hex("Buffer Offset", drive.buf_ptr, 4)

    def _load_state(self, loader: YamlLoadHelper, version: int) -> None:
        _ = version
        current = loader.load_uint("Current Unit")
        if current >= NUM_HARDDISKS:
            raise SnapshotFormatError(f"Generic HDD: Invalid unit: {current}")
        self.current_drive = current
        self.status = loader.load_uint("Command Status") & 0xFF
        for index, drive in enumerate(self.drives):
            require_sub_map(loader, f"Hard Disk{index}")
            drive.filename = loader.load_string("Filename")
            drive.block = loader.load_uint("Block")
            drive.buf_ptr = loader.load_uint("Buffer Offset")
            if drive.buf_ptr > 0x200:
                raise SnapshotFormatError(f"Generic HDD: Bad buffer offset: {drive.buf_ptr}")
            loader.pop_map()
        self.enabled = True


__all__ = ["HardDiskCard", "HardDiskDrive", "NUM_HARDDISKS"]
