"""AppleMouse interface card."""

from __future__ import annotations

from ..errors import SnapshotFormatError
from ..models import CardType
from ..yaml_helper import YamlLoadHelper, YamlSaveHelper
from .base import Card

CLAMP_MAX_DEFAULT = 1023


class MouseCard(Card):
    SNAPSHOT_NAME = "Mouse Interface"
    SNAPSHOT_VERSION = 1
    CARD_TYPE = CardType.MOUSE_INTERFACE
    ALLOWED_SLOTS = (4,)

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Uninitialise and reset: mouse off, position and clamps cleared."""

        self.enabled = False
        self.mode = 0
        self.button = False
        self.x = 0
        self.y = 0
        self.clamp_min_x = 0
        self.clamp_max_x = CLAMP_MAX_DEFAULT
        self.clamp_min_y = 0
        self.clamp_max_y = CLAMP_MAX_DEFAULT

    def _save_state(self, writer: YamlSaveHelper) -> None:
        writer.save_bool("Enabled", self.enabled)
        writer.save_hex("Mode", self.mode)
        writer.save_bool("Button", self.button)
        writer.save_uint("X", self.x)
        writer.save_uint("Y", self.y)
        writer.save_uint("Clamp Min X", self.clamp_min_x)
        writer.save_uint("Clamp Max X", self.clamp_max_x)
        writer.save_uint("Clamp Min Y", self.clamp_min_y)
        writer.save_uint("Clamp Max Y", self.clamp_max_y)

    def _load_state(self, loader: YamlLoadHelper, version: int) -> None:
        _ = version
        self.enabled = loader.load_bool("Enabled")
        self.mode = loader.load_uint("Mode") & 0xFF
        self.button = loader.load_bool("Button")
        self.x = loader.load_uint("X")
        self.y = loader.load_uint("Y")
        self.clamp_min_x = loader.load_uint("Clamp Min X")
        self.clamp_max_x = loader.load_uint("Clamp Max X")
        self.clamp_min_y = loader.load_uint("Clamp Min Y")
        self.clamp_max_y = loader.load_uint("Clamp Max Y")
        if not (self.clamp_min_x <= self.x <= self.clamp_max_x) or not (
            self.clamp_min_y <= self.y <= self.clamp_max_y
        ):
            raise SnapshotFormatError("Mouse Interface: Position outside clamp window")


__all__ = ["MouseCard"]
