"""Keyboard latch state."""

from __future__ import annotations

from .errors import SnapshotFormatError
from .yaml_helper import YamlLoadHelper, YamlSaveHelper

SS_YAML_KEY_KEYBOARD = "Keyboard"


class Keyboard:
    """Last key code plus the strobe ("key waiting") bit."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.last_key = 0
        self.key_waiting = False

    def save_snapshot(self, writer: YamlSaveHelper) -> None:
        with writer.label(SS_YAML_KEY_KEYBOARD):
            writer.save_hex("Last Key", self.last_key)
            writer.save_bool("Key Waiting", self.key_waiting)

    def load_snapshot(self, loader: YamlLoadHelper, version: int) -> None:
        """Unit v1 predates the strobe bit; it loads as not waiting."""

        if not loader.get_sub_map(SS_YAML_KEY_KEYBOARD):
            raise SnapshotFormatError(
                f"Expected sub-map name: {SS_YAML_KEY_KEYBOARD}"
            )
        self.last_key = loader.load_uint("Last Key") & 0xFF
        self.key_waiting = loader.load_bool("Key Waiting") if version >= 2 else False
        loader.pop_map()
