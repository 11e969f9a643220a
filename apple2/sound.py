"""Speaker and speech synthesiser state."""

from __future__ import annotations

from typing import List

from .errors import SnapshotFormatError
from .yaml_helper import YamlLoadHelper, YamlSaveHelper

SS_YAML_KEY_SPEAKER = "Speaker"


class Speaker:
    def __init__(self) -> None:
        self.last_toggle_cycle = 0

    def save_snapshot(self, writer: YamlSaveHelper) -> None:
        with writer.label(SS_YAML_KEY_SPEAKER):
            writer.save_uint("Last Speaker Toggle Cycle", self.last_toggle_cycle)

    def load_snapshot(self, loader: YamlLoadHelper, version: int) -> None:
        _ = version
        if not loader.get_sub_map(SS_YAML_KEY_SPEAKER):
            raise SnapshotFormatError(f"Expected sub-map name: {SS_YAML_KEY_SPEAKER}")
        self.last_toggle_cycle = loader.load_uint("Last Speaker Toggle Cycle")
        loader.pop_map()


class Speech:
    """Host text-to-speech queue; not part of the snapshot, only reset."""

    def __init__(self) -> None:
        self.pending: List[str] = []

    def speak(self, text: str) -> None:
        self.pending.append(text)

    def reset(self) -> None:
        self.pending.clear()
