"""Game port state: paddle timer and push buttons."""

from __future__ import annotations

from typing import List

from .errors import SnapshotFormatError
from .yaml_helper import YamlLoadHelper, YamlSaveHelper

SS_YAML_KEY_JOYSTICK = "Joystick"
NUM_BUTTONS = 3


class Joystick:
    def __init__(self) -> None:
        self.counter_reset_cycle = 0
        self.buttons: List[bool] = [False] * NUM_BUTTONS

    def save_snapshot(self, writer: YamlSaveHelper) -> None:
        with writer.label(SS_YAML_KEY_JOYSTICK):
            writer.save_uint("Counter Reset Cycle", self.counter_reset_cycle)
            for index, pressed in enumerate(self.buttons):
                writer.save_bool(f"Button{index}", pressed)

    def load_snapshot(self, loader: YamlLoadHelper, version: int) -> None:
        _ = version
        if not loader.get_sub_map(SS_YAML_KEY_JOYSTICK):
            raise SnapshotFormatError(
                f"Expected sub-map name: {SS_YAML_KEY_JOYSTICK}"
            )
        self.counter_reset_cycle = loader.load_uint("Counter Reset Cycle")
        self.buttons = [
            loader.load_bool(f"Button{index}") for index in range(NUM_BUTTONS)
        ]
        loader.pop_map()
