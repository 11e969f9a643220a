"""Video soft-switch state and character set selection."""

from __future__ import annotations

from .errors import SnapshotFormatError
from .models import Apple2Type
from .yaml_helper import YamlLoadHelper, YamlSaveHelper

SS_YAML_KEY_VIDEO = "Video"

# Video mode flags
VF_80COL = 0x01
VF_DHIRES = 0x02
VF_HIRES = 0x04
VF_80STORE = 0x08
VF_MIXED = 0x10
VF_PAGE2 = 0x20
VF_TEXT = 0x40

VIDEO_MODE_DEFAULT = VF_TEXT


def charset_for_model(apple2_type: Apple2Type) -> str:
    """Return the character ROM family used by ``apple2_type``."""

    if apple2_type.is_pravets:
        return "pravets"
    if apple2_type == Apple2Type.TK3000_2E:
        return "tk3000"
    if apple2_type in (Apple2Type.APPLE2, Apple2Type.APPLE2PLUS):
        return "apple2"
    return "apple2e"


class Video:
    def __init__(self, apple2_type: Apple2Type = Apple2Type.APPLE2E_ENHANCED) -> None:
        self.charset = charset_for_model(apple2_type)
        self.redraw_count = 0
        self.reset_state()

    def reset_state(self) -> None:
        self.mode = VIDEO_MODE_DEFAULT
        self.alt_charset = False

    def reinitialize(self, apple2_type: Apple2Type) -> None:
        """Re-derive the character set after a model change and redraw."""

        self.charset = charset_for_model(apple2_type)
        self.redraw_screen()

    def redraw_screen(self) -> None:
        self.redraw_count += 1

    def save_snapshot(self, writer: YamlSaveHelper) -> None:
        with writer.label(SS_YAML_KEY_VIDEO):
            writer.save_bool("Alt Char Set", self.alt_charset)
            writer.save_hex("Video Mode", self.mode, 8)

    def load_snapshot(self, loader: YamlLoadHelper, version: int) -> None:
        _ = version
        if not loader.get_sub_map(SS_YAML_KEY_VIDEO):
            raise SnapshotFormatError(f"Expected sub-map name: {SS_YAML_KEY_VIDEO}")
        self.alt_charset = loader.load_bool("Alt Char Set")
        self.mode = loader.load_uint("Video Mode")
        loader.pop_map()
