"""Common base for peripheral cards that live in an expansion slot."""

from __future__ import annotations

from typing import ClassVar, Tuple

from ..errors import SnapshotFormatError
from ..models import CardType
from ..yaml_helper import YamlLoadHelper, YamlSaveHelper


class Card:
    """A card exposes its snapshot name plus save/load/reset hooks.

    Subclasses fill in ``_save_state``/``_load_state`` for the card's private
    ``State`` block; slot and version gating happens here.
    """

    SNAPSHOT_NAME: ClassVar[str] = ""
    SNAPSHOT_VERSION: ClassVar[int] = 1
    CARD_TYPE: ClassVar[CardType] = CardType.EMPTY
    ALLOWED_SLOTS: ClassVar[Tuple[int, ...]] = tuple(range(1, 8))

    @property
    def card_type(self) -> CardType:
        return self.CARD_TYPE

    @property
    def snapshot_enabled(self) -> bool:
        """Whether the card is currently written into snapshots."""

        return True

    def reset(self) -> None:
        raise NotImplementedError

    def save_snapshot(self, writer: YamlSaveHelper, slot: int) -> None:
        with writer.slot(slot, self.SNAPSHOT_NAME, self.SNAPSHOT_VERSION):
            self._save_state(writer)

    def load_snapshot(self, loader: YamlLoadHelper, slot: int, version: int) -> bool:
        if slot not in self.ALLOWED_SLOTS:
            raise SnapshotFormatError(f"{self.SNAPSHOT_NAME}: Card: wrong slot: {slot}")
        if version < 1 or version > self.SNAPSHOT_VERSION:
            raise SnapshotFormatError(
                f"{self.SNAPSHOT_NAME}: Card: unsupported version: {version}"
            )
        self._load_state(loader, version)
        return True

    def _save_state(self, writer: YamlSaveHelper) -> None:
        raise NotImplementedError

    def _load_state(self, loader: YamlLoadHelper, version: int) -> None:
        raise NotImplementedError


def require_sub_map(loader: YamlLoadHelper, key: str) -> None:
    if not loader.get_sub_map(key):
        raise SnapshotFormatError(f"Expected sub-map name: {key}")


def save_bytes(writer: YamlSaveHelper, key: str, data: bytes) -> None:
    writer.save_string(key, bytes(data).hex().upper())


def load_bytes(loader: YamlLoadHelper, key: str, size: int) -> bytearray:
    text = loader.load_string(key)
    try:
        data = bytearray.fromhex(text)
    except ValueError:
        raise SnapshotFormatError(f"{key}: Bad hex data") from None
    if len(data) != size:
        raise SnapshotFormatError(f"{key}: Expected {size} bytes, got {len(data)}")
    return data


__all__ = ["Card", "load_bytes", "require_sub_map", "save_bytes"]
