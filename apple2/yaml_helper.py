"""YAML document cursor used by the snapshot engine.

Reading walks the PyYAML event stream produced by :func:`yaml.parse` so a
snapshot is consumed one top-level unit at a time rather than being built
into a full document tree. Each unit map is materialised into nested dicts by
:class:`YamlLoadHelper`, which then hands out values key by key and keeps a
stack of open sub-maps.

Writing drives :class:`yaml.emitter.Emitter` directly with events, so nesting
is expressed through context managers instead of hand-indented text.
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, TextIO, Tuple, Type, Union

import numpy as np
import yaml
from yaml.emitter import Emitter

from .errors import SnapshotFormatError, SnapshotIOError

logger = logging.getLogger(__name__)

KEY_FILEHDR = "File_hdr"
KEY_TAG = "Tag"
KEY_VERSION = "Version"
KEY_UNIT = "Unit"
KEY_TYPE = "Type"
KEY_CARD = "Card"
KEY_STATE = "State"
VALUE_AWSS = "AppleWin Save State"

MEMORY_ROW_BYTES = 32

_DECIMAL = re.compile(r"[0-9]+")
_HEX = re.compile(r"0[xX][0-9A-Fa-f]+")

MapYaml = Dict[str, Union[str, "MapYaml"]]
PathLike = Union[str, Path]


def parse_uint(text: str, *, key: str = "") -> int:
    """Parse decimal or ``0x``-prefixed hex text as an unsigned integer."""

    if _DECIMAL.fullmatch(text):
        return int(text, 10)
    if _HEX.fullmatch(text):
        return int(text[2:], 16)
    raise SnapshotFormatError(f"{key}: Not an unsigned integer: {text!r}")


class YamlReader:
    """Incremental reader over the top-level map of a snapshot document."""

    def __init__(self) -> None:
        self._stream: Optional[TextIO] = None
        self._events: Optional[Iterator[yaml.Event]] = None

    def init_parser(self, pathname: PathLike) -> None:
        try:
            self._stream = open(pathname, "r", encoding="utf-8")
        except OSError as exc:
            raise SnapshotIOError(
                f"Failed to initialize parser or open file: {pathname}"
            ) from exc

        self._events = yaml.parse(self._stream, Loader=yaml.SafeLoader)
        self._expect(yaml.StreamStartEvent, "stream start")
        self._expect(yaml.DocumentStartEvent, "document start")
        self._expect(yaml.MappingStartEvent, "top-level map")

    def finalise_parser(self) -> None:
        if self._events is not None:
            self._events.close()  # type: ignore[attr-defined]
            self._events = None
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def get_scalar(self) -> Optional[str]:
        """Return the next top-level key, or ``None`` once the map ends."""

        event = self._next_event()
        if isinstance(event, yaml.MappingEndEvent):
            return None
        if isinstance(event, yaml.ScalarEvent):
            return event.value
        raise SnapshotFormatError("Expected a scalar key at top level")

    def get_map_start_event(self) -> None:
        self._expect(yaml.MappingStartEvent, "map")

    def parse_map(self) -> MapYaml:
        """Consume events up to the matching map end and return nested dicts."""

        result: MapYaml = {}
        while True:
            event = self._next_event()
            if isinstance(event, yaml.MappingEndEvent):
                return result
            if not isinstance(event, yaml.ScalarEvent):
                raise SnapshotFormatError("Expected a scalar map key")
            key = event.value
            value = self._next_event()
            if isinstance(value, yaml.ScalarEvent):
                result[key] = value.value
            elif isinstance(value, yaml.MappingStartEvent):
                result[key] = self.parse_map()
            else:
                raise SnapshotFormatError(f"{key}: Unsupported YAML node")

    def _next_event(self) -> yaml.Event:
        if self._events is None:
            raise SnapshotFormatError("Parser not initialized")
        try:
            return next(self._events)
        except StopIteration:
            raise SnapshotFormatError("Unexpected end of document") from None
        except yaml.YAMLError as exc:
            raise SnapshotFormatError(f"YAML parse error: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise SnapshotFormatError(f"Invalid UTF-8: {exc}") from exc

    def _expect(self, event_type: Type[yaml.Event], what: str) -> yaml.Event:
        event = self._next_event()
        if not isinstance(event, event_type):
            raise SnapshotFormatError(f"Expected {what}")
        return event


class YamlLoadHelper:
    """Key-by-key access to one materialised unit map."""

    def __init__(self, reader: YamlReader) -> None:
        reader.get_map_start_event()
        self._stack: List[Tuple[str, MapYaml]] = [("", reader.parse_map())]

    @property
    def _current(self) -> MapYaml:
        return self._stack[-1][1]

    def _take(self, key: str) -> Optional[str]:
        if key not in self._current:
            return None
        value = self._current.pop(key)
        if isinstance(value, dict):
            raise SnapshotFormatError(f"{key}: Expected a scalar value")
        return value

    def load_string(self, key: str) -> str:
        value = self._take(key)
        if value is None:
            raise SnapshotFormatError(f"{key}: Missing")
        return value

    def load_string_optional(self, key: str) -> Optional[str]:
        return self._take(key)

    def load_uint(self, key: str) -> int:
        return parse_uint(self.load_string(key), key=key)

    def load_bool(self, key: str) -> bool:
        value = self.load_string(key)
        if value == "true":
            return True
        if value == "false":
            return False
        raise SnapshotFormatError(f"{key}: Expected true/false, got {value!r}")

    def load_memory(self, size: int) -> np.ndarray:
        """Consume every row in the current map into a zero-filled image."""

        image = np.zeros(size, dtype=np.uint8)
        for key in list(self._current):
            row = self._current.pop(key)
            if isinstance(row, dict):
                raise SnapshotFormatError(f"Memory: {key}: Expected a hex row")
            try:
                address = int(key, 16)
                data = bytes.fromhex(row)
            except ValueError:
                raise SnapshotFormatError(f"Memory: Bad row {key}") from None
            if address < 0 or address + len(data) > size:
                raise SnapshotFormatError(f"Memory: Row {key} out of range")
            image[address : address + len(data)] = np.frombuffer(data, dtype=np.uint8)
        return image

    def get_sub_map(self, key: str) -> bool:
        value = self._current.get(key)
        if not isinstance(value, dict):
            return False
        del self._current[key]
        self._stack.append((key, value))
        return True

    def pop_map(self) -> None:
        if len(self._stack) == 1:
            raise SnapshotFormatError("pop_map: No sub-map to pop")
        name, remaining = self._stack.pop()
        for key in remaining:
            logger.warning("Unused key in %s: %s", name, key)

    def discard(self) -> None:
        """Drop whatever remains in the current map without warnings."""

        self._current.clear()

    def get_map_next_slot_number(self) -> Optional[str]:
        """Return the next unconsumed key of the current map, if any."""

        return next(iter(self._current), None)


class YamlSaveHelper:
    """Event-driven YAML writer for one snapshot document."""

    def __init__(self, pathname: PathLike) -> None:
        try:
            self._stream: Optional[TextIO] = open(pathname, "w", encoding="utf-8")
        except OSError as exc:
            raise SnapshotIOError(f"Save error: {pathname}") from exc
        self._emitter = Emitter(self._stream, allow_unicode=True)
        self._depth = 0
        self._emit(yaml.StreamStartEvent())
        self._emit(yaml.DocumentStartEvent(explicit=True))
        self._begin_map()

    def __enter__(self) -> "YamlSaveHelper":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abandon()

    # ------------------------------------------------------------------ #
    # Structure
    # ------------------------------------------------------------------ #
    def file_hdr(self, version: int) -> None:
        self._scalar(KEY_FILEHDR)
        self._begin_map()
        self.save_string(KEY_TAG, VALUE_AWSS)
        self.save_uint(KEY_VERSION, version)
        self._end_map()

    @contextmanager
    def unit(self, name: str, version: int) -> Iterator["YamlSaveHelper"]:
        """Write a unit header and leave its ``State`` map open."""

        self._scalar(KEY_UNIT)
        self._begin_map()
        self.save_string(KEY_TYPE, name)
        self.save_uint(KEY_VERSION, version)
        with self.label(KEY_STATE):
            yield self
        self._end_map()

    @contextmanager
    def slot(self, slot: int, card_name: str, version: int) -> Iterator["YamlSaveHelper"]:
        """Write a slot header and leave the card's ``State`` map open."""

        self._scalar(str(slot))
        self._begin_map()
        self.save_string(KEY_CARD, card_name)
        self.save_uint(KEY_VERSION, version)
        with self.label(KEY_STATE):
            yield self
        self._end_map()

    @contextmanager
    def label(self, key: str) -> Iterator["YamlSaveHelper"]:
        self._scalar(key)
        self._begin_map()
        yield self
        self._end_map()

    # ------------------------------------------------------------------ #
    # Scalars
    # ------------------------------------------------------------------ #
    def save_string(self, key: str, value: str) -> None:
        self._scalar(key)
        self._scalar(value)

    def save_uint(self, key: str, value: int) -> None:
        self.save_string(key, str(int(value)))

    def save_hex(self, key: str, value: int, digits: int = 2) -> None:
        self.save_string(key, f"0x{int(value):0{digits}X}")

    def save_bool(self, key: str, value: bool) -> None:
        self.save_string(key, "true" if value else "false")

    def save_memory(self, data: Union[bytes, bytearray, np.ndarray]) -> None:
        """Write ``data`` as hex rows into the currently open map."""

        raw = bytes(data)
        for offset in range(0, len(raw), MEMORY_ROW_BYTES):
            row = raw[offset : offset + MEMORY_ROW_BYTES]
            self.save_string(f"{offset:04X}", row.hex().upper())

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def close(self) -> None:
        if self._stream is None:
            return
        try:
            while self._depth > 0:
                self._end_map()
            self._emit(yaml.DocumentEndEvent(explicit=False))
            self._emit(yaml.StreamEndEvent())
        finally:
            self.abandon()

    def abandon(self) -> None:
        """Release the file without completing the document."""

        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def _scalar(self, value: str) -> None:
        self._emit(yaml.ScalarEvent(None, None, (True, True), value))

    def _begin_map(self) -> None:
        self._emit(yaml.MappingStartEvent(None, None, True, flow_style=False))
        self._depth += 1

    def _end_map(self) -> None:
        self._emit(yaml.MappingEndEvent())
        self._depth -= 1

    def _emit(self, event: yaml.Event) -> None:
        try:
            self._emitter.emit(event)
        except (yaml.YAMLError, OSError) as exc:
            raise SnapshotIOError(f"Save error: {exc}") from exc


__all__ = [
    "KEY_CARD",
    "KEY_FILEHDR",
    "KEY_STATE",
    "KEY_TAG",
    "KEY_TYPE",
    "KEY_UNIT",
    "KEY_VERSION",
    "VALUE_AWSS",
    "YamlLoadHelper",
    "YamlReader",
    "YamlSaveHelper",
    "parse_uint",
]
