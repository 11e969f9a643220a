from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from apple2.cards import MouseCard
from apple2.errors import (
    LegacySnapshotError,
    SnapshotError,
    SnapshotFormatError,
    SnapshotIOError,
)
from apple2.machine import Apple2Machine
from apple2.models import Apple2Type, CardType
from apple2.snapshot import SnapshotEngine, SnapshotStatus
from apple2.yaml_helper import YamlReader


def _saved_text(machine: Apple2Machine, path: Path, make_engine) -> str:
    assert make_engine(machine, path).save_state().ok
    return path.read_text(encoding="utf-8")


def _first_unit_offset(text: str) -> int:
    return text.index("\nUnit:") + 1


def test_header_version_rejected_without_reset(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine], hooks
) -> None:
    text = _saved_text(Apple2Machine(), snapshot_path, make_engine)
    header, body = text[: _first_unit_offset(text)], text[_first_unit_offset(text) :]
    snapshot_path.write_text(header.replace("Version: 2", "Version: 3") + body)

    target = Apple2Machine()
    target.memory.main[0x400] = 0xC1
    target.keyboard.last_key = 0x8D
    hooks.calls.clear()
    result = make_engine(target, snapshot_path).load_state()

    assert result.status == SnapshotStatus.FAILED
    assert isinstance(result.error, SnapshotFormatError)
    assert "Version mismatch" in str(result.error)
    assert result.restart_requested is False
    assert target.memory.main[0x400] == 0xC1
    assert target.keyboard.last_key == 0x8D
    assert "may_proceed" not in hooks.names()
    assert hooks.errors[0][0] == "Load State"
    assert hooks.restarts == 0


def test_wrong_tag_rejected(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine]
) -> None:
    text = _saved_text(Apple2Machine(), snapshot_path, make_engine)
    snapshot_path.write_text(text.replace("AppleWin Save State", "Some Other State", 1))

    result = make_engine(Apple2Machine(), snapshot_path).load_state()
    assert result.status == SnapshotStatus.FAILED
    assert "Unknown tag" in str(result.error)


def test_invalid_utf8_in_header_reported_without_restart(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine], hooks
) -> None:
    snapshot_path.write_bytes(b"File_hdr:\n  Tag: \xff\xfe\n")

    result = make_engine(Apple2Machine(), snapshot_path).load_state()

    assert result.status == SnapshotStatus.FAILED
    assert isinstance(result.error, SnapshotFormatError)
    assert "Invalid UTF-8" in str(result.error)
    assert result.restart_requested is False
    assert hooks.errors[0][0] == "Load State"
    assert hooks.restarts == 0


def test_invalid_utf8_after_reset_requests_restart(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine], hooks
) -> None:
    raw = _saved_text(Apple2Machine(), snapshot_path, make_engine).encode("utf-8")
    card_at = raw.rindex(b"Card: Disk][")
    snapshot_path.write_bytes(raw[:card_at] + b"Card: \xff\xfe" + raw[card_at + 12 :])

    target = Apple2Machine()
    hooks.calls.clear()
    result = make_engine(target, snapshot_path).load_state()

    assert result.status == SnapshotStatus.FAILED
    assert isinstance(result.error, SnapshotFormatError)
    assert "Invalid UTF-8" in str(result.error)
    assert "may_proceed" in hooks.names()
    assert result.restart_requested is True
    assert hooks.restarts == 1
    assert hooks.errors[0][0] == "Load State"


def test_unknown_unit_stops_later_units(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine], hooks
) -> None:
    source = Apple2Machine()
    source.insert_card(4, MouseCard())
    text = _saved_text(source, snapshot_path, make_engine)
    bogus = "Unit:\n  Type: Bogus\n  Version: 1\n  State:\n    Answer: 42\n"
    slots_at = text.index("Unit:\n  Type: Slots")
    snapshot_path.write_text(text[:slots_at] + bogus + text[slots_at:])

    target = Apple2Machine()
    result = make_engine(target, snapshot_path).load_state()

    assert result.status == SnapshotStatus.FAILED
    assert str(result.error) == "Unit: Unknown type: Bogus"
    assert target.card_in_slot(4) is None
    assert result.new_config.slots[4] == CardType.EMPTY
    assert result.restart_requested is True
    assert hooks.restarts == 1


def test_unknown_card_keeps_earlier_slots(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine]
) -> None:
    text = _saved_text(Apple2Machine(), snapshot_path, make_engine)
    snapshot_path.write_text(text.replace("Card: Disk][", "Card: Widget Card", 1))

    result = make_engine(Apple2Machine(), snapshot_path).load_state()

    assert result.status == SnapshotStatus.FAILED
    assert "Unknown card: Widget Card" in str(result.error)
    assert result.new_config.slots[1] == CardType.GENERIC_PRINTER
    assert result.new_config.slots[2] == CardType.SSC
    assert result.new_config.slots[6] == CardType.EMPTY


@pytest.mark.parametrize("slot_key", ["8", "x", "-1", "12"])
def test_slot_number_bounds(
    slot_key: str, snapshot_path: Path, make_engine: Callable[..., SnapshotEngine]
) -> None:
    text = _saved_text(Apple2Machine(), snapshot_path, make_engine)
    snapshot_path.write_text(text.replace("\n    1:\n", f"\n    '{slot_key}':\n", 1))

    result = make_engine(Apple2Machine(), snapshot_path).load_state()
    assert result.status == SnapshotStatus.FAILED
    assert f"Invalid slot #: {slot_key}" in str(result.error)


def test_card_in_wrong_slot(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine]
) -> None:
    text = _saved_text(Apple2Machine(), snapshot_path, make_engine)
    snapshot_path.write_text(text.replace("\n    6:\n", "\n    3:\n", 1))

    result = make_engine(Apple2Machine(), snapshot_path).load_state()
    assert result.status == SnapshotStatus.FAILED
    assert "wrong slot" in str(result.error)


def test_legacy_suffix_rejected_before_parser(
    tmp_path: Path,
    make_engine: Callable[..., SnapshotEngine],
    hooks,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    legacy = tmp_path / "Old.aws"
    legacy.write_bytes(b"\x00binary")

    def _fail(self, pathname):
        raise AssertionError("parser must not be initialised")

    monkeypatch.setattr(YamlReader, "init_parser", _fail)
    result = make_engine(Apple2Machine(), legacy).load_state()

    assert result.status == SnapshotStatus.FAILED
    assert isinstance(result.error, LegacySnapshotError)
    assert "no longer supported" in str(result.error)
    assert result.restart_requested is False
    assert hooks.names() == ["pause", "report_error", "resume"]


def test_missing_file_is_io_error(
    tmp_path: Path, make_engine: Callable[..., SnapshotEngine]
) -> None:
    result = make_engine(Apple2Machine(), tmp_path / "absent.aws.yaml").load_state()
    assert isinstance(result.error, SnapshotIOError)
    assert result.restart_requested is False


def test_wrong_slots_version_leaves_apple2_applied(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine], hooks
) -> None:
    source = Apple2Machine(Apple2Type.APPLE2E)
    source.cpu.pc = 0xFA62
    text = _saved_text(source, snapshot_path, make_engine)
    snapshot_path.write_text(
        text.replace("Type: Slots\n  Version: 1", "Type: Slots\n  Version: 2", 1)
    )

    target = Apple2Machine(Apple2Type.APPLE2E_ENHANCED)
    result = make_engine(target, snapshot_path).load_state()

    assert result.status == SnapshotStatus.FAILED
    assert "Slots: Version mismatch" in str(result.error)
    assert target.apple2_type == Apple2Type.APPLE2E
    assert target.cpu.pc == 0xFA62
    assert result.new_config.apple2_type == Apple2Type.APPLE2E
    assert result.restart_requested is True
    assert hooks.restarts == 1


def test_apple2_unit_version_gating(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine]
) -> None:
    text = _saved_text(Apple2Machine(), snapshot_path, make_engine)
    snapshot_path.write_text(
        text.replace("Type: Apple2\n  Version: 2", "Type: Apple2\n  Version: 0", 1)
    )
    result = make_engine(Apple2Machine(), snapshot_path).load_state()
    assert "Apple2: Version mismatch" in str(result.error)


def test_unknown_model_rejected(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine]
) -> None:
    text = _saved_text(Apple2Machine(), snapshot_path, make_engine)
    snapshot_path.write_text(text.replace("Model: Enhanced Apple//e", "Model: Apple IIgs", 1))
    result = make_engine(Apple2Machine(), snapshot_path).load_state()
    assert str(result.error) == "Load: Unknown Apple2 type: Apple IIgs"


def test_unknown_top_level_key(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine]
) -> None:
    text = _saved_text(Apple2Machine(), snapshot_path, make_engine)
    snapshot_path.write_text(text.replace("\nUnit:", "\nThing:", 1))
    result = make_engine(Apple2Machine(), snapshot_path).load_state()
    assert "Unknown top-level scalar: Thing" in str(result.error)


def test_cancel_leaves_machine_untouched(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine], hooks
) -> None:
    source = Apple2Machine()
    source.cpu.a = 0x42
    _saved_text(source, snapshot_path, make_engine)

    hooks.proceed = False
    hooks.calls.clear()
    target = Apple2Machine()
    target.keyboard.last_key = 0x9B
    result = make_engine(target, snapshot_path).load_state()

    assert result.status == SnapshotStatus.CANCELLED
    assert result.error is None
    assert target.cpu.a == 0
    assert target.keyboard.last_key == 0x9B
    assert target.loaded_save_state is False
    assert hooks.names() == ["pause", "may_proceed", "resume"]
    assert hooks.errors == []


def test_reentrant_operation_refused(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine], hooks
) -> None:
    engine = make_engine(Apple2Machine(), snapshot_path)
    nested = []

    def state_saved(pathname: str) -> None:
        with pytest.raises(SnapshotError, match="already in progress"):
            engine.load_state()
        nested.append(pathname)

    hooks.state_saved = state_saved
    assert engine.save_state().ok
    assert nested == [str(snapshot_path)]
    assert engine.load_state().ok


def test_save_failure_reported(
    tmp_path: Path, make_engine: Callable[..., SnapshotEngine], hooks
) -> None:
    engine = make_engine(Apple2Machine(), tmp_path / "missing-dir" / "out.aws.yaml")
    result = engine.save_state()
    assert result.status == SnapshotStatus.FAILED
    assert isinstance(result.error, SnapshotIOError)
    assert hooks.errors[0][0] == "Save State"
    assert "state_saved" not in hooks.names()
