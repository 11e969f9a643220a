from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from apple2.cli import describe_snapshot, main
from apple2.machine import Apple2Machine
from apple2.models import Apple2Type
from apple2.snapshot import SnapshotEngine


def test_describe_snapshot(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine]
) -> None:
    machine = Apple2Machine()
    machine.set_hdd_enabled(True)
    assert make_engine(machine, snapshot_path).save_state().ok

    summary = describe_snapshot(str(snapshot_path))
    assert summary["tag"] == "AppleWin Save State"
    assert summary["version"] == 2
    assert [unit["type"] for unit in summary["units"]] == [
        "Apple2",
        "Auxiliary Slot",
        "Slots",
    ]
    slots = summary["units"][2]["slots"]
    assert slots["6"] == ("Disk][", 2)
    assert slots["7"] == ("Generic HDD", 1)


def test_info_command(
    snapshot_path: Path,
    make_engine: Callable[..., SnapshotEngine],
    capsys: pytest.CaptureFixture[str],
) -> None:
    assert make_engine(Apple2Machine(), snapshot_path).save_state().ok

    assert main(["info", str(snapshot_path)]) == 0
    out = capsys.readouterr().out
    assert "AppleWin Save State v2" in out
    assert "Slots v1" in out
    assert "slot 2: Super Serial Card v1" in out


def test_info_reports_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["info", str(tmp_path / "absent.yaml")]) == 1
    assert "Error:" in capsys.readouterr().err


def test_convert_command(
    tmp_path: Path, make_engine: Callable[..., SnapshotEngine]
) -> None:
    src = tmp_path / "src.aws.yaml"
    dst = tmp_path / "dst.aws.yaml"
    machine = Apple2Machine(Apple2Type.APPLE2C)
    machine.memory.main[0x800] = 0x4C
    assert make_engine(machine, src).save_state().ok

    assert main(["convert", str(src), str(dst)]) == 0
    assert dst.read_text(encoding="utf-8") == src.read_text(encoding="utf-8")


def test_convert_rejects_legacy(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    legacy = tmp_path / "old.aws"
    legacy.write_bytes(b"\x01")
    assert main(["convert", str(legacy), str(tmp_path / "new.aws.yaml")]) == 1
    assert "Load failed" in capsys.readouterr().err
