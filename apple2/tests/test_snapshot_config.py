from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

import pytest

from apple2.cards import HardDiskCard, MockingboardCard
from apple2.config import ResolvedConfiguration, SnapshotSettings
from apple2.config.snapshot_settings import (
    ENV_ACHIEVEMENTS_MODE,
    ENV_CONFIG_PATH,
    ENV_SAVE_STATE_ON_EXIT,
    ENV_SNAPSHOT_PATH,
)
from apple2.machine import Apple2Machine
from apple2.models import Apple2Type, CardType, CpuType
from apple2.snapshot import DEFAULT_SNAPSHOT_NAME, SnapshotEngine, SnapshotStatus
from apple2.tracing_config import ENV_ENABLE_TRACING, ENV_TRACE_OUTPUT, TracingConfig


def test_settings_from_env() -> None:
    settings = SnapshotSettings.from_env(
        {
            ENV_SNAPSHOT_PATH: "/tmp/game.aws.yaml",
            ENV_SAVE_STATE_ON_EXIT: "yes",
            ENV_ACHIEVEMENTS_MODE: "0",
            ENV_CONFIG_PATH: "/tmp/apple2.json",
        }
    )
    assert settings.snapshot_path == "/tmp/game.aws.yaml"
    assert settings.save_state_on_exit is True
    assert settings.achievements_mode is False
    assert settings.config_path == "/tmp/apple2.json"


def test_settings_defaults_and_bad_flag(caplog: pytest.LogCaptureFixture) -> None:
    settings = SnapshotSettings.from_env({ENV_ACHIEVEMENTS_MODE: "sometimes"})
    assert settings == SnapshotSettings()
    assert "sometimes" in caplog.text


def test_configuration_json_round_trip(tmp_path: Path) -> None:
    config = ResolvedConfiguration(
        apple2_type=Apple2Type.PRAVETS8A,
        cpu_type=CpuType.CPU_65C02,
        slot_aux=CardType.EMPTY,
        enable_hdd=True,
    )
    config.slots[7] = CardType.GENERIC_HDD
    path = tmp_path / "config.json"
    config.save(path)
    assert ResolvedConfiguration.load(path) == config


def test_configuration_rejects_short_slot_table() -> None:
    with pytest.raises(ValueError):
        ResolvedConfiguration(slots=[CardType.EMPTY] * 3)


def test_set_filename_splits_and_defaults(tmp_path: Path) -> None:
    engine = SnapshotEngine(Apple2Machine())
    assert engine.filename == DEFAULT_SNAPSHOT_NAME
    assert engine.path == os.getcwd()

    engine.set_filename(str(tmp_path / "game.aws.yaml"))
    assert engine.filename == "game.aws.yaml"
    assert engine.path == str(tmp_path)
    assert engine.pathname == str(tmp_path / "game.aws.yaml")

    engine.set_filename("")
    assert engine.pathname == os.path.join(os.getcwd(), DEFAULT_SNAPSHOT_NAME)


def test_settings_path_seeds_filename(tmp_path: Path) -> None:
    settings = SnapshotSettings(snapshot_path=str(tmp_path / "boot.aws.yaml"))
    engine = SnapshotEngine(Apple2Machine(), settings=settings)
    assert engine.pathname == str(tmp_path / "boot.aws.yaml")


def test_save_state_on_exit(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine]
) -> None:
    settings = SnapshotSettings(save_state_on_exit=True)

    first = Apple2Machine()
    first.cpu.x = 0x99
    engine = make_engine(first, snapshot_path, settings=settings)
    assert engine.startup() is None
    result = engine.shutdown()
    assert result is not None and result.ok
    assert snapshot_path.exists()

    second = Apple2Machine()
    result = make_engine(second, snapshot_path, settings=settings).startup()
    assert result is not None and result.status == SnapshotStatus.OK
    assert second.cpu.x == 0x99


def test_save_state_on_exit_disabled(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine]
) -> None:
    engine = make_engine(Apple2Machine(), snapshot_path)
    assert engine.shutdown() is None
    assert not snapshot_path.exists()


def test_achievements_mode_skips_slots(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine]
) -> None:
    source = Apple2Machine()
    source.insert_card(4, MockingboardCard())
    source.cpu.y = 0x21
    assert make_engine(source, snapshot_path).save_state().ok

    target = Apple2Machine()
    target.set_hdd_enabled(True)
    settings = SnapshotSettings(achievements_mode=True)
    result = make_engine(target, snapshot_path, settings=settings).load_state()

    assert result.ok
    assert target.cpu.y == 0x21
    assert target.card_in_slot(4) is None
    assert result.new_config.slots == result.old_config.slots
    assert target.hdd_enabled is True
    assert isinstance(target.card_in_slot(7), HardDiskCard)


def test_achievements_mode_still_saves_slots(
    snapshot_path: Path, make_engine: Callable[..., SnapshotEngine]
) -> None:
    machine = Apple2Machine()
    settings = SnapshotSettings(achievements_mode=True)
    assert make_engine(machine, snapshot_path, settings=settings).save_state().ok
    assert "Card: Disk][" in snapshot_path.read_text(encoding="utf-8")


def test_tracing_config_from_env(tmp_path: Path) -> None:
    assert TracingConfig.from_env({}) == TracingConfig()
    assert TracingConfig.from_env({ENV_ENABLE_TRACING: "on"}).enabled is True
    assert TracingConfig.from_env({ENV_ENABLE_TRACING: "maybe"}).enabled is False

    config = TracingConfig.from_env({ENV_TRACE_OUTPUT: str(tmp_path / "t.trace")})
    assert config.output_path == tmp_path / "t.trace"
    assert config.start() is False

    config.enable()
    assert config.enabled is True
    assert config.output_path == tmp_path / "t.trace"
    config.enable(tmp_path / "explicit.trace")
    assert config.output_path == tmp_path / "explicit.trace"
