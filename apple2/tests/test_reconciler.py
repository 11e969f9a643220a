from __future__ import annotations

import json
from pathlib import Path

from apple2.cards import Disk2Card, MockingboardCard
from apple2.config import ResolvedConfiguration, SnapshotSettings
from apple2.machine import Apple2Machine
from apple2.models import Apple2Type, CardType, CpuType
from apple2.snapshot import ConfigurationReconciler, PowerCycleHooks


def test_from_machine_uses_fixed_slot_assumptions() -> None:
    machine = Apple2Machine(slot_cards={4: MockingboardCard()})
    config = ResolvedConfiguration.from_machine(machine)

    assert config.slots[1] == CardType.GENERIC_PRINTER
    assert config.slots[2] == CardType.SSC
    assert config.slots[4] == CardType.MOCKINGBOARD_C
    assert config.slots[6] == CardType.DISK2
    assert config.slots[7] == CardType.EMPTY
    assert config.slot_aux == CardType.EXTENDED_80COL
    assert config.enable_hdd is False

    machine.set_hdd_enabled(True)
    assert ResolvedConfiguration.from_machine(machine).slots[7] == CardType.GENERIC_HDD


def test_for_loading_starts_empty() -> None:
    machine = Apple2Machine(Apple2Type.APPLE2)
    config = ResolvedConfiguration.for_loading(machine)
    assert config.apple2_type == Apple2Type.APPLE2
    assert config.cpu_type == CpuType.CPU_6502
    assert set(config.slots) == {CardType.EMPTY}
    assert config.slot_aux == CardType.EMPTY
    assert config.enable_hdd is False


def test_apply_from_snapshot_attaches_and_detaches(hooks) -> None:
    machine = Apple2Machine()
    machine.insert_card(4, MockingboardCard())
    reconciler = ConfigurationReconciler(machine, SnapshotSettings(), hooks)

    old = ResolvedConfiguration.from_machine(machine)
    new = old.copy()
    new.slots[4] = CardType.EMPTY
    new.slots[5] = CardType.Z80
    new.apple2_type = Apple2Type.APPLE2C
    new.cpu_type = CpuType.CPU_65C02

    diffs = reconciler.apply_from_snapshot(old, new)

    assert machine.card_in_slot(4) is None
    assert machine.card_type(5) == CardType.Z80
    assert machine.apple2_type == Apple2Type.APPLE2C
    assert machine.cpu_type == CpuType.CPU_65C02
    assert machine.configuration == new
    assert machine.configuration is not new
    assert any(line.startswith("slot 4") for line in diffs)
    assert hooks.restarts == 0


def test_apply_from_snapshot_keeps_matching_card(hooks) -> None:
    machine = Apple2Machine()
    disk = machine.card_in_slot(6)
    assert isinstance(disk, Disk2Card)
    reconciler = ConfigurationReconciler(machine, SnapshotSettings(), hooks)

    old = ResolvedConfiguration.from_machine(machine)
    old.slots[6] = CardType.EMPTY
    new = ResolvedConfiguration.from_machine(machine)
    reconciler.apply_from_snapshot(old, new)

    assert machine.card_in_slot(6) is disk


def test_apply_from_settings_requests_restart(tmp_path: Path, hooks) -> None:
    config_path = tmp_path / "apple2.json"
    machine = Apple2Machine()
    reconciler = ConfigurationReconciler(
        machine, SnapshotSettings(config_path=str(config_path)), hooks
    )

    assert reconciler.apply_from_settings(machine.configuration.copy()) is False
    assert hooks.restarts == 0
    assert not config_path.exists()

    target = machine.configuration.copy()
    target.slots[4] = CardType.MOUSE_INTERFACE
    assert reconciler.apply_from_settings(target) is True

    assert hooks.restarts == 1
    assert machine.pending_configuration == target
    assert machine.card_in_slot(4) is None
    saved = json.loads(config_path.read_text())
    assert saved["slots"][4] == CardType.MOUSE_INTERFACE.value


def test_power_cycle_applies_pending_configuration() -> None:
    machine = Apple2Machine()
    reconciler = ConfigurationReconciler(
        machine, SnapshotSettings(), PowerCycleHooks(machine)
    )
    machine.cpu.a = 0x77

    target = machine.configuration.copy()
    target.apple2_type = Apple2Type.APPLE2PLUS
    target.cpu_type = CpuType.CPU_6502
    target.slot_aux = CardType.EMPTY
    target.slots[4] = CardType.MOUSE_INTERFACE
    target.enable_hdd = True
    target.slots[7] = CardType.GENERIC_HDD
    assert reconciler.apply_from_settings(target)

    assert machine.pending_configuration is None
    assert machine.apple2_type == Apple2Type.APPLE2PLUS
    assert machine.card_type(4) == CardType.MOUSE_INTERFACE
    assert machine.hdd_enabled is True
    assert machine.memory.aux_card == CardType.EMPTY
    assert machine.cpu.a == 0
    assert machine.configuration == target


def test_snapshot_reconcile_persists_json(tmp_path: Path, hooks) -> None:
    config_path = tmp_path / "cfg.json"
    machine = Apple2Machine()
    reconciler = ConfigurationReconciler(
        machine, SnapshotSettings(config_path=str(config_path)), hooks
    )
    old = ResolvedConfiguration.from_machine(machine)
    new = old.copy()
    new.slots[5] = CardType.Z80
    reconciler.apply_from_snapshot(old, new)

    assert ResolvedConfiguration.load(config_path) == new
