"""Apply configuration differences after a load, or queue them for restart."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

from ..config import ResolvedConfiguration, SnapshotSettings
from ..models import NUM_SLOTS
from ..tracing import tracer

if TYPE_CHECKING:
    from ..machine import Apple2Machine
    from .engine import SnapshotHooks

logger = logging.getLogger(__name__)


class ConfigurationReconciler:
    """Two paths with different outcomes.

    A snapshot load has already restored card state, so its differences are
    applied live. A settings edit only has a target configuration, so it is
    stored as pending and a cold restart is requested instead.
    """

    def __init__(
        self,
        machine: "Apple2Machine",
        settings: SnapshotSettings,
        hooks: "SnapshotHooks",
    ) -> None:
        self.machine = machine
        self.settings = settings
        self.hooks = hooks

    def apply_from_snapshot(
        self, old: ResolvedConfiguration, new: ResolvedConfiguration
    ) -> List[str]:
        diffs = old.differences(new)
        machine = self.machine
        with tracer.slice("Config", "apply_from_snapshot", {"changes": len(diffs)}):
            if new.apple2_type != old.apple2_type:
                machine.set_apple2_type(new.apple2_type)
            if new.cpu_type != machine.cpu_type:
                machine.set_main_cpu(new.cpu_type)

            for slot in range(NUM_SLOTS):
                if old.slots[slot] != new.slots[slot]:
                    machine.configure_slot(slot, new.slots[slot])

            if new.slot_aux != old.slot_aux and new.slot_aux != machine.memory.aux_card:
                machine.set_aux_card(new.slot_aux)

            if new.enable_hdd != old.enable_hdd or machine.hdd_enabled != new.enable_hdd:
                machine.set_hdd_enabled(new.enable_hdd)

            machine.configuration = new.copy()
            self._persist(new)

        for line in diffs:
            logger.info("Snapshot configuration change: %s", line)
        return diffs

    def apply_from_settings(self, new: ResolvedConfiguration) -> bool:
        """Returns True when a restart was requested."""

        diffs = self.machine.configuration.differences(new)
        if not diffs:
            return False
        for line in diffs:
            logger.info("Pending configuration change: %s", line)
        self.machine.pending_configuration = new.copy()
        self._persist(new)
        tracer.instant("Config", "restart_requested", {"changes": len(diffs)})
        self.hooks.request_restart()
        return True

    def _persist(self, config: ResolvedConfiguration) -> None:
        if not self.settings.config_path:
            return
        try:
            config.save(self.settings.config_path)
        except OSError as exc:
            logger.warning(
                "Failed to persist configuration to %s: %s", self.settings.config_path, exc
            )


__all__ = ["ConfigurationReconciler"]
