"""Whole-document snapshot save and load.

Parse routines raise :class:`~apple2.errors.SnapshotError`; ``save_state`` and
``load_state`` are the only places that catch it. A load that fails after the
header check leaves the machine partially restored, so it asks the host for a
cold restart instead of trying to undo what was applied.
"""

from __future__ import annotations

import enum
import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Optional

from ..cards.registry import CardRegistry, default_card_registry
from ..config import ResolvedConfiguration, SnapshotSettings
from ..errors import LegacySnapshotError, SnapshotError, SnapshotFormatError
from ..models import Apple2Type
from ..tracing import tracer
from ..yaml_helper import (
    KEY_FILEHDR,
    KEY_TAG,
    KEY_UNIT,
    KEY_VERSION,
    VALUE_AWSS,
    YamlLoadHelper,
    YamlReader,
    YamlSaveHelper,
)
from .context import LoadContext, SaveContext
from .reconciler import ConfigurationReconciler
from .units import UnitRegistry, default_unit_registry

if TYPE_CHECKING:
    from ..machine import Apple2Machine

logger = logging.getLogger(__name__)

SNAPSHOT_FILE_VERSION = 2
DEFAULT_SNAPSHOT_NAME = "SaveState.aws.yaml"
LEGACY_SUFFIX = ".aws"


class SnapshotHooks:
    """Host callbacks; the defaults do nothing except log reported errors."""

    def pause(self) -> None:
        pass

    def resume(self) -> None:
        pass

    def may_proceed(self, action: str) -> bool:
        return True

    def state_saved(self, pathname: str) -> None:
        pass

    def state_loaded(self, pathname: str) -> None:
        pass

    def request_restart(self) -> None:
        logger.warning("Restart requested but no host restart handler is installed")

    def report_error(self, title: str, message: str) -> None:
        logger.error("%s: %s", title, message)

    def update_frame(self, apple2_type: Apple2Type) -> None:
        pass


class PowerCycleHooks(SnapshotHooks):
    """Answers restart requests by power cycling the machine in place."""

    def __init__(self, machine: "Apple2Machine") -> None:
        self.machine = machine

    def request_restart(self) -> None:
        logger.info("Power cycling machine")
        self.machine.power_cycle()


class SnapshotStatus(enum.Enum):
    OK = "ok"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class SnapshotResult:
    status: SnapshotStatus
    error: Optional[SnapshotError] = None
    restart_requested: bool = False
    old_config: Optional[ResolvedConfiguration] = None
    new_config: Optional[ResolvedConfiguration] = None

    @property
    def ok(self) -> bool:
        return self.status == SnapshotStatus.OK


class SnapshotEngine:
    def __init__(
        self,
        machine: "Apple2Machine",
        hooks: Optional[SnapshotHooks] = None,
        settings: Optional[SnapshotSettings] = None,
        units: Optional[UnitRegistry] = None,
        cards: Optional[CardRegistry] = None,
    ) -> None:
        self.machine = machine
        self.hooks = hooks or SnapshotHooks()
        self.settings = settings or SnapshotSettings()
        self.units = units or default_unit_registry()
        self.cards = cards or default_card_registry()
        self.reconciler = ConfigurationReconciler(machine, self.settings, self.hooks)
        self._busy = False
        self._path = ""
        self._filename = ""
        self.set_filename(self.settings.snapshot_path or "")

    # ------------------------------------------------------------------ #
    # Filename
    # ------------------------------------------------------------------ #
    def set_filename(self, pathname: str) -> None:
        """Split ``pathname`` into folder and name; empty selects the default."""

        if not pathname:
            self._path = os.getcwd()
            self._filename = DEFAULT_SNAPSHOT_NAME
            return
        directory, name = os.path.split(os.fspath(pathname))
        self._path = directory or os.getcwd()
        self._filename = name or DEFAULT_SNAPSHOT_NAME

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def path(self) -> str:
        return self._path

    @property
    def pathname(self) -> str:
        return os.path.join(self._path, self._filename)

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        if self._busy:
            raise SnapshotError("Snapshot operation already in progress")
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    # ------------------------------------------------------------------ #
    # Save
    # ------------------------------------------------------------------ #
    def save_state(self) -> SnapshotResult:
        with self._exclusive():
            pathname = self.pathname
            self.hooks.pause()
            try:
                with tracer.slice("Snapshot", "save_state", {"path": pathname}):
                    self._save(pathname)
            except SnapshotError as exc:
                self.hooks.report_error("Save State", str(exc))
                return SnapshotResult(SnapshotStatus.FAILED, error=exc)
            finally:
                self.hooks.resume()

            logger.info("Saved state to %s", pathname)
            self.hooks.state_saved(pathname)
            return SnapshotResult(SnapshotStatus.OK)

    def _save(self, pathname: str) -> None:
        ctx = SaveContext(self.machine, self.cards)
        with YamlSaveHelper(pathname) as writer:
            writer.file_hdr(SNAPSHOT_FILE_VERSION)
            for handler in self.units:
                logger.debug("Saving unit %s", handler.name)
                handler.save(ctx, writer)

    # ------------------------------------------------------------------ #
    # Load
    # ------------------------------------------------------------------ #
    def load_state(self) -> SnapshotResult:
        with self._exclusive():
            self.hooks.pause()
            try:
                with tracer.slice("Snapshot", "load_state", {"path": self.pathname}):
                    return self._load(self.pathname)
            finally:
                self.hooks.resume()

    def _load(self, pathname: str) -> SnapshotResult:
        reader = YamlReader()
        restart = False
        ctx: Optional[LoadContext] = None
        try:
            if pathname.lower().endswith(LEGACY_SUFFIX):
                raise LegacySnapshotError(
                    "Save-state v1 no longer supported. "
                    "Load it with an older release and re-save it as a v2 state file."
                )

            reader.init_parser(pathname)
            self._parse_file_hdr(reader)

            if not self.hooks.may_proceed("load a state"):
                logger.info("Load of %s cancelled", pathname)
                return SnapshotResult(SnapshotStatus.CANCELLED)

            restart = True
            ctx = self._begin_load()
            self._parse_units(reader, ctx)

            self.machine.loaded_save_state = True
            self.reconciler.apply_from_snapshot(ctx.old, ctx.new)
            self.machine.initialize_memory()
        except SnapshotError as exc:
            self.hooks.report_error("Load State", str(exc))
            if restart:
                tracer.instant("Snapshot", "restart_requested", {"error": str(exc)})
                self.hooks.request_restart()
            return SnapshotResult(
                SnapshotStatus.FAILED,
                error=exc,
                restart_requested=restart,
                old_config=ctx.old if ctx else None,
                new_config=ctx.new if ctx else None,
            )
        finally:
            reader.finalise_parser()

        logger.info("Loaded state from %s (units: %s)", pathname, ", ".join(ctx.units_loaded))
        self.hooks.state_loaded(pathname)
        return SnapshotResult(SnapshotStatus.OK, old_config=ctx.old, new_config=ctx.new)

    def _parse_file_hdr(self, reader: YamlReader) -> None:
        key = reader.get_scalar()
        if key != KEY_FILEHDR:
            raise SnapshotFormatError(f"File header: Expected {KEY_FILEHDR}, got {key}")

        loader = YamlLoadHelper(reader)
        tag = loader.load_string(KEY_TAG)
        if tag != VALUE_AWSS:
            raise SnapshotFormatError(f"File header: Unknown tag: {tag}")
        version = loader.load_uint(KEY_VERSION)
        if version != SNAPSHOT_FILE_VERSION:
            raise SnapshotFormatError(
                f"File header: Version mismatch: {version} (expected {SNAPSHOT_FILE_VERSION})"
            )

    def _begin_load(self) -> LoadContext:
        machine = self.machine
        old = ResolvedConfiguration.from_machine(machine)
        machine.reset_for_snapshot()
        return LoadContext(
            machine=machine,
            cards=self.cards,
            settings=self.settings,
            hooks=self.hooks,
            old=old,
            new=ResolvedConfiguration.for_loading(machine),
            base_path=self.path,
        )

    def _parse_units(self, reader: YamlReader, ctx: LoadContext) -> None:
        while True:
            key = reader.get_scalar()
            if key is None:
                return
            if key != KEY_UNIT:
                raise SnapshotFormatError(f"Unknown top-level scalar: {key}")
            self.units.parse_unit(reader, ctx)

    # ------------------------------------------------------------------ #
    # Save-on-exit
    # ------------------------------------------------------------------ #
    def startup(self) -> Optional[SnapshotResult]:
        if not self.settings.save_state_on_exit:
            return None
        if not os.path.exists(self.pathname):
            logger.info("No snapshot at %s to restore", self.pathname)
            return None
        return self.load_state()

    def shutdown(self) -> Optional[SnapshotResult]:
        if not self.settings.save_state_on_exit:
            return None
        return self.save_state()


__all__ = [
    "DEFAULT_SNAPSHOT_NAME",
    "SNAPSHOT_FILE_VERSION",
    "PowerCycleHooks",
    "SnapshotEngine",
    "SnapshotHooks",
    "SnapshotResult",
    "SnapshotStatus",
]
