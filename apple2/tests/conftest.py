"""Shared pytest fixtures for snapshot engine tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest

from apple2.config import SnapshotSettings
from apple2.machine import Apple2Machine
from apple2.models import Apple2Type
from apple2.snapshot import SnapshotEngine, SnapshotHooks


class RecordingHooks(SnapshotHooks):
    """Hooks that log every call so tests can assert on the sequence."""

    def __init__(self, proceed: bool = True) -> None:
        self.proceed = proceed
        self.calls: List[Tuple[str, object]] = []
        self.errors: List[Tuple[str, str]] = []
        self.restarts = 0

    def pause(self) -> None:
        self.calls.append(("pause", None))

    def resume(self) -> None:
        self.calls.append(("resume", None))

    def may_proceed(self, action: str) -> bool:
        self.calls.append(("may_proceed", action))
        return self.proceed

    def state_saved(self, pathname: str) -> None:
        self.calls.append(("state_saved", pathname))

    def state_loaded(self, pathname: str) -> None:
        self.calls.append(("state_loaded", pathname))

    def request_restart(self) -> None:
        self.calls.append(("request_restart", None))
        self.restarts += 1

    def report_error(self, title: str, message: str) -> None:
        self.calls.append(("report_error", title))
        self.errors.append((title, message))

    def update_frame(self, apple2_type: Apple2Type) -> None:
        self.calls.append(("update_frame", apple2_type))

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def hooks() -> RecordingHooks:
    return RecordingHooks()


@pytest.fixture
def make_engine(
    hooks: RecordingHooks,
) -> Callable[..., SnapshotEngine]:
    def _make(
        machine: Apple2Machine,
        path: Path,
        settings: Optional[SnapshotSettings] = None,
        engine_hooks: Optional[SnapshotHooks] = None,
    ) -> SnapshotEngine:
        engine = SnapshotEngine(machine, hooks=engine_hooks or hooks, settings=settings)
        engine.set_filename(str(path))
        return engine

    return _make


@pytest.fixture
def snapshot_path(tmp_path: Path) -> Path:
    return tmp_path / "SaveState.aws.yaml"
