from __future__ import annotations

from pathlib import Path
from typing import Callable

from apple2.machine import Apple2Machine
from apple2.snapshot import SnapshotEngine
from apple2.tracing import PerfettoTracer, tracer


def test_tracer_disabled_by_default() -> None:
    t = PerfettoTracer()
    assert not t.enabled
    with t.slice("Snapshot", "noop"):
        pass
    t.instant("Cards", "noop")
    t.stop()


def test_start_stop_creates_file(tmp_path: Path) -> None:
    path = tmp_path / "unit.perfetto-trace"
    t = PerfettoTracer()
    t.start(str(path))
    assert t.enabled
    with t.slice("Units", "Apple2", {"version": 2}):
        t.instant("Cards", "Disk][", {"slot": 6})
    t.begin_slice("Snapshot", "left open")
    t.stop()

    assert not t.enabled
    assert path.exists()
    assert path.stat().st_size > 0


def test_engine_emits_trace(
    tmp_path: Path, snapshot_path: Path, make_engine: Callable[..., SnapshotEngine]
) -> None:
    trace_path = tmp_path / "engine.perfetto-trace"
    tracer.start(str(trace_path))
    try:
        engine = make_engine(Apple2Machine(), snapshot_path)
        assert engine.save_state().ok
        assert engine.load_state().ok
    finally:
        tracer.stop()
    assert trace_path.exists()
