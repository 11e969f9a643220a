# apple2/tracing/perfetto_tracing.py
import atexit
import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, cast

from retrobus_perfetto import PerfettoTraceBuilder

logger = logging.getLogger(__name__)

DEFAULT_TRACE_PATH = "apple2-snapshot.perfetto-trace"

# Tracks created up front so traces always show them in the same order
SNAPSHOT_TRACKS = ("Snapshot", "Units", "Cards", "Config")


class PerfettoTracer:
    """
    Wall-clock Perfetto tracer for snapshot save/load activity.
    Off by default; every event API is a no-op until start() is called.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._enabled = False
        self._start = 0.0
        self._builder: Optional[PerfettoTraceBuilder] = None
        self._path: Optional[str] = None
        self._track_uuids: Dict[str, int] = {}
        self._open_slices: Dict[str, List[str]] = {}
        self._atexit_registered = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def path(self) -> Optional[str]:
        return self._path

    def _now_ns(self) -> int:
        return int((time.perf_counter() - self._start) * 1_000_000_000)

    def _ensure_track(self, name: str) -> int:
        with self._lock:
            if name in self._track_uuids:
                return self._track_uuids[name]
            if not self._builder:
                return 0
            uuid = self._builder.add_thread(name)
            self._track_uuids[name] = uuid
            self._open_slices[name] = []
            return uuid

    def _get_builder(self) -> Optional[PerfettoTraceBuilder]:
        if not self._enabled or self._builder is None:
            return None
        return cast(PerfettoTraceBuilder, self._builder)

    def start(self, path: str = DEFAULT_TRACE_PATH) -> None:
        """Start tracing to the specified file."""
        with self._lock:
            if self._enabled:
                return

            self._enabled = True
            self._path = path
            self._start = time.perf_counter()
            self._track_uuids.clear()
            self._open_slices.clear()
            self._builder = PerfettoTraceBuilder("Apple II Snapshot")
            for track in SNAPSHOT_TRACKS:
                self._ensure_track(track)

            if not self._atexit_registered:
                atexit.register(self.safe_stop)
                self._atexit_registered = True
            logger.info("Perfetto tracing started → %s", path)

    def safe_stop(self) -> None:
        """atexit variant of stop(); failures are logged, not raised."""
        try:
            self.stop()
        except OSError as exc:
            logger.warning("Failed to write trace %s: %s", self._path, exc)

    def stop(self) -> None:
        """Close any open slices and write the trace file."""
        with self._lock:
            if not self._enabled or not self._builder:
                return

            for track_name, stack in self._open_slices.items():
                track_uuid = self._track_uuids.get(track_name)
                if track_uuid is None:
                    continue
                while stack:
                    stack.pop()
                    self._builder.end_slice(track_uuid, self._now_ns())

            path = self._path or DEFAULT_TRACE_PATH
            try:
                self._builder.save(path)
            finally:
                self._enabled = False
                self._builder = None
                self._track_uuids.clear()
                self._open_slices.clear()
                self._path = None
            logger.info("Perfetto trace written to %s", path)

    # ---- Event APIs ----

    def instant(
        self, track: str, name: str, args: Optional[Dict[str, Any]] = None
    ) -> None:
        builder = self._get_builder()
        if not builder:
            return

        event = builder.add_instant_event(self._ensure_track(track), name, self._now_ns())
        if args:
            event.add_annotations(args)

    def begin_slice(
        self, track: str, name: str, args: Optional[Dict[str, Any]] = None
    ) -> None:
        builder = self._get_builder()
        if not builder:
            return

        track_uuid = self._ensure_track(track)
        self._open_slices.setdefault(track, []).append(name)
        event = builder.begin_slice(track_uuid, name, self._now_ns())
        if args:
            event.add_annotations(args)

    def end_slice(self, track: str) -> None:
        builder = self._get_builder()
        if not builder:
            return

        track_uuid = self._ensure_track(track)
        stack = self._open_slices.get(track)
        if stack:
            stack.pop()
        builder.end_slice(track_uuid, self._now_ns())

    @contextmanager
    def slice(
        self, track: str, name: str, args: Optional[Dict[str, Any]] = None
    ) -> Iterator[None]:
        """Duration slice; a no-op while tracing is disabled."""
        if self._get_builder() is None:
            yield
            return

        self.begin_slice(track, name, args)
        try:
            yield
        finally:
            self.end_slice(track)


# Global tracer for convenience
tracer = PerfettoTracer()


def ensure_trace_started(path: str) -> None:
    """Force-start the Perfetto tracer if it is not already active."""
    if not tracer.enabled:
        tracer.start(path)


__all__ = ["DEFAULT_TRACE_PATH", "PerfettoTracer", "ensure_trace_started", "tracer"]
