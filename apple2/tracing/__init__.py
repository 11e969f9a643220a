"""Tracing utilities for the snapshot engine."""

from .perfetto_tracing import PerfettoTracer, ensure_trace_started, tracer

__all__ = ["PerfettoTracer", "ensure_trace_started", "tracer"]
