"""Perfetto tracing switch, read from the environment and CLI flags."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from .config.snapshot_settings import env_flag
from .tracing.perfetto_tracing import DEFAULT_TRACE_PATH, ensure_trace_started

ENV_ENABLE_TRACING = "APPLE2_ENABLE_TRACING"
ENV_TRACE_OUTPUT = "APPLE2_TRACE_OUTPUT"


@dataclass
class TracingConfig:
    """Whether snapshot operations are traced, and where the trace goes.

    ``APPLE2_ENABLE_TRACING`` accepts the usual ``1/true/yes/on`` spellings;
    ``APPLE2_TRACE_OUTPUT`` overrides the default trace path.
    """

    enabled: bool = False
    output_path: Path = Path(DEFAULT_TRACE_PATH)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "TracingConfig":
        env = os.environ if env is None else env
        return cls(
            enabled=env_flag(env, ENV_ENABLE_TRACING),
            output_path=Path(env.get(ENV_TRACE_OUTPUT) or DEFAULT_TRACE_PATH),
        )

    def enable(self, output_path: Optional[Union[str, Path]] = None) -> None:
        """Switch tracing on; an explicit path beats the environment."""
        self.enabled = True
        if output_path:
            self.output_path = Path(output_path)

    def start(self) -> bool:
        if not self.enabled:
            return False
        ensure_trace_started(str(self.output_path))
        return True


__all__ = ["ENV_ENABLE_TRACING", "ENV_TRACE_OUTPUT", "TracingConfig"]
