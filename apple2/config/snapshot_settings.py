"""Environment-backed settings consumed by the snapshot engine."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

ENV_SNAPSHOT_PATH = "APPLE2_SNAPSHOT_PATH"
ENV_SAVE_STATE_ON_EXIT = "APPLE2_SAVE_STATE_ON_EXIT"
ENV_ACHIEVEMENTS_MODE = "APPLE2_ACHIEVEMENTS_MODE"
ENV_CONFIG_PATH = "APPLE2_CONFIG_PATH"


def env_flag(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = env.get(name, "").strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    if raw:
        logger.warning("Ignoring unrecognised value for %s: %r", name, raw)
    return default


@dataclass
class SnapshotSettings:
    """Options that change how snapshots are located and applied.

    ``achievements_mode`` makes loads leave the slot table alone;
    ``config_path`` persists each reconciled configuration as JSON.
    """

    snapshot_path: Optional[str] = None
    save_state_on_exit: bool = False
    achievements_mode: bool = False
    config_path: Optional[str] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "SnapshotSettings":
        env = os.environ if env is None else env
        return cls(
            snapshot_path=env.get(ENV_SNAPSHOT_PATH) or None,
            save_state_on_exit=env_flag(env, ENV_SAVE_STATE_ON_EXIT),
            achievements_mode=env_flag(env, ENV_ACHIEVEMENTS_MODE),
            config_path=env.get(ENV_CONFIG_PATH) or None,
        )


__all__ = [
    "ENV_ACHIEVEMENTS_MODE",
    "ENV_CONFIG_PATH",
    "ENV_SAVE_STATE_ON_EXIT",
    "ENV_SNAPSHOT_PATH",
    "SnapshotSettings",
    "env_flag",
]
