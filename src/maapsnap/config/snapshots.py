"""Snapshot building defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import optional_int_env_var

DEFAULT_SNAPSHOT_REASON = "Bulk check-in finalization"
DEFAULT_EXPLORATION_REASON = "Exploration"


@dataclass(frozen=True, slots=True)
class SnapshotConfig:
    """Defaults applied when a caller omits snapshot metadata.

    ``automation_actor_id`` identifies the teammate recorded as creator and
    finalizer for snapshots produced without an interactive user.
    """

    automation_actor_id: int | None = None
    default_reason: str = DEFAULT_SNAPSHOT_REASON


def get_snapshot_config() -> SnapshotConfig:
    reason = os.getenv("MAAPSNAP_DEFAULT_REASON")
    return SnapshotConfig(
        automation_actor_id=optional_int_env_var("MAAPSNAP_AUTOMATION_ACTOR_ID"),
        default_reason=reason.strip() if reason and reason.strip() else DEFAULT_SNAPSHOT_REASON,
    )
