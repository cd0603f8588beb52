"""Snapshot assembly.

Layers, each a pure function of its inputs:

* ``state``: loaded teammate records -> ``CurrentState`` (baseline per dimension)
* ``overlays``: raw proposed changes -> ``OverlaysByDimension``
* ``merge``: one current check-in or tenure + one overlay -> merged values
* ``assemble``: baseline + overlays -> ``SnapshotDocument``
* ``changes``: proposed document vs. baseline -> ``ChangeReport``

``records`` is the only module that talks to ports.
"""

from __future__ import annotations

from maapsnap.domain.snapshots.assemble import assemble_document, assemble_snapshot
from maapsnap.domain.snapshots.changes import (
    ChangeReport,
    DimensionChange,
    FieldChange,
    detect_changes,
)
from maapsnap.domain.snapshots.contracts import (
    MAAP_DATA_KEYS,
    CheckInOwners,
    Clock,
    DimensionKey,
    MergeContext,
    OverlayFields,
    OverlaysByDimension,
    SnapshotDocument,
    utcnow,
)
from maapsnap.domain.snapshots.errors import (
    OverlayConflictError,
    OverlayError,
    OverlayOwnershipError,
    OverlayValueError,
    TeammateNotFoundError,
)
from maapsnap.domain.snapshots.merge import merge_entity, merge_tenure
from maapsnap.domain.snapshots.overlays import parse_overlays
from maapsnap.domain.snapshots.records import TeammateRecords, load_teammate_records
from maapsnap.domain.snapshots.state import CurrentState, DimensionState, read_current_state

__all__ = [  # noqa: RUF022
    # contracts
    "MAAP_DATA_KEYS",
    "CheckInOwners",
    "Clock",
    "DimensionKey",
    "MergeContext",
    "OverlayFields",
    "OverlaysByDimension",
    "SnapshotDocument",
    "utcnow",
    # errors
    "OverlayError",
    "OverlayConflictError",
    "OverlayOwnershipError",
    "OverlayValueError",
    "TeammateNotFoundError",
    # layers
    "TeammateRecords",
    "load_teammate_records",
    "CurrentState",
    "DimensionState",
    "read_current_state",
    "parse_overlays",
    "merge_entity",
    "merge_tenure",
    "assemble_document",
    "assemble_snapshot",
    "ChangeReport",
    "DimensionChange",
    "FieldChange",
    "detect_changes",
]
