"""Combine current state with proposed changes into one MAAP document."""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING

from maapsnap.domain.snapshots.contracts import MergeContext, SnapshotDocument, utcnow
from maapsnap.domain.snapshots.merge import merge_entity, merge_tenure
from maapsnap.domain.snapshots.overlays import parse_overlays
from maapsnap.domain.snapshots.state import read_current_state

if TYPE_CHECKING:
    from collections.abc import Mapping

    from maapsnap.domain.snapshots.contracts import Clock, OverlaysByDimension
    from maapsnap.domain.snapshots.records import TeammateRecords
    from maapsnap.domain.snapshots.state import CurrentState, DimensionState

log = logging.getLogger(__name__)


def assemble_snapshot(
    records: TeammateRecords,
    organization_id: int,
    raw_changes: Mapping[str, object],
    *,
    actor_id: int | None = None,
    clock: Clock = utcnow,
) -> SnapshotDocument:
    """Build the MAAP document for ``records`` with ``raw_changes`` applied.

    Raises:
        OverlayError: when ``raw_changes`` is contradictory or malformed.
    """
    state = read_current_state(records, organization_id)
    overlays = parse_overlays(raw_changes, check_in_owners=state.check_in_owners)
    context = MergeContext(now=clock(), actor_id=actor_id)
    return assemble_document(state, overlays, raw_changes=raw_changes, context=context)


def assemble_document(
    state: CurrentState,
    overlays: OverlaysByDimension,
    *,
    raw_changes: Mapping[str, object],
    context: MergeContext,
) -> SnapshotDocument:
    """Merge ``overlays`` into ``state``; the output covers exactly the baseline dimensions."""
    baseline = state.dimension_keys()
    applied = tuple(key for key in overlays if key in baseline)
    dropped = tuple(key for key in overlays if key not in baseline)
    for kind, dimension_id in dropped:
        log.info("Ignoring changes for %s %s: not part of the current state", kind, dimension_id)

    def entry(dimension: DimensionState) -> dict[str, object]:
        overlay = overlays.get(dimension.key)
        check_in = merge_entity(dimension.check_in, overlay, kind=dimension.kind, context=context)
        fields = merge_tenure(dimension.fields, overlay, kind=dimension.kind)
        return dimension.to_entry(check_in, fields)

    maap_data = {
        "position": entry(state.position) if state.position is not None else None,
        "assignments": [entry(item) for item in state.assignments],
        "abilities": [copy.deepcopy(dict(item)) for item in state.abilities],
        "aspirations": [entry(item) for item in state.aspirations],
    }
    log.debug("Assembled snapshot with %d applied overlays", len(applied))
    return SnapshotDocument(
        maap_data=maap_data,
        raw_changes=copy.deepcopy(dict(raw_changes)),
        applied=applied,
        dropped=dropped,
    )
