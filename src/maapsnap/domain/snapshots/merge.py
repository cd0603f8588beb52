"""Apply one overlay to one current check-in."""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Final

from maapsnap.domain.snapshots.contracts import (
    TENURE_FIELDS,
    check_in_field_names,
    empty_check_in,
    tenure_field_names,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from maapsnap.domain.model import DimensionKind, JsonObject
    from maapsnap.domain.snapshots.contracts import MergeContext, OverlayFields

log = logging.getLogger(__name__)

# toggle -> (completion timestamp field, actor field)
TOGGLE_TARGETS: Final[dict[str, tuple[str, str | None]]] = {
    "close_rating": ("official_check_in_completed_at", "finalized_by_id"),
    "manager_complete": ("manager_completed_at", "manager_completed_by_id"),
    "employee_complete": ("employee_completed_at", None),
}


def merge_entity(
    current: Mapping[str, object] | None,
    overlay: OverlayFields | None,
    *,
    kind: DimensionKind,
    context: MergeContext,
) -> JsonObject | None:
    """Return ``current`` with ``overlay`` applied, without touching either input.

    Fields the overlay does not mention keep their current value. A ``True``
    toggle stamps its completion fields only when they are still empty; a
    ``False`` toggle clears them. Tenure fields are left to ``merge_tenure``.
    """
    mentioned = _check_in_values(overlay)
    if not mentioned:
        return copy.deepcopy(dict(current)) if current is not None else None

    merged = copy.deepcopy(dict(current)) if current is not None else empty_check_in(kind)
    allowed = frozenset(check_in_field_names(kind))
    for field_name, value in mentioned.items():
        if field_name in TOGGLE_TARGETS:
            _apply_toggle(merged, field_name, enabled=bool(value), context=context)
        elif field_name in allowed:
            merged[field_name] = value
        else:
            log.debug("Field %s does not apply to %s check-ins", field_name, kind)
    return merged


def merge_tenure(
    fields: Mapping[str, object],
    overlay: OverlayFields | None,
    *,
    kind: DimensionKind,
) -> JsonObject:
    """Return the dimension's entry fields with the overlay's tenure values applied."""
    merged = copy.deepcopy(dict(fields))
    if overlay is None:
        return merged
    mentioned = overlay.mentioned()
    for field_name in tenure_field_names(kind):
        if field_name in mentioned:
            merged[field_name] = mentioned[field_name]
    return merged


def _check_in_values(overlay: OverlayFields | None) -> dict[str, object]:
    if overlay is None:
        return {}
    return {
        name: value for name, value in overlay.mentioned().items() if name not in TENURE_FIELDS
    }


def _apply_toggle(
    merged: JsonObject, toggle: str, *, enabled: bool, context: MergeContext
) -> None:
    completed_at_field, actor_field = TOGGLE_TARGETS[toggle]
    if not enabled:
        merged[completed_at_field] = None
        if actor_field is not None:
            merged[actor_field] = None
        return

    if merged.get(completed_at_field) is not None:
        return
    merged[completed_at_field] = context.timestamp
    if actor_field is not None:
        merged[actor_field] = context.actor_id
