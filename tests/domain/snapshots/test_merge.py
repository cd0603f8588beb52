from __future__ import annotations

import copy
from datetime import UTC, datetime

from maapsnap.domain.model import DimensionKind
from maapsnap.domain.snapshots import MergeContext, OverlayFields, merge_entity, merge_tenure

CONTEXT = MergeContext(now=datetime(2026, 3, 1, 12, 0, tzinfo=UTC), actor_id=8)
STAMP = "2026-03-01T12:00:00+00:00"


def _current() -> dict[str, object]:
    return {
        "check_in_id": 501,
        "check_in_started_on": "2026-02-01",
        "employee_rating": "meeting",
        "employee_private_notes": None,
        "employee_completed_at": "2026-02-10T08:00:00+00:00",
        "manager_rating": None,
        "manager_private_notes": None,
        "manager_completed_at": "2026-02-11T08:00:00+00:00",
        "manager_completed_by_id": 9,
        "shared_notes": "Existing notes",
        "official_rating": None,
        "official_check_in_completed_at": None,
        "finalized_by_id": None,
        "actual_energy_percentage": 30,
        "employee_personal_alignment": "like",
    }


def test_no_overlay_returns_an_equal_copy() -> None:
    current = _current()

    merged = merge_entity(current, None, kind=DimensionKind.ASSIGNMENT, context=CONTEXT)

    assert merged == current
    assert merged is not current


def test_no_overlay_and_no_current_is_none() -> None:
    assert merge_entity(None, None, kind=DimensionKind.ASSIGNMENT, context=CONTEXT) is None


def test_overlay_fields_replace_current_values_by_name() -> None:
    overlay = OverlayFields(shared_notes="Updated", official_rating="exceeding")

    merged = merge_entity(_current(), overlay, kind=DimensionKind.ASSIGNMENT, context=CONTEXT)

    assert merged is not None
    assert merged["shared_notes"] == "Updated"
    assert merged["official_rating"] == "exceeding"
    assert merged["employee_rating"] == "meeting"


def test_inputs_are_not_mutated() -> None:
    current = _current()
    snapshot = copy.deepcopy(current)

    merge_entity(
        current,
        OverlayFields(shared_notes="Updated", manager_complete=False),
        kind=DimensionKind.ASSIGNMENT,
        context=CONTEXT,
    )

    assert current == snapshot


def test_close_rating_true_stamps_time_and_actor() -> None:
    merged = merge_entity(
        _current(),
        OverlayFields(close_rating=True),
        kind=DimensionKind.ASSIGNMENT,
        context=CONTEXT,
    )

    assert merged is not None
    assert merged["official_check_in_completed_at"] == STAMP
    assert merged["finalized_by_id"] == 8


def test_true_toggle_keeps_an_existing_completion() -> None:
    merged = merge_entity(
        _current(),
        OverlayFields(manager_complete=True),
        kind=DimensionKind.ASSIGNMENT,
        context=CONTEXT,
    )

    assert merged is not None
    assert merged["manager_completed_at"] == "2026-02-11T08:00:00+00:00"
    assert merged["manager_completed_by_id"] == 9


def test_false_toggle_clears_completion_fields() -> None:
    merged = merge_entity(
        _current(),
        OverlayFields(manager_complete=False, employee_complete=False),
        kind=DimensionKind.ASSIGNMENT,
        context=CONTEXT,
    )

    assert merged is not None
    assert merged["manager_completed_at"] is None
    assert merged["manager_completed_by_id"] is None
    assert merged["employee_completed_at"] is None


def test_false_toggle_is_idempotent() -> None:
    overlay = OverlayFields(close_rating=False)
    completed = _current() | {
        "official_check_in_completed_at": "2026-02-20T08:00:00+00:00",
        "finalized_by_id": 9,
    }

    once = merge_entity(completed, overlay, kind=DimensionKind.ASSIGNMENT, context=CONTEXT)
    twice = merge_entity(once, overlay, kind=DimensionKind.ASSIGNMENT, context=CONTEXT)
    never_completed = merge_entity(
        _current(), overlay, kind=DimensionKind.ASSIGNMENT, context=CONTEXT
    )

    assert once == twice
    assert once is not None
    assert once["official_check_in_completed_at"] is None
    assert once["finalized_by_id"] is None
    assert never_completed == _current()


def test_overlay_without_current_starts_from_empty_template() -> None:
    merged = merge_entity(
        None,
        OverlayFields(shared_notes="First words"),
        kind=DimensionKind.POSITION,
        context=CONTEXT,
    )

    assert merged is not None
    assert merged["check_in_id"] is None
    assert merged["shared_notes"] == "First words"
    assert merged["official_rating"] is None
    assert "actual_energy_percentage" not in merged


def test_assignment_only_fields_are_ignored_for_other_kinds() -> None:
    current = _current()
    del current["actual_energy_percentage"]
    del current["employee_personal_alignment"]

    merged = merge_entity(
        current,
        OverlayFields(actual_energy_percentage=50),
        kind=DimensionKind.ASPIRATION,
        context=CONTEXT,
    )

    assert merged == current


def test_rating_values_pass_through_verbatim() -> None:
    merged = merge_entity(
        _current(),
        OverlayFields(manager_rating=3, employee_rating="not-a-known-rating"),
        kind=DimensionKind.ASSIGNMENT,
        context=CONTEXT,
    )

    assert merged is not None
    assert merged["manager_rating"] == 3
    assert merged["employee_rating"] == "not-a-known-rating"


def test_tenure_only_overlay_leaves_the_check_in_alone() -> None:
    overlay = OverlayFields(anticipated_energy_percentage=35)

    merged = merge_entity(_current(), overlay, kind=DimensionKind.ASSIGNMENT, context=CONTEXT)

    assert merged == _current()
    assert merge_entity(None, overlay, kind=DimensionKind.ASSIGNMENT, context=CONTEXT) is None


def test_merge_tenure_applies_energy_to_assignment_fields() -> None:
    fields = {
        "assignment_id": 80,
        "anticipated_energy_percentage": 50,
        "rated_assignment": {"official_rating": "meeting"},
    }
    overlay = OverlayFields(anticipated_energy_percentage=35, shared_notes="Check-in only")

    merged = merge_tenure(fields, overlay, kind=DimensionKind.ASSIGNMENT)

    assert merged == {
        "assignment_id": 80,
        "anticipated_energy_percentage": 35,
        "rated_assignment": {"official_rating": "meeting"},
    }
    assert fields["anticipated_energy_percentage"] == 50
    assert merge_tenure(fields, None, kind=DimensionKind.ASSIGNMENT) == fields


def test_merge_tenure_ignores_energy_for_positions() -> None:
    fields = {"position_id": 3, "seat_id": 12}

    merged = merge_tenure(
        fields, OverlayFields(anticipated_energy_percentage=35), kind=DimensionKind.POSITION
    )

    assert merged == fields
