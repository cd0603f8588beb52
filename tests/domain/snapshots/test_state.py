from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime

from maapsnap.domain.model import Assignment, AssignmentTenure, DimensionKind
from maapsnap.domain.snapshots import TeammateRecords, read_current_state
from tests.helpers.records import (
    ORGANIZATION_ID,
    OTHER_ORGANIZATION_ID,
    TEAMMATE_ID,
    make_assignment_check_in,
    make_assignment_tenure,
    make_teammate,
    without_check_in,
)


def test_assignments_are_ordered_by_energy_then_id(records: TeammateRecords) -> None:
    tie = make_assignment_tenure(79, tenure_id=9, energy=30)
    records = replace(
        records,
        assignments=(
            *records.assignments,
            Assignment(id=79, company_id=ORGANIZATION_ID, title="x"),
        ),
        assignment_tenures=(*records.assignment_tenures, tie),
    )

    state = read_current_state(records, ORGANIZATION_ID)

    assert [item.dimension_id for item in state.assignments] == [80, 79, 81, 84]


def test_assignment_entry_shape(records: TeammateRecords) -> None:
    state = read_current_state(records, ORGANIZATION_ID)
    entry = state.to_maap_data()["assignments"][0]

    assert entry["assignment_id"] == 80
    assert entry["anticipated_energy_percentage"] == 50
    assert entry["started_at"] == "2026-01-01T00:00:00+00:00"
    assert "official_rating" not in entry
    assert entry["check_in"]["check_in_id"] == 501
    assert entry["check_in"]["shared_notes"] == "Triage notes"
    assert entry["check_in"]["check_in_started_on"] == "2026-02-01"


def test_rated_assignment_uses_latest_closed_tenure(records: TeammateRecords) -> None:
    state = read_current_state(records, ORGANIZATION_ID)
    by_id = {item.dimension_id: item for item in state.assignments}

    assert by_id[80].fields["rated_assignment"] == {
        "assignment_id": 80,
        "anticipated_energy_percentage": 40,
        "official_rating": "meeting",
        "started_at": "2025-07-01T00:00:00+00:00",
        "ended_at": "2025-12-31T00:00:00+00:00",
    }
    assert by_id[81].fields["rated_assignment"] == {}


def test_ended_assignment_without_active_tenure_is_skipped(records: TeammateRecords) -> None:
    ended = make_assignment_tenure(
        85,
        tenure_id=20,
        ended_at=datetime(2025, 5, 1, tzinfo=UTC),
        official_rating="meeting",
    )
    records = replace(
        records,
        assignments=(
            *records.assignments,
            Assignment(id=85, company_id=ORGANIZATION_ID, title="x"),
        ),
        assignment_tenures=(*records.assignment_tenures, ended),
    )

    state = read_current_state(records, ORGANIZATION_ID)

    assert 85 not in {item.dimension_id for item in state.assignments}


def test_open_check_in_without_active_tenure_adds_no_assignment(
    records: TeammateRecords,
) -> None:
    ended = make_assignment_tenure(85, tenure_id=20, ended_at=datetime(2025, 5, 1, tzinfo=UTC))
    records = replace(
        records,
        assignments=(
            *records.assignments,
            Assignment(id=85, company_id=ORGANIZATION_ID, title="x"),
        ),
        assignment_tenures=(*records.assignment_tenures, ended),
        assignment_check_ins=(
            *records.assignment_check_ins,
            make_assignment_check_in(85, check_in_id=505),
        ),
    )

    state = read_current_state(records, ORGANIZATION_ID)

    assert [item.dimension_id for item in state.assignments] == [80, 81, 84]
    assert state.check_in_owners[(DimensionKind.ASSIGNMENT, 505)] == 85


def test_assignments_of_other_organizations_are_excluded(records: TeammateRecords) -> None:
    foreign = AssignmentTenure(
        id=30,
        teammate_id=TEAMMATE_ID,
        assignment_id=99,
        started_at=datetime(2026, 1, 1, tzinfo=UTC),
        anticipated_energy_percentage=90,
    )
    records = replace(
        records,
        assignments=(
            *records.assignments,
            Assignment(id=99, company_id=OTHER_ORGANIZATION_ID, title="Elsewhere"),
        ),
        assignment_tenures=(*records.assignment_tenures, foreign),
    )

    state = read_current_state(records, ORGANIZATION_ID)

    assert [item.dimension_id for item in state.assignments] == [80, 81, 84]


def test_assignment_without_open_check_in_has_null_check_in(records: TeammateRecords) -> None:
    state = read_current_state(without_check_in(records, 81), ORGANIZATION_ID)
    by_id = {item.dimension_id: item for item in state.assignments}

    assert by_id[81].check_in is None
    assert by_id[81].to_entry(by_id[81].check_in)["check_in"] is None


def test_finalized_check_in_is_not_the_current_check_in(records: TeammateRecords) -> None:
    check_in = records.assignment_check_ins[0]
    check_in.official_check_in_completed_at = datetime(2026, 2, 25, tzinfo=UTC)

    state = read_current_state(records, ORGANIZATION_ID)
    by_id = {item.dimension_id: item for item in state.assignments}

    assert by_id[80].check_in is None
    assert state.check_in_owners[(DimensionKind.ASSIGNMENT, 501)] == 80


def test_position_entry(records: TeammateRecords) -> None:
    state = read_current_state(records, ORGANIZATION_ID)
    position = state.to_maap_data()["position"]

    assert position["position_id"] == 3
    assert position["manager_id"] == 8
    assert position["seat_id"] == 12
    assert position["employment_type"] == "full_time"
    assert "official_position_rating" not in position
    assert position["rated_position"]["official_position_rating"] == 2
    assert position["rated_position"]["ended_at"] == "2025-12-31T00:00:00+00:00"
    assert position["check_in"]["check_in_id"] == 601
    assert position["check_in"]["employee_rating"] == 1


def test_abilities_are_passed_through(records: TeammateRecords) -> None:
    state = read_current_state(records, ORGANIZATION_ID)

    assert state.to_maap_data()["abilities"] == [
        {
            "ability_id": 40,
            "milestone_level": 2,
            "certified_by_id": 8,
            "attained_at": "2025-11-03",
        }
    ]


def test_aspirations_carry_latest_official_rating_and_open_check_in(
    records: TeammateRecords,
) -> None:
    state = read_current_state(records, ORGANIZATION_ID)
    aspirations = state.to_maap_data()["aspirations"]

    assert [item["aspiration_id"] for item in aspirations] == [20, 21]
    assert aspirations[0]["official_rating"] == "exceeding"
    assert aspirations[0]["check_in"]["check_in_id"] == 702
    assert aspirations[1] == {"aspiration_id": 21, "official_rating": None, "check_in": None}


def test_check_in_owners_cover_every_kind(records: TeammateRecords) -> None:
    owners = read_current_state(records, ORGANIZATION_ID).check_in_owners

    assert owners[(DimensionKind.ASSIGNMENT, 503)] == 84
    assert owners[(DimensionKind.POSITION, 601)] == 3
    assert owners[(DimensionKind.ASPIRATION, 701)] == 20
    assert (DimensionKind.ASSIGNMENT, 601) not in owners


def test_empty_records_produce_a_well_formed_document() -> None:
    state = read_current_state(TeammateRecords(teammate=make_teammate()), ORGANIZATION_ID)

    assert state.to_maap_data() == {
        "position": None,
        "assignments": [],
        "abilities": [],
        "aspirations": [],
    }
