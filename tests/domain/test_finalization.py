from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from maapsnap.domain.finalization import (
    BulkCheckInFinalizationProcessor,
    SnapshotAlreadyExecutedError,
    SnapshotExecutionResult,
    SnapshotNotFoundError,
    SnapshotRequest,
    build_exploration_snapshot,
    build_snapshot_for_teammate,
    detect_snapshot_changes,
    execute_snapshot,
)
from maapsnap.domain.model import ChangeType, DimensionKind, MaapSnapshot
from maapsnap.domain.snapshots import OverlayConflictError, TeammateNotFoundError
from tests.helpers.records import (
    FIXED_NOW,
    MANAGER_ID,
    ORGANIZATION_ID,
    TEAMMATE_ID,
    fixed_clock,
    lifeline_records,
    persist_records,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from maapsnap.adapters.sqlalchemy.unit_of_work import SqlAlchemySnapshotUnitOfWork
    from maapsnap.domain.snapshots import TeammateRecords

    UowFactory = Callable[[], SqlAlchemySnapshotUnitOfWork]

EXECUTED_AT = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


@pytest.fixture
def stored_uow(sqlite_unit_of_work: UowFactory) -> UowFactory:
    with sqlite_unit_of_work() as uow:
        persist_records(uow, lifeline_records())
    return sqlite_unit_of_work


def _request(raw_changes: dict[str, object]) -> SnapshotRequest:
    return SnapshotRequest(
        teammate_id=TEAMMATE_ID,
        organization_id=ORGANIZATION_ID,
        reason="Quarterly close",
        raw_changes=raw_changes,
        created_by_id=MANAGER_ID,
    )


def test_processor_assembles_from_form_params(records: TeammateRecords) -> None:
    snapshot = MaapSnapshot(
        company_id=ORGANIZATION_ID,
        change_type=ChangeType.BULK_CHECK_IN_FINALIZATION,
        reason="Quarterly close",
        employee_teammate_id=TEAMMATE_ID,
        creator_teammate_id=MANAGER_ID,
        form_params={"check_in_data": {"80": {"close_rating": "1"}}},
    )

    document = BulkCheckInFinalizationProcessor(snapshot).process(records, clock=fixed_clock)

    entry = next(a for a in document.maap_data["assignments"] if a["assignment_id"] == 80)
    assert entry["check_in"]["official_check_in_completed_at"] == FIXED_NOW.isoformat()
    assert entry["check_in"]["finalized_by_id"] == MANAGER_ID
    assert document.raw_changes == snapshot.form_params


def test_processor_rejects_records_of_another_teammate(records: TeammateRecords) -> None:
    snapshot = MaapSnapshot(
        company_id=ORGANIZATION_ID,
        change_type=ChangeType.BULK_CHECK_IN_FINALIZATION,
        reason="x",
        employee_teammate_id=TEAMMATE_ID + 1,
    )

    with pytest.raises(ValueError, match="do not match"):
        BulkCheckInFinalizationProcessor(snapshot).process(records)


def test_build_snapshot_persists_a_pending_document(stored_uow: UowFactory) -> None:
    result = build_snapshot_for_teammate(
        _request({"assignment_80_shared_notes": "Stored"}),
        unit_of_work_factory=stored_uow,
        clock=fixed_clock,
    )

    assert result.snapshot.id is not None
    assert result.applied == 1
    assert result.changes.has_changes
    with stored_uow() as uow:
        stored = uow.repositories.snapshots.get(result.snapshot.id)
        assert stored is not None
        assert stored.pending
        assert stored.change_type is ChangeType.BULK_CHECK_IN_FINALIZATION
        assert stored.created_at == FIXED_NOW
        assert stored.form_params == {"assignment_80_shared_notes": "Stored"}
        assignments = stored.maap_data["assignments"]
        assert [a["assignment_id"] for a in assignments] == [80, 81, 84]
        assert assignments[0]["check_in"]["shared_notes"] == "Stored"
        assert stored.applied_changes == [
            {"kind": "assignment", "dimension_id": 80, "fields": ["check_in.shared_notes"]}
        ]
        assert uow.repositories.snapshots.for_teammate(TEAMMATE_ID)[0].id == result.snapshot.id


def test_build_snapshot_rejects_conflicting_changes(stored_uow: UowFactory) -> None:
    with pytest.raises(OverlayConflictError):
        build_snapshot_for_teammate(
            _request({"assignment_80_final_rating": "a", "assignment_80_official_rating": "b"}),
            unit_of_work_factory=stored_uow,
        )

    with stored_uow() as uow:
        assert uow.repositories.snapshots.for_teammate(TEAMMATE_ID) == ()


def test_build_snapshot_for_unknown_teammate(stored_uow: UowFactory) -> None:
    request = SnapshotRequest(teammate_id=404, organization_id=ORGANIZATION_ID, reason="x")

    with pytest.raises(TeammateNotFoundError):
        build_snapshot_for_teammate(request, unit_of_work_factory=stored_uow)


def test_exploration_snapshot_has_no_subject(stored_uow: UowFactory) -> None:
    snapshot = build_exploration_snapshot(
        organization_id=ORGANIZATION_ID,
        reason="Exploration",
        unit_of_work_factory=stored_uow,
        created_by_id=MANAGER_ID,
    )

    assert snapshot.is_exploration
    assert snapshot.employee_teammate_id is None
    assert snapshot.maap_data == {}
    report = detect_snapshot_changes(snapshot.require_id(), unit_of_work_factory=stored_uow)
    assert not report.has_changes


def test_detect_snapshot_changes_against_current_state(stored_uow: UowFactory) -> None:
    result = build_snapshot_for_teammate(
        _request({"check_in_502_shared_notes": "Changed"}),
        unit_of_work_factory=stored_uow,
        clock=fixed_clock,
    )

    report = detect_snapshot_changes(result.snapshot.require_id(), unit_of_work_factory=stored_uow)

    (change,) = report.dimensions
    assert change.kind is DimensionKind.ASSIGNMENT
    assert change.dimension_id == 81


def _build(stored_uow: UowFactory, raw_changes: dict[str, object]) -> int:
    result = build_snapshot_for_teammate(
        _request(raw_changes), unit_of_work_factory=stored_uow, clock=fixed_clock
    )
    return result.snapshot.require_id()


def _execute(stored_uow: UowFactory, snapshot_id: int) -> SnapshotExecutionResult:
    return execute_snapshot(
        snapshot_id,
        unit_of_work_factory=stored_uow,
        executed_by_id=99,
        clock=lambda: EXECUTED_AT,
    )


def test_execute_finalizes_ready_check_ins_and_rolls_the_tenure(stored_uow: UowFactory) -> None:
    snapshot_id = _build(
        stored_uow,
        {
            "assignment_80_shared_notes": "Executed",
            "assignment_80_final_rating": "meeting",
            "assignment_80_employee_complete": "true",
            "assignment_80_manager_complete": "true",
            "assignment_80_close_rating": "true",
            "tenure_80_anticipated_energy": "35",
            "position_3_official_rating": "2",
        },
    )

    execution = _execute(stored_uow, snapshot_id)

    assert execution.updated_check_ins == 2
    assert execution.finalized_check_ins == 1
    assert execution.skipped_check_ins == 0
    assert execution.closed_tenures == 1
    with stored_uow() as uow:
        snapshot = uow.repositories.snapshots.get(snapshot_id)
        assert snapshot is not None
        assert snapshot.effective_date == EXECUTED_AT

        check_ins = {c.id: c for c in uow.repositories.check_ins.assignment_check_ins(TEAMMATE_ID)}
        finalized = check_ins[501]
        assert finalized.shared_notes == "Executed"
        assert finalized.official_rating == "meeting"
        assert finalized.employee_completed_at == FIXED_NOW
        assert finalized.manager_completed_by_id == MANAGER_ID
        assert finalized.official_check_in_completed_at == FIXED_NOW
        assert finalized.finalized_by_id == MANAGER_ID
        assert finalized.maap_snapshot_id == snapshot_id

        tenures = [
            t
            for t in uow.repositories.tenures.assignment_tenures(TEAMMATE_ID)
            if t.assignment_id == 80
        ]
        closed = next(t for t in tenures if t.id == 1)
        assert closed.ended_at == EXECUTED_AT
        assert closed.official_rating == "meeting"
        (active,) = [t for t in tenures if t.is_active]
        assert active.id != 1
        assert active.started_at == EXECUTED_AT
        assert active.anticipated_energy_percentage == 35
        assert active.official_rating is None

        (position_check_in,) = uow.repositories.check_ins.position_check_ins(TEAMMATE_ID)
        assert position_check_in.official_rating == 2
        assert position_check_in.is_open
        employment = {t.id: t for t in uow.repositories.tenures.employment_tenures(TEAMMATE_ID)}
        assert employment[11].is_active


def test_execute_skips_check_ins_not_ready_for_finalization(
    stored_uow: UowFactory, caplog: pytest.LogCaptureFixture
) -> None:
    snapshot_id = _build(
        stored_uow,
        {"assignment_80_shared_notes": "Too early", "assignment_80_close_rating": "true"},
    )

    with caplog.at_level(logging.WARNING, logger="maapsnap.domain.finalization"):
        execution = _execute(stored_uow, snapshot_id)

    assert execution.updated_check_ins == 0
    assert execution.finalized_check_ins == 0
    assert execution.skipped_check_ins == 1
    assert execution.closed_tenures == 0
    assert "not ready for finalization" in caplog.text
    with stored_uow() as uow:
        check_ins = {c.id: c for c in uow.repositories.check_ins.assignment_check_ins(TEAMMATE_ID)}
        assert check_ins[501].is_open
        assert check_ins[501].shared_notes == "Triage notes"
        assert check_ins[501].maap_snapshot_id is None
        tenures = {t.id: t for t in uow.repositories.tenures.assignment_tenures(TEAMMATE_ID)}
        assert tenures[1].is_active
        assert len(tenures) == 5


def test_execute_writes_only_the_fields_the_snapshot_changed(stored_uow: UowFactory) -> None:
    snapshot_id = _build(stored_uow, {"check_in_502_shared_notes": "From snapshot"})
    with stored_uow() as uow:
        check_ins = {c.id: c for c in uow.repositories.check_ins.assignment_check_ins(TEAMMATE_ID)}
        check_ins[502].employee_rating = "exceeding"
        check_ins[501].shared_notes = "Edited meanwhile"
        uow.commit()

    execution = _execute(stored_uow, snapshot_id)

    assert execution.updated_check_ins == 1
    with stored_uow() as uow:
        check_ins = {c.id: c for c in uow.repositories.check_ins.assignment_check_ins(TEAMMATE_ID)}
        assert check_ins[502].shared_notes == "From snapshot"
        assert check_ins[502].employee_rating == "exceeding"
        assert check_ins[502].maap_snapshot_id == snapshot_id
        assert check_ins[501].shared_notes == "Edited meanwhile"
        assert check_ins[501].maap_snapshot_id is None
        assert check_ins[503].shared_notes == "Existing lifeline notes"
        assert check_ins[503].maap_snapshot_id is None
        (position_check_in,) = uow.repositories.check_ins.position_check_ins(TEAMMATE_ID)
        assert position_check_in.maap_snapshot_id is None


def test_execute_updates_energy_on_the_active_tenure(stored_uow: UowFactory) -> None:
    snapshot_id = _build(stored_uow, {"tenure_81_anticipated_energy": "45"})
    with stored_uow() as uow:
        snapshot = uow.repositories.snapshots.get(snapshot_id)
        assert snapshot is not None
        assert snapshot.applied_changes == [
            {"kind": "assignment", "dimension_id": 81, "fields": ["anticipated_energy_percentage"]}
        ]

    execution = _execute(stored_uow, snapshot_id)

    assert execution.updated_tenures == 1
    assert execution.updated_check_ins == 0
    assert execution.closed_tenures == 0
    with stored_uow() as uow:
        tenures = {t.id: t for t in uow.repositories.tenures.assignment_tenures(TEAMMATE_ID)}
        assert tenures[2].anticipated_energy_percentage == 45
        assert tenures[2].is_active
        assert len(tenures) == 5
        check_ins = {c.id: c for c in uow.repositories.check_ins.assignment_check_ins(TEAMMATE_ID)}
        assert check_ins[502].maap_snapshot_id is None


def test_execute_finalizing_a_position_rolls_the_employment_tenure(
    stored_uow: UowFactory,
) -> None:
    snapshot_id = _build(
        stored_uow,
        {
            "position_check_in_data": {
                "3": {
                    "check_in_id": "601",
                    "official_rating": "3",
                    "employee_complete": "1",
                    "manager_complete": "1",
                    "close_rating": "1",
                }
            }
        },
    )

    execution = _execute(stored_uow, snapshot_id)

    assert execution.finalized_check_ins == 1
    assert execution.closed_tenures == 1
    with stored_uow() as uow:
        (position_check_in,) = uow.repositories.check_ins.position_check_ins(TEAMMATE_ID)
        assert not position_check_in.is_open
        assert position_check_in.official_rating == 3
        tenures = {t.id: t for t in uow.repositories.tenures.employment_tenures(TEAMMATE_ID)}
        assert tenures[11].ended_at == EXECUTED_AT
        assert tenures[11].official_position_rating == 3
        (active,) = [t for t in tenures.values() if t.is_active]
        assert (active.position_id, active.seat_id, active.manager_id) == (3, 12, MANAGER_ID)
        assert active.started_at == EXECUTED_AT
        assert active.official_position_rating is None


def test_execute_fills_missing_finalizer(stored_uow: UowFactory) -> None:
    request = SnapshotRequest(
        teammate_id=TEAMMATE_ID,
        organization_id=ORGANIZATION_ID,
        reason="Automated close",
        raw_changes={
            "assignment_81_employee_complete": "1",
            "assignment_81_manager_complete": "1",
            "assignment_81_close_rating": "1",
        },
    )
    snapshot_id = build_snapshot_for_teammate(
        request, unit_of_work_factory=stored_uow, clock=fixed_clock
    ).snapshot.require_id()

    execute_snapshot(snapshot_id, unit_of_work_factory=stored_uow, executed_by_id=99)

    with stored_uow() as uow:
        check_ins = {c.id: c for c in uow.repositories.check_ins.assignment_check_ins(TEAMMATE_ID)}
        assert check_ins[502].finalized_by_id == 99
        assert check_ins[502].manager_completed_by_id == 99
        assert check_ins[502].official_check_in_completed_at == FIXED_NOW


def test_execute_twice_is_rejected(stored_uow: UowFactory) -> None:
    snapshot_id = build_snapshot_for_teammate(
        _request({}), unit_of_work_factory=stored_uow
    ).snapshot.require_id()
    execute_snapshot(snapshot_id, unit_of_work_factory=stored_uow)

    with pytest.raises(SnapshotAlreadyExecutedError):
        execute_snapshot(snapshot_id, unit_of_work_factory=stored_uow)


def test_execute_unknown_snapshot(stored_uow: UowFactory) -> None:
    with pytest.raises(SnapshotNotFoundError):
        execute_snapshot(12345, unit_of_work_factory=stored_uow)
