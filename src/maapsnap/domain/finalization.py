"""Application services for building and executing MAAP snapshots."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING

from maapsnap.domain.model import (
    AssignmentCheckIn,
    ChangeType,
    DimensionKind,
    MaapSnapshot,
    PositionCheckIn,
)
from maapsnap.domain.snapshots import (
    ChangeReport,
    SnapshotDocument,
    assemble_snapshot,
    detect_changes,
    load_teammate_records,
    read_current_state,
    utcnow,
)
from maapsnap.domain.snapshots.contracts import (
    DATETIME_CHECK_IN_FIELDS,
    check_in_field_names,
    tenure_field_names,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from maapsnap.domain.model import AssignmentTenure, CheckIn, JsonObject, Tenure
    from maapsnap.domain.ports import SnapshotRepositories, SnapshotUnitOfWork
    from maapsnap.domain.snapshots import Clock, TeammateRecords

log = logging.getLogger(__name__)

_SECTIONS: dict[DimensionKind, str] = {
    DimensionKind.ASSIGNMENT: "assignments",
    DimensionKind.ASPIRATION: "aspirations",
}
_CHECK_IN_PREFIX = "check_in."
_POSITION_RATING_FIELDS = frozenset({"employee_rating", "manager_rating", "official_rating"})


class SnapshotNotFoundError(LookupError):
    def __init__(self, snapshot_id: int) -> None:
        super().__init__(f"Snapshot {snapshot_id} not found")
        self.snapshot_id = snapshot_id


class SnapshotAlreadyExecutedError(RuntimeError):
    def __init__(self, snapshot: MaapSnapshot) -> None:
        super().__init__(
            f"Snapshot {snapshot.id} was already executed on {snapshot.effective_date}"
        )
        self.snapshot = snapshot


@dataclass(frozen=True, slots=True, kw_only=True)
class SnapshotRequest:
    """What a caller asks for when building a snapshot for one teammate."""

    teammate_id: int
    organization_id: int
    reason: str
    raw_changes: Mapping[str, object] = field(default_factory=dict["str", "object"])
    created_by_id: int | None = None
    change_type: ChangeType = ChangeType.BULK_CHECK_IN_FINALIZATION
    request_info: Mapping[str, object] = field(default_factory=dict["str", "object"])


@dataclass(slots=True)
class SnapshotBuildResult:
    snapshot: MaapSnapshot
    document: SnapshotDocument
    changes: ChangeReport = field(default_factory=ChangeReport)

    @property
    def applied(self) -> int:
        return len(self.document.applied)

    @property
    def dropped(self) -> int:
        return len(self.document.dropped)


@dataclass(slots=True)
class SnapshotExecutionResult:
    snapshot: MaapSnapshot
    updated_check_ins: int = 0
    skipped_check_ins: int = 0
    finalized_check_ins: int = 0
    closed_tenures: int = 0
    updated_tenures: int = 0


class BulkCheckInFinalizationProcessor:
    """Assemble ``maap_data`` for a pending snapshot from its ``form_params``.

    The snapshot's creator is recorded as the actor for any completion toggles
    set in the proposed changes.
    """

    def __init__(self, snapshot: MaapSnapshot) -> None:
        self._snapshot = snapshot

    def process(self, records: TeammateRecords, *, clock: Clock = utcnow) -> SnapshotDocument:
        snapshot = self._snapshot
        if snapshot.employee_teammate_id != records.teammate.id:
            raise ValueError(
                f"Records for teammate {records.teammate.id} do not match snapshot "
                f"subject {snapshot.employee_teammate_id}"
            )
        log.info(
            "Assembling %s snapshot for teammate %s in organization %s",
            snapshot.change_type,
            snapshot.employee_teammate_id,
            snapshot.company_id,
        )
        return assemble_snapshot(
            records,
            snapshot.company_id,
            snapshot.form_params,
            actor_id=snapshot.creator_teammate_id,
            clock=clock,
        )


def build_snapshot_for_teammate(
    request: SnapshotRequest,
    *,
    unit_of_work_factory: Callable[[], SnapshotUnitOfWork],
    clock: Clock = utcnow,
) -> SnapshotBuildResult:
    """Assemble and persist a pending snapshot for ``request.teammate_id``."""
    draft = MaapSnapshot(
        company_id=request.organization_id,
        change_type=request.change_type,
        reason=request.reason,
        employee_teammate_id=request.teammate_id,
        creator_teammate_id=request.created_by_id,
        form_params=copy.deepcopy(dict(request.raw_changes)),
        request_info=copy.deepcopy(dict(request.request_info)),
    )

    with unit_of_work_factory() as uow:
        records = load_teammate_records(
            uow.repositories,
            teammate_id=request.teammate_id,
            organization_id=request.organization_id,
        )
        document = BulkCheckInFinalizationProcessor(draft).process(records, clock=clock)
        changes = detect_changes(
            document.maap_data, read_current_state(records, request.organization_id)
        )
        snapshot = MaapSnapshot(
            company_id=draft.company_id,
            change_type=draft.change_type,
            reason=draft.reason,
            employee_teammate_id=draft.employee_teammate_id,
            creator_teammate_id=draft.creator_teammate_id,
            maap_data=document.maap_data,
            form_params=document.raw_changes,
            request_info=draft.request_info,
            applied_changes=changes.changed_fields(),
            created_at=clock(),
        )
        uow.repositories.snapshots.add(snapshot)
        uow.commit()

    log.info(
        "Stored snapshot %s for teammate %s (%d overlays applied, %d dropped)",
        snapshot.id,
        request.teammate_id,
        len(document.applied),
        len(document.dropped),
    )
    return SnapshotBuildResult(snapshot=snapshot, document=document, changes=changes)


def build_exploration_snapshot(
    *,
    organization_id: int,
    reason: str,
    unit_of_work_factory: Callable[[], SnapshotUnitOfWork],
    created_by_id: int | None = None,
    request_info: Mapping[str, object] | None = None,
    clock: Clock = utcnow,
) -> MaapSnapshot:
    """Persist a snapshot with no subject and an empty document."""
    snapshot = MaapSnapshot(
        company_id=organization_id,
        change_type=ChangeType.EXPLORATION,
        reason=reason,
        creator_teammate_id=created_by_id,
        request_info=copy.deepcopy(dict(request_info or {})),
        created_at=clock(),
    )
    with unit_of_work_factory() as uow:
        uow.repositories.snapshots.add(snapshot)
        uow.commit()
    log.info("Stored exploration snapshot %s", snapshot.id)
    return snapshot


def execute_snapshot(
    snapshot_id: int,
    *,
    unit_of_work_factory: Callable[[], SnapshotUnitOfWork],
    executed_by_id: int | None = None,
    clock: Clock = utcnow,
) -> SnapshotExecutionResult:
    """Write a pending snapshot's changed fields onto the teammate's records.

    Only the fields listed in ``applied_changes`` are written, so values changed
    by someone else since the build are kept. A check-in is finalized only when
    both its employee and manager sides are complete once the snapshot's own
    values are applied; otherwise it is skipped as a whole. Finalizing closes
    the dimension's active tenure and opens its successor. ``executed_by_id``
    fills any completion actor the document left empty.
    """
    with unit_of_work_factory() as uow:
        snapshot = uow.repositories.snapshots.get(snapshot_id)
        if snapshot is None:
            raise SnapshotNotFoundError(snapshot_id)
        if snapshot.executed:
            raise SnapshotAlreadyExecutedError(snapshot)

        now = clock()
        result = SnapshotExecutionResult(snapshot=snapshot)
        if snapshot.employee_teammate_id is not None:
            execution = _SnapshotExecution(
                snapshot,
                uow.repositories,
                teammate_id=snapshot.employee_teammate_id,
                result=result,
                now=now,
                executed_by_id=executed_by_id,
            )
            for change in snapshot.applied_changes:
                execution.apply(change)

        snapshot.effective_date = now
        uow.commit()

    log.info(
        "Executed snapshot %s: %d check-ins updated (%d finalized), %d skipped, "
        "%d tenures closed, %d tenures updated",
        snapshot_id,
        result.updated_check_ins,
        result.finalized_check_ins,
        result.skipped_check_ins,
        result.closed_tenures,
        result.updated_tenures,
    )
    return result


def detect_snapshot_changes(
    snapshot_id: int,
    *,
    unit_of_work_factory: Callable[[], SnapshotUnitOfWork],
) -> ChangeReport:
    """Compare a stored snapshot with the subject's current state."""
    with unit_of_work_factory() as uow:
        snapshot = uow.repositories.snapshots.get(snapshot_id)
        if snapshot is None:
            raise SnapshotNotFoundError(snapshot_id)
        if snapshot.employee_teammate_id is None:
            return ChangeReport()
        records = load_teammate_records(
            uow.repositories,
            teammate_id=snapshot.employee_teammate_id,
            organization_id=snapshot.company_id,
        )
        state = read_current_state(records, snapshot.company_id)
        return detect_changes(snapshot.maap_data, state)


class _SnapshotExecution:
    """Apply the changed fields of one snapshot, dimension by dimension."""

    def __init__(
        self,
        snapshot: MaapSnapshot,
        repositories: SnapshotRepositories,
        *,
        teammate_id: int,
        result: SnapshotExecutionResult,
        now: datetime,
        executed_by_id: int | None,
    ) -> None:
        self._snapshot = snapshot
        self._tenures = repositories.tenures
        self._result = result
        self._now = now
        self._executed_by_id = executed_by_id
        self._check_ins = _index_check_ins(repositories, teammate_id)
        self._assignment_tenures = list(repositories.tenures.assignment_tenures(teammate_id))
        self._employment_tenures = {
            tenure.require_id(): tenure
            for tenure in repositories.tenures.employment_tenures(teammate_id)
        }

    def apply(self, change: Mapping[str, object]) -> None:
        kind = DimensionKind(str(change.get("kind")))
        dimension_id = change.get("dimension_id")
        names = {str(name) for name in _as_list(change.get("fields"))}
        entry = _document_entry(self._snapshot.maap_data, kind, dimension_id)
        if entry is None:
            log.warning(
                "Snapshot %s: %s %s is not part of the document",
                self._snapshot.id,
                kind,
                dimension_id,
            )
            return

        check_in_names = {
            name.removeprefix(_CHECK_IN_PREFIX)
            for name in names
            if name.startswith(_CHECK_IN_PREFIX)
        }
        tenure_values = {
            name: entry.get(name) for name in tenure_field_names(kind) if name in names
        }

        finalized = None
        if check_in_names:
            finalized = self._apply_check_in(kind, entry.get("check_in"), check_in_names)
        if finalized is not None:
            self._roll_tenure(finalized, tenure_values)
        elif tenure_values and isinstance(dimension_id, int):
            self._update_assignment_tenure(dimension_id, tenure_values)

    def _apply_check_in(
        self, kind: DimensionKind, payload: object, names: set[str]
    ) -> CheckIn | None:
        """Write ``names`` onto the open check-in; return it when this finalized it."""
        if not isinstance(payload, dict):
            self._skip("%s entry carries no check-in", kind)
            return None
        check_in_id = payload.get("check_in_id")
        record = self._check_ins.get((kind, check_in_id)) if isinstance(check_in_id, int) else None
        if record is None:
            self._skip("no %s check-in %r to update", kind, check_in_id)
            return None
        if not record.is_open:
            self._skip("%s check-in %s is already finalized", kind, check_in_id)
            return None

        values = {
            name: _coerce(kind, name, payload.get(name))
            for name in check_in_field_names(kind)
            if name in names
        }
        finalizing = values.get("official_check_in_completed_at") is not None
        if finalizing and not _ready_once_applied(record, values):
            self._skip(
                "%s check-in %s is not ready for finalization: "
                "employee and manager sides must both be complete",
                kind,
                check_in_id,
            )
            return None

        for name, value in values.items():
            setattr(record, name, value)
        if record.official_check_in_completed_at is not None and record.finalized_by_id is None:
            record.finalized_by_id = self._executed_by_id
        if record.manager_completed_at is not None and record.manager_completed_by_id is None:
            record.manager_completed_by_id = self._executed_by_id
        record.maap_snapshot_id = self._snapshot.id
        self._result.updated_check_ins += 1
        if not finalizing:
            return None
        self._result.finalized_check_ins += 1
        return record

    def _roll_tenure(self, check_in: CheckIn, tenure_values: Mapping[str, object]) -> None:
        successor: Tenure
        if isinstance(check_in, AssignmentCheckIn):
            active = self._active_assignment_tenure(check_in.assignment_id)
            if active is None:
                return
            active.close(self._now)
            active.official_rating = (
                str(check_in.official_rating) if check_in.official_rating is not None else None
            )
            energy = tenure_values.get("anticipated_energy_percentage")
            successor = active.successor(
                started_at=self._now,
                anticipated_energy_percentage=energy if isinstance(energy, int) else None,
            )
            self._assignment_tenures.append(successor)
        elif isinstance(check_in, PositionCheckIn):
            employment = self._employment_tenures.get(check_in.employment_tenure_id)
            if employment is None or not employment.is_active:
                log.warning(
                    "Snapshot %s: employment tenure %s is not active; nothing to close",
                    self._snapshot.id,
                    check_in.employment_tenure_id,
                )
                return
            employment.close(self._now)
            employment.official_position_rating = _position_rating(check_in.official_rating)
            successor = employment.successor(started_at=self._now)
        else:
            return
        self._tenures.add(successor)
        self._result.closed_tenures += 1

    def _update_assignment_tenure(
        self, assignment_id: int, tenure_values: Mapping[str, object]
    ) -> None:
        active = self._active_assignment_tenure(assignment_id)
        if active is None:
            return
        for name, value in tenure_values.items():
            setattr(active, name, value)
        self._result.updated_tenures += 1

    def _active_assignment_tenure(self, assignment_id: int) -> AssignmentTenure | None:
        active = [
            tenure
            for tenure in self._assignment_tenures
            if tenure.assignment_id == assignment_id and tenure.is_active
        ]
        if not active:
            log.warning(
                "Snapshot %s: assignment %s has no active tenure",
                self._snapshot.id,
                assignment_id,
            )
            return None
        return max(active, key=lambda tenure: tenure.started_at)

    def _skip(self, message: str, *args: object) -> None:
        log.warning(f"Snapshot %s: {message}", self._snapshot.id, *args)
        self._result.skipped_check_ins += 1


def _index_check_ins(
    repositories: SnapshotRepositories, teammate_id: int
) -> dict[tuple[DimensionKind, int], CheckIn]:
    check_ins: list[CheckIn] = [
        *repositories.check_ins.assignment_check_ins(teammate_id),
        *repositories.check_ins.position_check_ins(teammate_id),
        *repositories.check_ins.aspiration_check_ins(teammate_id),
    ]
    return {(c.DIMENSION_KIND, c.require_id()): c for c in check_ins}


def _document_entry(
    maap_data: JsonObject, kind: DimensionKind, dimension_id: object
) -> Mapping[str, object] | None:
    if kind is DimensionKind.POSITION:
        position = maap_data.get("position")
        return position if isinstance(position, dict) else None
    section = _SECTIONS.get(kind)
    if section is None:
        return None
    id_field = f"{kind}_id"
    for entry in _as_list(maap_data.get(section)):
        if isinstance(entry, dict) and entry.get(id_field) == dimension_id:
            return entry
    return None


def _ready_once_applied(record: CheckIn, values: Mapping[str, object]) -> bool:
    employee_done = values.get("employee_completed_at", record.employee_completed_at) is not None
    manager_done = values.get("manager_completed_at", record.manager_completed_at) is not None
    return record.is_open and employee_done and manager_done


def _coerce(kind: DimensionKind, name: str, value: object) -> object:
    if name in DATETIME_CHECK_IN_FIELDS:
        return _parse_datetime(value)
    if name == "check_in_started_on":
        return _parse_date(value)
    if kind is DimensionKind.POSITION and name in _POSITION_RATING_FIELDS:
        return _position_rating(value)
    return value


def _as_list(value: object) -> list[object]:
    return value if isinstance(value, list) else []


def _parse_datetime(value: object) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _parse_date(value: object) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _position_rating(value: object) -> int | None:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValueError(f"Position rating must be an integer, got {value!r}") from None
