"""Read the persisted baseline of one teammate within one organization.

The reader is pure: it receives loaded records and returns plain JSON-shaped
values. Only open check-ins (no ``official_check_in_completed_at``) appear as a
dimension's ``check_in``. Closed tenures only contribute their ``rated_*`` summary.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING

from maapsnap.domain.model import DimensionKind
from maapsnap.domain.snapshots.contracts import check_in_field_names

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from maapsnap.domain.model import (
        AssignmentTenure,
        CheckIn,
        EmploymentTenure,
        JsonObject,
        Tenure,
    )
    from maapsnap.domain.snapshots.contracts import CheckInOwners, DimensionKey
    from maapsnap.domain.snapshots.records import TeammateRecords


@dataclass(frozen=True, slots=True, kw_only=True)
class DimensionState:
    """Current values of one dimension together with its open check-in, if any."""

    kind: DimensionKind
    dimension_id: int
    fields: Mapping[str, object]
    check_in: Mapping[str, object] | None = None

    @property
    def key(self) -> DimensionKey:
        return (self.kind, self.dimension_id)

    def to_entry(
        self,
        check_in: Mapping[str, object] | None,
        fields: Mapping[str, object] | None = None,
    ) -> JsonObject:
        entry = copy.deepcopy(dict(self.fields if fields is None else fields))
        entry["check_in"] = copy.deepcopy(dict(check_in)) if check_in is not None else None
        return entry


@dataclass(frozen=True, slots=True, kw_only=True)
class CurrentState:
    position: DimensionState | None
    assignments: tuple[DimensionState, ...]
    abilities: tuple[Mapping[str, object], ...]
    aspirations: tuple[DimensionState, ...]
    check_in_owners: CheckInOwners

    def dimensions(self) -> tuple[DimensionState, ...]:
        head = (self.position,) if self.position is not None else ()
        return (*head, *self.assignments, *self.aspirations)

    def dimension_keys(self) -> frozenset[DimensionKey]:
        return frozenset(dimension.key for dimension in self.dimensions())

    def to_maap_data(self) -> JsonObject:
        """Render the baseline as a MAAP document with no proposed changes applied."""
        position = self.position
        return {
            "position": position.to_entry(position.check_in) if position is not None else None,
            "assignments": [item.to_entry(item.check_in) for item in self.assignments],
            "abilities": [copy.deepcopy(dict(item)) for item in self.abilities],
            "aspirations": [item.to_entry(item.check_in) for item in self.aspirations],
        }


def read_current_state(records: TeammateRecords, organization_id: int) -> CurrentState:
    return CurrentState(
        position=_read_position(records, organization_id),
        assignments=_read_assignments(records, organization_id),
        abilities=_read_abilities(records, organization_id),
        aspirations=_read_aspirations(records, organization_id),
        check_in_owners=_check_in_owners(records.check_ins()),
    )


def serialize_check_in(check_in: CheckIn) -> JsonObject:
    """Render a check-in record with the field set of its dimension kind."""
    payload: JsonObject = {"check_in_id": check_in.id}
    for name in check_in_field_names(check_in.DIMENSION_KIND):
        payload[name] = _json_value(getattr(check_in, name))
    return payload


# --------------------------------------------------------------------------- position


def _read_position(records: TeammateRecords, organization_id: int) -> DimensionState | None:
    tenures = [t for t in records.employment_tenures if t.company_id == organization_id]
    active = _latest_active(tenures)
    if active is None:
        return None

    check_in = _latest_open(
        c for c in records.position_check_ins if c.employment_tenure_id == active.id
    )
    fields: JsonObject = {
        "position_id": active.position_id,
        "manager_id": active.manager_id,
        "seat_id": active.seat_id,
        "employment_type": active.employment_type,
        "started_at": _json_value(active.started_at),
        "rated_position": _rated_position(_latest_closed(tenures)),
    }
    return DimensionState(
        kind=DimensionKind.POSITION,
        dimension_id=active.position_id,
        fields=fields,
        check_in=serialize_check_in(check_in) if check_in is not None else None,
    )


def _rated_position(tenure: EmploymentTenure | None) -> JsonObject:
    if tenure is None:
        return {}
    return {
        "position_id": tenure.position_id,
        "manager_id": tenure.manager_id,
        "seat_id": tenure.seat_id,
        "employment_type": tenure.employment_type,
        "official_position_rating": tenure.official_position_rating,
        "started_at": _json_value(tenure.started_at),
        "ended_at": _json_value(tenure.ended_at),
    }


# --------------------------------------------------------------------------- assignments


def _read_assignments(
    records: TeammateRecords, organization_id: int
) -> tuple[DimensionState, ...]:
    catalog = {a.id for a in records.assignments if a.company_id == organization_id}
    tenures_by_assignment: dict[int, list[AssignmentTenure]] = {}
    for tenure in records.assignment_tenures:
        if tenure.assignment_id in catalog:
            tenures_by_assignment.setdefault(tenure.assignment_id, []).append(tenure)

    states: list[DimensionState] = []
    for assignment_id, tenures in tenures_by_assignment.items():
        active = _latest_active(tenures)
        if active is None:
            continue
        check_in = _latest_open(
            c for c in records.assignment_check_ins if c.assignment_id == assignment_id
        )
        fields: JsonObject = {
            "assignment_id": assignment_id,
            "anticipated_energy_percentage": active.anticipated_energy_percentage,
            "started_at": _json_value(active.started_at),
            "rated_assignment": _rated_assignment(_latest_closed(tenures)),
        }
        states.append(
            DimensionState(
                kind=DimensionKind.ASSIGNMENT,
                dimension_id=assignment_id,
                fields=fields,
                check_in=serialize_check_in(check_in) if check_in is not None else None,
            )
        )

    states.sort(
        key=lambda s: (-(_energy(s.fields.get("anticipated_energy_percentage"))), s.dimension_id)
    )
    return tuple(states)


def _rated_assignment(tenure: AssignmentTenure | None) -> JsonObject:
    if tenure is None:
        return {}
    return {
        "assignment_id": tenure.assignment_id,
        "anticipated_energy_percentage": tenure.anticipated_energy_percentage,
        "official_rating": tenure.official_rating,
        "started_at": _json_value(tenure.started_at),
        "ended_at": _json_value(tenure.ended_at),
    }


def _energy(value: object) -> int:
    return value if isinstance(value, int) else 0


# --------------------------------------------------------------------------- abilities


def _read_abilities(
    records: TeammateRecords, organization_id: int
) -> tuple[Mapping[str, object], ...]:
    catalog = {a.id for a in records.abilities if a.organization_id == organization_id}
    milestones = sorted(
        (m for m in records.milestones if m.ability_id in catalog),
        key=lambda m: (m.ability_id, m.milestone_level),
    )
    return tuple(
        {
            "ability_id": milestone.ability_id,
            "milestone_level": milestone.milestone_level,
            "certified_by_id": milestone.certified_by_id,
            "attained_at": _json_value(milestone.attained_at),
        }
        for milestone in milestones
    )


# --------------------------------------------------------------------------- aspirations


def _read_aspirations(
    records: TeammateRecords, organization_id: int
) -> tuple[DimensionState, ...]:
    aspirations = sorted(
        (a for a in records.aspirations if a.organization_id == organization_id and a.id),
        key=lambda a: (a.sort_order, a.require_id()),
    )
    states: list[DimensionState] = []
    for aspiration in aspirations:
        aspiration_id = aspiration.require_id()
        check_ins = [c for c in records.aspiration_check_ins if c.aspiration_id == aspiration_id]
        finalized = [c for c in check_ins if not c.is_open]
        latest_finalized = max(
            finalized,
            key=lambda c: (c.official_check_in_completed_at, c.id or 0),
            default=None,
        )
        open_check_in = _latest_open(check_ins)
        states.append(
            DimensionState(
                kind=DimensionKind.ASPIRATION,
                dimension_id=aspiration_id,
                fields={
                    "aspiration_id": aspiration_id,
                    "official_rating": (
                        latest_finalized.official_rating if latest_finalized else None
                    ),
                },
                check_in=serialize_check_in(open_check_in) if open_check_in else None,
            )
        )
    return tuple(states)


# --------------------------------------------------------------------------- helpers


def _check_in_owners(check_ins: Iterable[CheckIn]) -> dict[DimensionKey, int]:
    owners: dict[DimensionKey, int] = {}
    for check_in in check_ins:
        if check_in.id is None:
            continue
        owners[(check_in.DIMENSION_KIND, check_in.id)] = check_in.dimension_id
    return owners


def _latest_active[TTenure: Tenure](tenures: Iterable[TTenure]) -> TTenure | None:
    return max(
        (t for t in tenures if t.is_active),
        key=lambda t: (t.started_at, t.id or 0),
        default=None,
    )


def _latest_closed[TTenure: Tenure](tenures: Iterable[TTenure]) -> TTenure | None:
    return max(
        (t for t in tenures if t.ended_at is not None),
        key=lambda t: (t.ended_at, t.id or 0),
        default=None,
    )


def _latest_open[TCheckIn: CheckIn](check_ins: Iterable[TCheckIn]) -> TCheckIn | None:
    return max(
        (c for c in check_ins if c.is_open),
        key=lambda c: (c.check_in_started_on or date.min, c.id or 0),
        default=None,
    )


def _json_value(value: object) -> object:
    if isinstance(value, datetime | date):
        return value.isoformat()
    return value
