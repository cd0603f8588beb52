"""Compare a proposed MAAP document with the teammate's current state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from maapsnap.domain.model import DimensionKind

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from maapsnap.domain.model import JsonObject
    from maapsnap.domain.snapshots.state import CurrentState

# rated_* summaries describe closed tenures and never change through a snapshot
_IGNORED_FIELDS: Final = frozenset({"rated_position", "rated_assignment", "check_in"})

_ID_FIELDS: Final[dict[DimensionKind, str]] = {
    DimensionKind.POSITION: "position_id",
    DimensionKind.ASSIGNMENT: "assignment_id",
    DimensionKind.ABILITY: "ability_id",
    DimensionKind.ASPIRATION: "aspiration_id",
}


@dataclass(frozen=True, slots=True)
class FieldChange:
    field: str
    current: object
    proposed: object


@dataclass(frozen=True, slots=True)
class DimensionChange:
    kind: DimensionKind
    dimension_id: int | None
    changes: tuple[FieldChange, ...]


@dataclass(frozen=True, slots=True)
class ChangeReport:
    dimensions: tuple[DimensionChange, ...] = ()

    @property
    def has_changes(self) -> bool:
        return bool(self.dimensions)

    def counts(self) -> dict[DimensionKind, int]:
        counts = dict.fromkeys(DimensionKind, 0)
        for change in self.dimensions:
            counts[change.kind] += 1
        return counts

    def for_kind(self, kind: DimensionKind) -> tuple[DimensionChange, ...]:
        return tuple(change for change in self.dimensions if change.kind is kind)

    def changed_fields(self) -> list[JsonObject]:
        """Return the changed field names per dimension, ready to store as JSON."""
        return [
            {
                "kind": str(change.kind),
                "dimension_id": change.dimension_id,
                "fields": [field_change.field for field_change in change.changes],
            }
            for change in self.dimensions
        ]


def detect_changes(maap_data: Mapping[str, object], state: CurrentState) -> ChangeReport:
    """Report every dimension whose proposed entry differs from the current state."""
    baseline = state.to_maap_data()
    found: list[DimensionChange] = []

    position_change = _compare_dimension(
        DimensionKind.POSITION,
        _as_mapping(baseline.get("position")),
        _as_mapping(maap_data.get("position")),
    )
    if position_change is not None:
        found.append(position_change)

    for kind, section in (
        (DimensionKind.ASSIGNMENT, "assignments"),
        (DimensionKind.ASPIRATION, "aspirations"),
    ):
        found.extend(_compare_section(kind, baseline.get(section), maap_data.get(section)))

    found.extend(_compare_abilities(baseline.get("abilities"), maap_data.get("abilities")))
    return ChangeReport(tuple(found))


def _compare_section(
    kind: DimensionKind, current: object, proposed: object
) -> list[DimensionChange]:
    id_field = _ID_FIELDS[kind]
    current_by_id = _index(current, id_field)
    proposed_by_id = _index(proposed, id_field)
    ordered_ids = [*current_by_id, *(i for i in proposed_by_id if i not in current_by_id)]

    changes: list[DimensionChange] = []
    for dimension_id in ordered_ids:
        change = _compare_dimension(
            kind, current_by_id.get(dimension_id), proposed_by_id.get(dimension_id)
        )
        if change is not None:
            changes.append(change)
    return changes


def _compare_abilities(current: object, proposed: object) -> list[DimensionChange]:
    def levels(entries: object) -> dict[int, set[object]]:
        grouped: dict[int, set[object]] = {}
        for entry in _entries(entries):
            ability_id = entry.get("ability_id")
            if isinstance(ability_id, int):
                grouped.setdefault(ability_id, set()).add(entry.get("milestone_level"))
        return grouped

    current_levels = levels(current)
    proposed_levels = levels(proposed)
    changes: list[DimensionChange] = []
    for ability_id in sorted(current_levels.keys() | proposed_levels.keys()):
        before = current_levels.get(ability_id, set())
        after = proposed_levels.get(ability_id, set())
        if before != after:
            changes.append(
                DimensionChange(
                    DimensionKind.ABILITY,
                    ability_id,
                    (FieldChange("milestone_level", _highest(before), _highest(after)),),
                )
            )
    return changes


def _compare_dimension(
    kind: DimensionKind,
    current: Mapping[str, object] | None,
    proposed: Mapping[str, object] | None,
) -> DimensionChange | None:
    id_field = _ID_FIELDS[kind]
    if current is None and proposed is None:
        return None
    if current is None or proposed is None:
        source = proposed if proposed is not None else current
        dimension_id = _int_or_none(source.get(id_field)) if source is not None else None
        return DimensionChange(
            kind,
            dimension_id,
            (FieldChange("present", current is not None, proposed is not None),),
        )

    field_changes = _diff(current, proposed, prefix="", ignored=_IGNORED_FIELDS)
    field_changes.extend(
        _diff(
            _as_mapping(current.get("check_in")) or {},
            _as_mapping(proposed.get("check_in")) or {},
            prefix="check_in.",
            ignored=frozenset(),
        )
    )
    if not field_changes:
        return None
    dimension_id = _int_or_none(proposed.get(id_field, current.get(id_field)))
    return DimensionChange(kind, dimension_id, tuple(field_changes))


def _diff(
    current: Mapping[str, object],
    proposed: Mapping[str, object],
    *,
    prefix: str,
    ignored: frozenset[str],
) -> list[FieldChange]:
    names = [*current, *(name for name in proposed if name not in current)]
    return [
        FieldChange(f"{prefix}{name}", current.get(name), proposed.get(name))
        for name in names
        if name not in ignored and current.get(name) != proposed.get(name)
    ]


def _index(entries: object, id_field: str) -> dict[int, Mapping[str, object]]:
    indexed: dict[int, Mapping[str, object]] = {}
    for entry in _entries(entries):
        dimension_id = _int_or_none(entry.get(id_field))
        if dimension_id is not None:
            indexed[dimension_id] = entry
    return indexed


def _entries(value: object) -> Iterable[Mapping[str, object]]:
    if not isinstance(value, list):
        return ()
    return [entry for entry in value if isinstance(entry, dict)]


def _as_mapping(value: object) -> Mapping[str, object] | None:
    return value if isinstance(value, dict) else None


def _int_or_none(value: object) -> int | None:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def _highest(levels: set[object]) -> object:
    numeric = [level for level in levels if isinstance(level, int)]
    return max(numeric, default=None)
