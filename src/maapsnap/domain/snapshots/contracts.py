"""Shared data contracts for snapshot assembly.

Contracts are intentionally small and pure so each layer can be tested in
isolation: the reader produces a ``CurrentState``, the overlay parser produces
``OverlaysByDimension`` and the assembler combines both into a
``SnapshotDocument``.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final, Protocol

from pydantic import BaseModel, ConfigDict, StrictBool, field_validator

from maapsnap.domain.model import DimensionKind

if TYPE_CHECKING:
    from collections.abc import Mapping

    from maapsnap.domain.model import JsonObject


type DimensionKey = tuple[DimensionKind, int]
type CheckInOwners = Mapping[DimensionKey, int]
"""Maps ``(kind, check_in_id)`` to the id of the dimension owning that check-in."""

type OverlaysByDimension = dict[DimensionKey, OverlayFields]


MAAP_DATA_KEYS: Final = ("position", "assignments", "abilities", "aspirations")

BASE_CHECK_IN_FIELDS: Final = (
    "check_in_started_on",
    "employee_rating",
    "employee_private_notes",
    "employee_completed_at",
    "manager_rating",
    "manager_private_notes",
    "manager_completed_at",
    "manager_completed_by_id",
    "shared_notes",
    "official_rating",
    "official_check_in_completed_at",
    "finalized_by_id",
)

CHECK_IN_FIELDS_BY_KIND: Final[dict[DimensionKind, tuple[str, ...]]] = {
    DimensionKind.ASSIGNMENT: (
        *BASE_CHECK_IN_FIELDS,
        "actual_energy_percentage",
        "employee_personal_alignment",
    ),
    DimensionKind.POSITION: BASE_CHECK_IN_FIELDS,
    DimensionKind.ASPIRATION: BASE_CHECK_IN_FIELDS,
}

DATETIME_CHECK_IN_FIELDS: Final = frozenset(
    {"employee_completed_at", "manager_completed_at", "official_check_in_completed_at"}
)

# entry-level fields backed by the active tenure rather than the check-in
TENURE_FIELDS_BY_KIND: Final[dict[DimensionKind, tuple[str, ...]]] = {
    DimensionKind.ASSIGNMENT: ("anticipated_energy_percentage",),
}
TENURE_FIELDS: Final = frozenset(
    name for names in TENURE_FIELDS_BY_KIND.values() for name in names
)


def check_in_field_names(kind: DimensionKind) -> tuple[str, ...]:
    try:
        return CHECK_IN_FIELDS_BY_KIND[kind]
    except KeyError:
        raise ValueError(f"{kind} dimensions carry no check-in") from None


def tenure_field_names(kind: DimensionKind) -> tuple[str, ...]:
    return TENURE_FIELDS_BY_KIND.get(kind, ())


def empty_check_in(kind: DimensionKind) -> JsonObject:
    """Return the blank check-in template used when an overlay has no record to land on."""
    return {"check_in_id": None} | dict.fromkeys(check_in_field_names(kind))


class OverlayFields(BaseModel):
    """Proposed values for one dimension.

    Every field is optional. A field left at ``None`` was not mentioned by the
    caller and must leave the current value untouched. The three ``*_complete``
    style toggles drive completion timestamps rather than being stored.
    ``anticipated_energy_percentage`` lands on the assignment entry itself; every
    other field lands on its check-in.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    shared_notes: str | None = None
    official_rating: str | int | None = None
    close_rating: StrictBool | None = None

    employee_rating: str | int | None = None
    employee_private_notes: str | None = None
    employee_complete: StrictBool | None = None
    employee_personal_alignment: str | None = None
    actual_energy_percentage: int | None = None

    manager_rating: str | int | None = None
    manager_private_notes: str | None = None
    manager_complete: StrictBool | None = None

    anticipated_energy_percentage: int | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("close_rating", "employee_complete", "manager_complete", mode="before")
    @classmethod
    def _parse_toggle(cls, value: object) -> object:
        if isinstance(value, bool) or value is None:
            return value
        token = str(value).strip().lower()
        if token in _TRUE_TOKENS:
            return True
        if token in _FALSE_TOKENS:
            return False
        return value

    def mentioned(self) -> dict[str, object]:
        """Return only the fields the caller actually supplied."""
        return self.model_dump(exclude_none=True)


_TRUE_TOKENS: Final = frozenset({"true", "1", "on", "yes"})
_FALSE_TOKENS: Final = frozenset({"false", "0", "off", "no"})


@dataclass(frozen=True, slots=True)
class MergeContext:
    """Values resolved once per assembly and shared by every merge."""

    now: datetime
    actor_id: int | None = None

    @property
    def timestamp(self) -> str:
        return self.now.isoformat()


@dataclass(frozen=True, slots=True, kw_only=True)
class SnapshotDocument:
    """An assembled MAAP document plus the verbatim changes it was built from.

    ``maap_data`` is authoritative. ``raw_changes`` is kept for audit display and
    never read back as state.
    """

    maap_data: JsonObject
    raw_changes: JsonObject = field(default_factory=dict["str", "object"])
    applied: tuple[DimensionKey, ...] = ()
    dropped: tuple[DimensionKey, ...] = ()

    def to_dict(self) -> JsonObject:
        document = copy.deepcopy(self.maap_data)
        document["raw_changes"] = copy.deepcopy(self.raw_changes)
        return document


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(tz=UTC)
