"""Rateable catalog entries owned by an organization.

Abilities, assignments and aspirations are interchangeable rating targets.
The snapshot core only needs their ids; ``Rateable`` is the shared capability
used where a caller needs a display name or the dimension kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable

from maapsnap.domain.model.entity import Entity
from maapsnap.domain.model.enums import DimensionKind


@runtime_checkable
class Rateable(Protocol):
    """Structural contract for anything a teammate can be rated against."""

    RATEABLE_KIND: ClassVar[DimensionKind]

    @property
    def id(self) -> int | None: ...

    @property
    def name(self) -> str: ...

    @property
    def owner_organization_id(self) -> int: ...


@dataclass(eq=False, kw_only=True)
class Assignment(Entity):
    RATEABLE_KIND: ClassVar[DimensionKind] = DimensionKind.ASSIGNMENT

    company_id: int
    title: str

    @property
    def name(self) -> str:
        return self.title

    @property
    def owner_organization_id(self) -> int:
        return self.company_id


@dataclass(eq=False, kw_only=True)
class Ability(Entity):
    RATEABLE_KIND: ClassVar[DimensionKind] = DimensionKind.ABILITY

    organization_id: int
    name: str

    @property
    def owner_organization_id(self) -> int:
        return self.organization_id


@dataclass(eq=False, kw_only=True)
class Aspiration(Entity):
    RATEABLE_KIND: ClassVar[DimensionKind] = DimensionKind.ASPIRATION

    organization_id: int
    name: str
    sort_order: int = 0

    @property
    def owner_organization_id(self) -> int:
        return self.organization_id


if TYPE_CHECKING:
    _assignment_check: Rateable = Assignment(company_id=1, title="x")
    _ability_check: Rateable = Ability(organization_id=1, name="x")
    _aspiration_check: Rateable = Aspiration(organization_id=1, name="x")
