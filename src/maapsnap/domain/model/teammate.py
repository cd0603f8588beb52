"""The subject whose performance data is reconciled."""

from __future__ import annotations

from dataclasses import dataclass

from maapsnap.domain.model.entity import Entity


@dataclass(eq=False, kw_only=True)
class Teammate(Entity):
    """A person's membership in one organization."""

    person_id: int
    organization_id: int
    display_name: str = ""
