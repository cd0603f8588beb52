"""Persisted MAAP snapshot records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from maapsnap.domain.model.entity import Entity
from maapsnap.domain.model.enums import ChangeType

type JsonObject = dict[str, Any]


@dataclass(eq=False, kw_only=True)
class MaapSnapshot(Entity):
    """One assembled MAAP document plus the audit context it was built from.

    ``maap_data`` is written once at creation. ``form_params`` holds the raw
    proposed-changes payload for audit display only; nothing reads it back as
    derived state. ``applied_changes`` lists, per dimension, the field names whose
    proposed value differed from the state the document was built on; execution
    writes only those. ``effective_date`` stays ``None`` until the snapshot is executed.
    """

    company_id: int
    change_type: ChangeType
    reason: str
    employee_teammate_id: int | None = None
    creator_teammate_id: int | None = None
    maap_data: JsonObject = field(default_factory=dict["str", "Any"])
    form_params: JsonObject = field(default_factory=dict["str", "Any"])
    request_info: JsonObject = field(default_factory=dict["str", "Any"])
    applied_changes: list[JsonObject] = field(default_factory=list["JsonObject"])
    effective_date: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    @property
    def executed(self) -> bool:
        return self.effective_date is not None

    @property
    def pending(self) -> bool:
        return self.effective_date is None

    @property
    def is_exploration(self) -> bool:
        return self.change_type is ChangeType.EXPLORATION
