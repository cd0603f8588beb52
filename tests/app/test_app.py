from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from maapsnap import app
from maapsnap.config.snapshots import DEFAULT_EXPLORATION_REASON, DEFAULT_SNAPSHOT_REASON
from maapsnap.domain.model import ChangeType
from tests.helpers.records import (
    MANAGER_ID,
    ORGANIZATION_ID,
    TEAMMATE_ID,
    lifeline_records,
    persist_records,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from maapsnap.adapters.sqlalchemy.unit_of_work import SqlAlchemySnapshotUnitOfWork

    UowFactory = Callable[[], SqlAlchemySnapshotUnitOfWork]


@pytest.fixture
def stored_uow(
    sqlite_unit_of_work: UowFactory, monkeypatch: pytest.MonkeyPatch
) -> UowFactory:
    monkeypatch.delenv("MAAPSNAP_DEFAULT_REASON", raising=False)
    monkeypatch.setenv("MAAPSNAP_AUTOMATION_ACTOR_ID", str(MANAGER_ID))
    with sqlite_unit_of_work() as uow:
        persist_records(uow, lifeline_records())
    return sqlite_unit_of_work


def test_build_snapshot_applies_configured_defaults(stored_uow: UowFactory) -> None:
    result = app.build_snapshot(
        teammate_id=TEAMMATE_ID,
        organization_id=ORGANIZATION_ID,
        raw_changes={"assignment_84_close_rating": "1"},
        request_info={"source": "test"},
        unit_of_work_factory=stored_uow,
    )

    snapshot = result.snapshot
    assert snapshot.reason == DEFAULT_SNAPSHOT_REASON
    assert snapshot.creator_teammate_id == MANAGER_ID
    assert snapshot.change_type is ChangeType.BULK_CHECK_IN_FINALIZATION
    assert snapshot.request_info == {"source": "test"}
    entry = next(a for a in snapshot.maap_data["assignments"] if a["assignment_id"] == 84)
    assert entry["check_in"]["finalized_by_id"] == MANAGER_ID


def test_build_snapshot_then_execute(stored_uow: UowFactory) -> None:
    snapshot = app.build_snapshot(
        teammate_id=TEAMMATE_ID,
        organization_id=ORGANIZATION_ID,
        raw_changes={"check_in_data": {"81": {"shared_notes": "Via app"}}},
        reason="Manual",
        unit_of_work_factory=stored_uow,
    ).snapshot

    report = app.snapshot_changes(snapshot.require_id(), unit_of_work_factory=stored_uow)
    result = app.execute(snapshot.require_id(), unit_of_work_factory=stored_uow)

    assert report.has_changes
    assert result.snapshot.executed
    assert not app.snapshot_changes(
        snapshot.require_id(), unit_of_work_factory=stored_uow
    ).has_changes


def test_build_exploration_uses_default_reason(stored_uow: UowFactory) -> None:
    snapshot = app.build_exploration(
        organization_id=ORGANIZATION_ID, unit_of_work_factory=stored_uow
    )

    assert snapshot.reason == DEFAULT_EXPLORATION_REASON
    assert snapshot.creator_teammate_id == MANAGER_ID
