"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from maapsnap.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemySnapshotUnitOfWork,
    is_started,
    startup,
)
from maapsnap.config import get_snapshot_config
from maapsnap.config.snapshots import DEFAULT_EXPLORATION_REASON
from maapsnap.domain.finalization import (
    SnapshotBuildResult,
    SnapshotExecutionResult,
    SnapshotRequest,
    build_exploration_snapshot,
    build_snapshot_for_teammate,
    detect_snapshot_changes,
    execute_snapshot,
)
from maapsnap.domain.model import ChangeType
from maapsnap.domain.ports import SnapshotUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Mapping

    from maapsnap.domain.model import MaapSnapshot
    from maapsnap.domain.snapshots import ChangeReport

UnitOfWorkFactory = Callable[[], SnapshotUnitOfWork]


log = getLogger(__name__)


def _resolve_uow(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return SqlAlchemySnapshotUnitOfWork


def build_snapshot(
    *,
    teammate_id: int,
    organization_id: int,
    raw_changes: Mapping[str, object] | None = None,
    created_by_id: int | None = None,
    reason: str | None = None,
    change_type: ChangeType = ChangeType.BULK_CHECK_IN_FINALIZATION,
    request_info: Mapping[str, object] | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> SnapshotBuildResult:
    """Build and store a pending snapshot using the configured adapters."""

    config = get_snapshot_config()
    request = SnapshotRequest(
        teammate_id=teammate_id,
        organization_id=organization_id,
        reason=reason or config.default_reason,
        raw_changes=dict(raw_changes or {}),
        created_by_id=created_by_id if created_by_id is not None else config.automation_actor_id,
        change_type=change_type,
        request_info=dict(request_info or {}),
    )
    log.info(
        "Building %s snapshot: teammate=%s, organization=%s, keys=%d",
        change_type,
        teammate_id,
        organization_id,
        len(request.raw_changes),
    )
    return build_snapshot_for_teammate(
        request, unit_of_work_factory=_resolve_uow(unit_of_work_factory)
    )


def build_exploration(
    *,
    organization_id: int,
    created_by_id: int | None = None,
    reason: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> MaapSnapshot:
    config = get_snapshot_config()
    return build_exploration_snapshot(
        organization_id=organization_id,
        reason=reason or DEFAULT_EXPLORATION_REASON,
        created_by_id=created_by_id if created_by_id is not None else config.automation_actor_id,
        unit_of_work_factory=_resolve_uow(unit_of_work_factory),
    )


def snapshot_changes(
    snapshot_id: int,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ChangeReport:
    return detect_snapshot_changes(
        snapshot_id, unit_of_work_factory=_resolve_uow(unit_of_work_factory)
    )


def execute(
    snapshot_id: int,
    *,
    executed_by_id: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> SnapshotExecutionResult:
    """Apply a pending snapshot to the stored check-ins and tenures."""

    config = get_snapshot_config()
    result = execute_snapshot(
        snapshot_id,
        unit_of_work_factory=_resolve_uow(unit_of_work_factory),
        executed_by_id=executed_by_id if executed_by_id is not None else config.automation_actor_id,
    )
    log.info(
        f"Finished executing snapshot {snapshot_id}: updated={result.updated_check_ins}, "
        f"finalized={result.finalized_check_ins}, skipped={result.skipped_check_ins}, "
        f"tenures_closed={result.closed_tenures}"
    )
    return result
