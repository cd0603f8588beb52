"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class DimensionKind(StrEnum):
    """Trackable performance axes of a teammate."""

    POSITION = "position"
    ASSIGNMENT = "assignment"
    ABILITY = "ability"
    ASPIRATION = "aspiration"


class ChangeType(StrEnum):
    ASSIGNMENT_MANAGEMENT = "assignment_management"
    POSITION_TENURE = "position_tenure"
    MILESTONE_MANAGEMENT = "milestone_management"
    ASPIRATION_MANAGEMENT = "aspiration_management"
    EXPLORATION = "exploration"
    BULK_UPDATE = "bulk_update"
    BULK_CHECK_IN_FINALIZATION = "bulk_check_in_finalization"
