"""Errors raised while interpreting proposed changes."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from maapsnap.domain.snapshots.contracts import DimensionKey


class OverlayError(ValueError):
    """Base class for rejected proposed-changes payloads."""


class OverlayValueError(OverlayError):
    def __init__(self, field_name: str, value: object, *, source_key: str) -> None:
        super().__init__(f"Invalid value {value!r} for {field_name} at {source_key!r}")
        self.field_name = field_name
        self.value = value
        self.source_key = source_key


class OverlayConflictError(OverlayError):
    """Two keys of the same shape disagree about one field of one dimension."""

    def __init__(
        self,
        key: DimensionKey,
        field_name: str,
        *,
        source_keys: tuple[str, str],
    ) -> None:
        kind, dimension_id = key
        first, second = source_keys
        super().__init__(
            f"Conflicting values for {field_name} on {kind} {dimension_id}: "
            f"{first!r} and {second!r}"
        )
        self.key = key
        self.field_name = field_name
        self.source_keys = source_keys


class OverlayOwnershipError(OverlayError):
    """A nested entry names a check-in that belongs to a different dimension."""

    def __init__(self, key: DimensionKey, check_in_id: int, owner_id: int) -> None:
        kind, dimension_id = key
        super().__init__(
            f"Check-in {check_in_id} belongs to {kind} {owner_id}, not {dimension_id}"
        )
        self.key = key
        self.check_in_id = check_in_id
        self.owner_id = owner_id


class TeammateNotFoundError(LookupError):
    def __init__(self, teammate_id: int) -> None:
        super().__init__(f"Teammate {teammate_id} not found")
        self.teammate_id = teammate_id
