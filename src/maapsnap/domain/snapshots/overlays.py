"""Normalize a raw proposed-changes payload into per-dimension overlays.

Three key shapes reach this module:

* nested: ``check_in_data[<assignment_id>][<field>]`` and its position and
  aspiration siblings, already decoded into mappings;
* dimension-prefixed: ``assignment_<id>_<field>``, ``position_<id>_<field>``,
  ``aspiration_<id>_<field>``, plus ``tenure_<assignment_id>_<field>`` for
  the anticipated energy of an assignment's active tenure;
* check-in-prefixed: ``check_in_<check_in_id>_<field>`` and the
  ``position_check_in_`` / ``aspiration_check_in_`` variants, resolved to a
  dimension through the teammate's check-in ownership map.

Shapes are applied field by field in the order dimension-prefixed,
check-in-prefixed, nested, so a later shape overrides an earlier one. Two keys
of the same shape that disagree about the same field are rejected.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from pydantic import ValidationError

from maapsnap.domain.model import DimensionKind
from maapsnap.domain.snapshots.contracts import OverlayFields, tenure_field_names
from maapsnap.domain.snapshots.errors import (
    OverlayConflictError,
    OverlayOwnershipError,
    OverlayValueError,
)

if TYPE_CHECKING:
    from maapsnap.domain.snapshots.contracts import (
        CheckInOwners,
        DimensionKey,
        OverlaysByDimension,
    )

log = logging.getLogger(__name__)


class OverlayShape(StrEnum):
    DIMENSION_PREFIXED = "dimension_prefixed"
    CHECK_IN_PREFIXED = "check_in_prefixed"
    NESTED = "nested"


SHAPE_PRECEDENCE: Final = (
    OverlayShape.DIMENSION_PREFIXED,
    OverlayShape.CHECK_IN_PREFIXED,
    OverlayShape.NESTED,
)

FIELD_ALIASES: Final[dict[str, str]] = {
    "shared_notes": "shared_notes",
    "official_rating": "official_rating",
    "final_rating": "official_rating",
    "close_rating": "close_rating",
    "official_complete": "close_rating",
    "finalize": "close_rating",
    "employee_rating": "employee_rating",
    "employee_private_notes": "employee_private_notes",
    "employee_complete": "employee_complete",
    "personal_alignment": "employee_personal_alignment",
    "employee_personal_alignment": "employee_personal_alignment",
    "actual_energy": "actual_energy_percentage",
    "actual_energy_percentage": "actual_energy_percentage",
    "manager_rating": "manager_rating",
    "manager_private_notes": "manager_private_notes",
    "manager_complete": "manager_complete",
    "anticipated_energy": "anticipated_energy_percentage",
    "anticipated_energy_percentage": "anticipated_energy_percentage",
}

_CHECK_IN_ID_FIELD: Final = "check_in_id"


@dataclass(frozen=True, slots=True)
class KeyScheme:
    """Key spellings used for one dimension kind."""

    kind: DimensionKind
    nested_key: str
    dimension_prefix: str
    check_in_prefix: str
    dimension_pattern: re.Pattern[str] = field(init=False, repr=False)
    check_in_pattern: re.Pattern[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "dimension_pattern", _flat_pattern(self.dimension_prefix))
        object.__setattr__(self, "check_in_pattern", _flat_pattern(self.check_in_prefix))


def _flat_pattern(prefix: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(prefix)}_(\d+)_([a-z_]+)$")


KEY_SCHEMES: Final = (
    KeyScheme(DimensionKind.ASSIGNMENT, "check_in_data", "assignment", "check_in"),
    KeyScheme(DimensionKind.POSITION, "position_check_in_data", "position", "position_check_in"),
    KeyScheme(
        DimensionKind.ASPIRATION, "aspiration_check_in_data", "aspiration", "aspiration_check_in"
    ),
)

# tenure_<assignment_id>_<field> feeds the active assignment tenure
_TENURE_PATTERN: Final = _flat_pattern("tenure")


@dataclass(frozen=True, slots=True)
class _Observed:
    value: object
    source_key: str


@dataclass(slots=True)
class _ShapeFields:
    """Fields collected from one key shape, with same-shape conflict detection."""

    shape: OverlayShape
    fields: dict[DimensionKey, dict[str, _Observed]] = field(
        default_factory=dict["DimensionKey", "dict[str, _Observed]"]
    )

    def record(self, key: DimensionKey, raw_field: str, value: object, *, source_key: str) -> None:
        field_name = FIELD_ALIASES.get(raw_field)
        if field_name is None:
            log.debug("Ignoring unrecognised field %r in %r", raw_field, source_key)
            return
        normalized = normalize_field_value(field_name, value, source_key=source_key)
        if normalized is None:
            return

        slot = self.fields.setdefault(key, {})
        existing = slot.get(field_name)
        if existing is None:
            slot[field_name] = _Observed(normalized, source_key)
        elif existing.value != normalized:
            raise OverlayConflictError(
                key, field_name, source_keys=(existing.source_key, source_key)
            )


def parse_overlays(
    raw_changes: Mapping[str, object],
    *,
    check_in_owners: CheckInOwners,
) -> OverlaysByDimension:
    """Return the overlay for every dimension mentioned by ``raw_changes``.

    Dimensions are only keyed here; whether they exist in the teammate's
    baseline is decided by the assembler.
    """
    decoded = {
        OverlayShape.DIMENSION_PREFIXED: _decode_dimension_prefixed(raw_changes),
        OverlayShape.CHECK_IN_PREFIXED: _decode_check_in_prefixed(raw_changes, check_in_owners),
        OverlayShape.NESTED: _decode_nested(raw_changes, check_in_owners),
    }

    merged: dict[DimensionKey, dict[str, object]] = {}
    for shape in SHAPE_PRECEDENCE:
        for key, observed_fields in decoded[shape].fields.items():
            target = merged.setdefault(key, {})
            for field_name, observed in observed_fields.items():
                if field_name in target and target[field_name] != observed.value:
                    log.debug(
                        "%s overrides %s on %s %s via %r",
                        shape,
                        field_name,
                        key[0],
                        key[1],
                        observed.source_key,
                    )
                target[field_name] = observed.value

    return {key: OverlayFields(**fields) for key, fields in merged.items() if fields}


def normalize_field_value(field_name: str, value: object, *, source_key: str) -> object:
    """Validate one canonical field value; blank values normalize to ``None``."""
    if normalize_blank(value) is None:
        return None
    try:
        validated = OverlayFields.model_validate({field_name: value})
    except ValidationError as exc:
        raise OverlayValueError(field_name, value, source_key=source_key) from exc
    return getattr(validated, field_name)


def normalize_blank(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _decode_dimension_prefixed(raw_changes: Mapping[str, object]) -> _ShapeFields:
    collected = _ShapeFields(OverlayShape.DIMENSION_PREFIXED)
    for raw_key, value in raw_changes.items():
        if not isinstance(raw_key, str):
            continue
        tenure_match = _TENURE_PATTERN.match(raw_key)
        if tenure_match is not None:
            _record_tenure_field(collected, tenure_match, value, source_key=raw_key)
            continue
        for scheme in KEY_SCHEMES:
            match = scheme.dimension_pattern.match(raw_key)
            if match is None:
                continue
            key = (scheme.kind, int(match.group(1)))
            collected.record(key, match.group(2), value, source_key=raw_key)
            break
    return collected


def _record_tenure_field(
    collected: _ShapeFields, match: re.Match[str], value: object, *, source_key: str
) -> None:
    raw_field = match.group(2)
    if FIELD_ALIASES.get(raw_field) not in tenure_field_names(DimensionKind.ASSIGNMENT):
        log.debug("Ignoring %r: tenure keys only carry tenure fields", source_key)
        return
    collected.record(
        (DimensionKind.ASSIGNMENT, int(match.group(1))), raw_field, value, source_key=source_key
    )


def _decode_check_in_prefixed(
    raw_changes: Mapping[str, object], check_in_owners: CheckInOwners
) -> _ShapeFields:
    collected = _ShapeFields(OverlayShape.CHECK_IN_PREFIXED)
    for raw_key, value in raw_changes.items():
        if not isinstance(raw_key, str):
            continue
        for scheme in KEY_SCHEMES:
            match = scheme.check_in_pattern.match(raw_key)
            if match is None:
                continue
            check_in_id = int(match.group(1))
            owner_id = check_in_owners.get((scheme.kind, check_in_id))
            if owner_id is None:
                log.warning(
                    "Dropping %r: %s check-in %s does not belong to this teammate",
                    raw_key,
                    scheme.kind,
                    check_in_id,
                )
            else:
                collected.record(
                    (scheme.kind, owner_id), match.group(2), value, source_key=raw_key
                )
            break
    return collected


def _decode_nested(
    raw_changes: Mapping[str, object], check_in_owners: CheckInOwners
) -> _ShapeFields:
    collected = _ShapeFields(OverlayShape.NESTED)
    for scheme in KEY_SCHEMES:
        nested = raw_changes.get(scheme.nested_key)
        if nested is None:
            continue
        if not isinstance(nested, Mapping):
            log.warning("Ignoring %r: expected a mapping, got %s", scheme.nested_key, type(nested))
            continue
        for raw_id, entry in nested.items():
            source_prefix = f"{scheme.nested_key}[{raw_id}]"
            dimension_id = _parse_id(raw_id)
            if dimension_id is None or not isinstance(entry, Mapping):
                log.warning("Ignoring malformed entry %r", source_prefix)
                continue
            key = (scheme.kind, dimension_id)
            _verify_owner(key, entry.get(_CHECK_IN_ID_FIELD), check_in_owners, source_prefix)
            for raw_field, value in entry.items():
                if raw_field == _CHECK_IN_ID_FIELD:
                    continue
                collected.record(
                    key, str(raw_field), value, source_key=f"{source_prefix}[{raw_field}]"
                )
    return collected


def _verify_owner(
    key: DimensionKey,
    raw_check_in_id: object,
    check_in_owners: CheckInOwners,
    source_prefix: str,
) -> None:
    if normalize_blank(raw_check_in_id) is None:
        return
    check_in_id = _parse_id(raw_check_in_id)
    if check_in_id is None:
        raise OverlayValueError(_CHECK_IN_ID_FIELD, raw_check_in_id, source_key=source_prefix)
    kind, dimension_id = key
    owner_id = check_in_owners.get((kind, check_in_id))
    if owner_id is None:
        log.warning(
            "%s names unknown %s check-in %s; keying by dimension %s",
            source_prefix,
            kind,
            check_in_id,
            dimension_id,
        )
    elif owner_id != dimension_id:
        raise OverlayOwnershipError(key, check_in_id, owner_id)


def _parse_id(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None
