"""Typed readers for ``MAAPSNAP_*`` style environment settings.

Blank values count as unset everywhere: a ``.env`` file with ``KEY=`` behaves
like one without the key.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Final

from .errors import InvalidSettingError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence

_TRUE_VALUES: Final = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES: Final = frozenset({"0", "false", "no", "off"})


def _read(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return every named setting, raising once for all missing ones."""

    values = {name: _read(name) for name in names}
    missing = [name for name, value in values.items() if value is None]
    if missing:
        raise MissingConfigurationError(missing)
    return {name: value for name, value in values.items() if value is not None}


def require_env_var(name: str) -> str:
    return require_env_vars([name])[name]


def optional_int_env_var(name: str) -> int | None:
    value = _read(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise InvalidSettingError(name, value, expected="an integer") from exc


def optional_bool_env_var(name: str) -> bool | None:
    value = _read(name)
    if value is None:
        return None
    token = value.lower()
    if token in _TRUE_VALUES:
        return True
    if token in _FALSE_VALUES:
        return False
    raise InvalidSettingError(name, value, expected="a boolean flag")
