"""Alembic migrations for the snapshot schema.

The revisions ship inside the package. ``pyproject.toml`` may add
``[tool.alembic]`` options when running from a checkout; ``script_location`` is
always the package directory.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory

from maapsnap.config import get_database_config

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent
PYPROJECT_PATH: Final[Path] = MIGRATIONS_PATH.parents[4] / "pyproject.toml"

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine


def _has_alembic_section(path: Path) -> bool:
    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except FileNotFoundError:
        return False
    return "alembic" in document.get("tool", {})


def alembic_config(
    *, connection: Connection | None = None, database_uri: str | None = None
) -> Config:
    """Return a Config for the packaged revisions, bound to a connection or URI if given."""

    if _has_alembic_section(PYPROJECT_PATH):
        config = Config(toml_file=str(PYPROJECT_PATH))
    else:
        config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    if connection is not None:
        config.attributes["connection"] = connection
    if database_uri is not None:
        config.set_main_option("sqlalchemy.url", database_uri)
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Bring the schema up to the latest revision."""

    if engine is None:
        uri = database_uri or get_database_config().uri
        command.upgrade(alembic_config(database_uri=uri), "head")
        return
    with engine.begin() as connection:
        command.upgrade(alembic_config(connection=connection), "head")


def head_revision() -> str | None:
    return ScriptDirectory.from_config(alembic_config()).get_current_head()


def current_revision(engine: Engine) -> str | None:
    """Return the revision stamped in the database, ``None`` before the first upgrade."""

    with engine.connect() as connection:
        return MigrationContext.configure(connection).get_current_revision()
