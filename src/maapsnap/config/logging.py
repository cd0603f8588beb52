"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging
from typing import Final

# chatty third-party loggers, only shown with --verbose
QUIET_LOGGERS: Final[tuple[str, ...]] = ("alembic", "sqlalchemy.engine")


def configure_logging(*, verbose: bool = False, force: bool = False) -> None:
    """Configure the root logger for CLI output.

    ``verbose`` switches maapsnap to DEBUG and lets Alembic and the SQLAlchemy
    engine log at INFO; otherwise those stay at WARNING. ``force`` replaces
    existing handlers, which tests rely on.
    """

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO if verbose else logging.WARNING)
