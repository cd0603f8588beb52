"""Where snapshots and check-ins are stored.

Without ``DATABASE_URI`` maapsnap keeps a single SQLite file in the user's data
directory (``MAAPSNAP_DATA_DIR`` or the platform default).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_bool_env_var

APP_DIR_NAME: Final[str] = "maapsnap"
DEFAULT_DB_FILENAME: Final[str] = "maapsnap.db"

DATA_DIR_ENV: Final[str] = "MAAPSNAP_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"
DATABASE_ECHO_ENV: Final[str] = "MAAPSNAP_DATABASE_ECHO"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    @property
    def database_path(self) -> Path:
        return self.data_dir / self.database_filename

    def sqlite_uri(self, *, create_dirs: bool = True) -> str:
        if create_dirs:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        return f"sqlite+pysqlite:///{self.database_path}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False


def _platform_data_home() -> Path:
    if os.name == "nt":
        local = os.getenv("LOCALAPPDATA")
        return Path(local) if local else Path.home() / "AppData" / "Local"
    xdg = os.getenv("XDG_DATA_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    override = os.getenv(DATA_DIR_ENV, "").strip()
    data_dir = Path(override) if override else _platform_data_home() / APP_DIR_NAME
    return StorageConfig(data_dir=data_dir.expanduser().resolve())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """Resolve the database URI, creating the SQLite data directory when needed."""

    echo = bool(optional_bool_env_var(DATABASE_ECHO_ENV))
    uri = os.getenv(DATABASE_URI_ENV, "").strip()
    if uri:
        return DatabaseConfig(uri=uri, echo=echo)
    return DatabaseConfig(uri=(storage or get_storage_config()).sqlite_uri(), echo=echo)
