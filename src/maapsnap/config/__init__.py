"""Application configuration helpers."""

from __future__ import annotations

from .env import (
    optional_bool_env_var,
    optional_int_env_var,
    require_env_var,
    require_env_vars,
)
from .errors import ConfigurationError, InvalidSettingError, MissingConfigurationError
from .logging import configure_logging
from .snapshots import SnapshotConfig, get_snapshot_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "InvalidSettingError",
    "MissingConfigurationError",
    "SnapshotConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_snapshot_config",
    "get_storage_config",
    "optional_bool_env_var",
    "optional_int_env_var",
    "require_env_var",
    "require_env_vars",
]
