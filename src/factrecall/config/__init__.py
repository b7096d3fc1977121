"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float, env_int, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging, log_level_from_env
from .retry import WriteRetryConfig, get_write_retry_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "StorageConfig",
    "WriteRetryConfig",
    "configure_logging",
    "env_float",
    "env_int",
    "get_database_config",
    "get_storage_config",
    "get_write_retry_config",
    "log_level_from_env",
    "optional_env_var",
    "require_env_vars",
]
