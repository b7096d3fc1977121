"""Data storage configuration helpers.

Two databases are involved: one global store shared by every project of the
user, and one optional store living inside the current project directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_int, optional_env_var

APP_DIR_NAME: Final[str] = "factrecall"
GLOBAL_DB_FILENAME: Final[str] = "global.db"
PROJECT_DIR_NAME: Final[str] = ".factrecall"
PROJECT_DB_FILENAME: Final[str] = "memory.db"
DEFAULT_BUSY_TIMEOUT_MS: Final[int] = 5000


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    project_path: Path | None = None
    global_database_filename: str = GLOBAL_DB_FILENAME
    project_database_filename: str = PROJECT_DB_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def global_database_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.global_database_filename

    def project_database_path(self, *, ensure: bool = True) -> Path | None:
        if self.project_path is None:
            return None
        base = self.project_path.expanduser().resolve() / PROJECT_DIR_NAME
        if ensure:
            base.mkdir(parents=True, exist_ok=True)
        return base / self.project_database_filename


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Store URIs. A legacy URI selects the single-database layout holding every scope."""

    global_uri: str
    project_uri: str | None = None
    legacy_uri: str | None = None
    busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def _sqlite_uri(path: Path) -> str:
    return f"sqlite+pysqlite:///{path}"


def get_storage_config() -> StorageConfig:
    env_dir = optional_env_var("FACTRECALL_DATA_DIR")
    project_dir = optional_env_var("FACTRECALL_PROJECT_DIR")
    return StorageConfig(
        data_dir=Path(env_dir) if env_dir else _default_data_dir(),
        project_path=Path(project_dir) if project_dir else None,
    )


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    storage_config = storage or get_storage_config()
    global_uri = optional_env_var("FACTRECALL_GLOBAL_DB_URI") or _sqlite_uri(
        storage_config.global_database_path()
    )
    project_uri = optional_env_var("FACTRECALL_PROJECT_DB_URI")
    if project_uri is None:
        project_db = storage_config.project_database_path()
        project_uri = _sqlite_uri(project_db) if project_db is not None else None
    return DatabaseConfig(
        global_uri=global_uri,
        project_uri=project_uri,
        legacy_uri=optional_env_var("FACTRECALL_LEGACY_DB_URI"),
        busy_timeout_ms=env_int("FACTRECALL_BUSY_TIMEOUT_MS", DEFAULT_BUSY_TIMEOUT_MS),
    )
