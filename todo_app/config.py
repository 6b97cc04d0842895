from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

def _resolve_project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()

DEFAULT_FILE_STORAGE_PATH = "data/tasks.json"
DEFAULT_BACKUP_PATH = "data/tasks_backup.json"


def load_env() -> None:
    env_name = os.getenv("APP_ENV", "development")
    candidates = [Path.cwd(), PROJECT_ROOT]
    for base in candidates:
        env_path = base / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            break

    for base in candidates:
        env_specific = base / f".env.{env_name}"
        if env_specific.exists():
            load_dotenv(env_specific, override=True)
            break


@dataclass(frozen=True)
class Settings:
    database_url: str | None = None
    database_username: str | None = None
    database_password: str | None = None
    database_driver: str | None = None
    file_storage_path: Path = Path(DEFAULT_FILE_STORAGE_PATH)
    file_storage_backup_path: Path = Path(DEFAULT_BACKUP_PATH)
    log_level: str = "INFO"
    log_dir: str = "logs"


def _env(name: str) -> str | None:
    return os.getenv(name, "").strip() or None


def _resolve_path(value: str) -> Path:
    path = Path(value)
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path


def load_settings() -> Settings:
    load_env()
    return Settings(
        database_url=_env("DATABASE_URL"),
        database_username=_env("DATABASE_USERNAME"),
        database_password=_env("DATABASE_PASSWORD"),
        database_driver=_env("DATABASE_DRIVER"),
        file_storage_path=_resolve_path(_env("TASKS_FILE_PATH") or DEFAULT_FILE_STORAGE_PATH),
        file_storage_backup_path=_resolve_path(_env("TASKS_BACKUP_PATH") or DEFAULT_BACKUP_PATH),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_dir=os.getenv("LOG_DIR", "logs"),
    )
