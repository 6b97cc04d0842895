from __future__ import annotations

import logging

from todo_app.config import Settings

from .db import Database
from .file_repository import FileTaskRepository
from .repository import SqlTaskRepository, TaskRepository

logger = logging.getLogger(__name__)


def _connect(settings: Settings) -> Database | None:
    if not settings.database_url:
        logger.info("No database configured")
        return None

    database = None
    try:
        database = Database(settings)
        database.init_db()
    except Exception:  # noqa: BLE001
        logger.warning("Database connection failed, falling back to file storage", exc_info=True)
        if database is not None:
            database.engine.dispose()
        return None
    return database


def select_repository(settings: Settings) -> tuple[TaskRepository, bool]:
    """Pick the storage backend once, preferring a reachable database."""
    database = _connect(settings)
    if database is not None:
        repo: TaskRepository = SqlTaskRepository(database)
        using_database = True
    else:
        repo = FileTaskRepository(settings.file_storage_path, settings.file_storage_backup_path)
        using_database = False

    logger.info("Task storage initialized with %s backend", "database" if using_database else "file")
    return repo, using_database
