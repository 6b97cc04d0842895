from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from todo_app.domain.entities import Task
from todo_app.domain.enums import Priority
from todo_app.domain.errors import NotFoundError, StorageError

logger = logging.getLogger(__name__)

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _format_datetime(value: datetime | None) -> str | None:
    return value.strftime(DATETIME_FORMAT) if value else None


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.strptime(value, DATETIME_FORMAT) if value else None


def _to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "priority": task.priority.name,
        "completed": task.completed,
        "dueDate": _format_datetime(task.due_date),
        "createdDate": _format_datetime(task.created_date),
        "completedDate": _format_datetime(task.completed_date),
    }


def _from_record(record: dict[str, Any]) -> Task:
    task = Task(
        id=record.get("id"),
        title=record["title"],
        description=record.get("description"),
        priority=Priority[record.get("priority") or Priority.MEDIUM.name],
        completed=bool(record.get("completed", False)),
        due_date=_parse_datetime(record.get("dueDate")),
        completed_date=_parse_datetime(record.get("completedDate")),
    )
    created = _parse_datetime(record.get("createdDate"))
    if created is not None:
        task.created_date = created
    return task


def _newest_first(tasks: list[Task]) -> list[Task]:
    return sorted(tasks, key=lambda t: (t.created_date, t.id or 0), reverse=True)


def _by_due_date(tasks: list[Task]) -> list[Task]:
    return sorted(tasks, key=lambda t: (t.due_date, t.id or 0))


class FileTaskRepository:
    """Task store kept in memory and mirrored to a JSON document.

    Every write first copies the current document to ``backup_path`` and
    then replaces the primary file atomically. On startup an unreadable
    primary file is recovered from the backup when possible, otherwise the
    store starts empty.
    """

    def __init__(self, file_path: str | Path, backup_path: str | Path) -> None:
        self.file_path = Path(file_path)
        self.backup_path = Path(backup_path)
        self._lock = threading.RLock()
        self._tasks: list[Task] = []
        self._next_id = 1
        self._initialize_storage()
        self._load_tasks()

    def _initialize_storage(self) -> None:
        for directory in {self.file_path.parent, self.backup_path.parent}:
            try:
                if not directory.exists():
                    directory.mkdir(parents=True, exist_ok=True)
                    logger.info("Created data directory: %s", directory)
            except OSError as exc:
                logger.exception("Error creating data directory %s", directory)
                raise StorageError("Failed to initialize storage") from exc

    @staticmethod
    def _read(path: Path) -> list[Task]:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        if not isinstance(data, list):
            raise ValueError(f"{path} does not contain a task list")
        for record in data:
            if not isinstance(record, dict):
                raise ValueError(f"{path} holds a task record that is not an object: {record!r}")
            task_id = record.get("id")
            if task_id is not None and (isinstance(task_id, bool) or not isinstance(task_id, int)):
                raise ValueError(f"{path} holds a task with a non-integer id: {task_id!r}")
        return [_from_record(record) for record in data]

    def _load_tasks(self) -> None:
        if not self.file_path.exists():
            logger.info("Tasks file %s does not exist, starting with empty list", self.file_path)
            return

        try:
            self._tasks = self._read(self.file_path)
            logger.info("Loaded %s tasks from %s", len(self._tasks), self.file_path)
        except (OSError, ValueError, KeyError, TypeError):
            logger.exception("Error loading tasks from %s", self.file_path)
            self._load_from_backup()
        self._reset_id_counter()

    def _load_from_backup(self) -> None:
        if not self.backup_path.exists():
            logger.warning("No backup file found, starting with empty list")
            self._tasks = []
            return

        try:
            self._tasks = self._read(self.backup_path)
        except (OSError, ValueError, KeyError, TypeError):
            logger.exception("Error loading tasks from backup %s", self.backup_path)
            self._tasks = []
            return

        logger.info("Loaded %s tasks from backup file", len(self._tasks))
        # the primary is corrupt, so it must not overwrite the good backup
        try:
            self._write_primary()
        except StorageError:
            logger.warning("Primary file %s not restored, keeping backup contents in memory", self.file_path)

    def _reset_id_counter(self) -> None:
        max_id = max((task.id or 0 for task in self._tasks), default=0)
        self._next_id = max_id + 1

    def _create_backup(self) -> None:
        if not self.file_path.exists():
            return
        try:
            shutil.copyfile(self.file_path, self.backup_path)
            logger.debug("Backup created at %s", self.backup_path)
        except OSError:
            logger.warning("Failed to create backup %s", self.backup_path, exc_info=True)

    def _write_primary(self) -> None:
        payload = json.dumps([_to_record(task) for task in self._tasks], indent=2, ensure_ascii=False)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.file_path.name}.", suffix=".tmp", dir=self.file_path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.file_path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            logger.exception("Error saving tasks to %s", self.file_path)
            raise StorageError("Failed to save tasks") from exc
        logger.debug("Tasks saved to %s", self.file_path)

    def _persist(self, previous: list[Task]) -> None:
        self._create_backup()
        try:
            self._write_primary()
        except StorageError:
            self._tasks = previous
            raise

    def _index_of(self, task_id: int) -> int | None:
        return next((i for i, t in enumerate(self._tasks) if t.id == task_id), None)

    def save(self, task: Task) -> Task:
        with self._lock:
            previous = list(self._tasks)
            if task.id is None:
                task.id = self._next_id
                self._next_id += 1
                self._tasks.append(task.copy())
                action = "created"
            else:
                index = self._index_of(task.id)
                if index is None:
                    raise NotFoundError(task.id)
                self._tasks[index] = task.copy()
                action = "updated"
            try:
                self._persist(previous)
            except StorageError:
                if action == "created":
                    task.id = None
                raise
            logger.info("Task %s with ID: %s", action, task.id)
            return task

    def _select(self, predicate) -> list[Task]:
        with self._lock:
            return [task.copy() for task in self._tasks if predicate(task)]

    def find_by_id(self, task_id: int) -> Optional[Task]:
        found = self._select(lambda t: t.id == task_id)
        return found[0] if found else None

    def find_all(self) -> list[Task]:
        return _newest_first(self._select(lambda t: True))

    def find_by_completed(self, completed: bool) -> list[Task]:
        return _newest_first(self._select(lambda t: t.completed == completed))

    def find_by_priority(self, priority: Priority) -> list[Task]:
        return _newest_first(self._select(lambda t: t.priority == priority))

    def find_overdue_tasks(self) -> list[Task]:
        current = datetime.now()
        return _by_due_date(self._select(lambda t: t.is_overdue(current)))

    def find_tasks_due_today(self) -> list[Task]:
        current = datetime.now()
        return _by_due_date(self._select(lambda t: t.is_due_today(current)))

    def search_tasks(self, term: str) -> list[Task]:
        needle = term.lower()
        return _newest_first(
            self._select(
                lambda t: needle in (t.title or "").lower() or needle in (t.description or "").lower()
            )
        )

    def delete_by_id(self, task_id: int) -> bool:
        with self._lock:
            index = self._index_of(task_id)
            if index is None:
                return False
            previous = list(self._tasks)
            del self._tasks[index]
            self._persist(previous)
        logger.info("Task deleted with ID: %s", task_id)
        return True

    def delete_completed_tasks(self) -> int:
        with self._lock:
            previous = list(self._tasks)
            self._tasks = [task for task in self._tasks if not task.completed]
            deleted = len(previous) - len(self._tasks)
            if deleted:
                self._persist(previous)
        if deleted:
            logger.info("Deleted %s completed tasks", deleted)
        return deleted

    def get_total_count(self) -> int:
        with self._lock:
            return len(self._tasks)

    def get_completed_count(self) -> int:
        with self._lock:
            return sum(1 for task in self._tasks if task.completed)

    def get_pending_count(self) -> int:
        with self._lock:
            return sum(1 for task in self._tasks if not task.completed)

    def close(self) -> None:
        """Nothing to release; state is flushed on every write."""
