from __future__ import annotations


class TaskError(Exception):
    """Base class for errors raised by the task storage and service layers."""


class ValidationError(TaskError, ValueError):
    """Caller supplied input the service refuses to store."""


class NotFoundError(TaskError, LookupError):
    def __init__(self, task_id: int | None) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class StorageError(TaskError):
    """The active backend could not read or write tasks."""
