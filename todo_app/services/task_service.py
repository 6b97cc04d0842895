from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from todo_app.config import Settings
from todo_app.domain.entities import Task, TaskStatistics
from todo_app.domain.enums import Priority
from todo_app.domain.errors import NotFoundError, ValidationError
from todo_app.domain.filters import TaskFilter, TaskSortCriteria
from todo_app.infra.backend import select_repository
from todo_app.infra.repository import TaskRepository

logger = logging.getLogger(__name__)


def _nulls_last(getter: Callable[[Task], object]) -> Callable[[Task], tuple]:
    def key(task: Task) -> tuple:
        value = getter(task)
        return (value is None, value if value is not None else 0)

    return key


SORT_KEYS: dict[TaskSortCriteria, Callable[[Task], object]] = {
    TaskSortCriteria.TITLE: _nulls_last(lambda t: t.title.casefold() if t.title is not None else None),
    TaskSortCriteria.PRIORITY: lambda t: t.priority.level,
    TaskSortCriteria.DUE_DATE: _nulls_last(lambda t: t.due_date),
    TaskSortCriteria.CREATED_DATE: lambda t: t.created_date,
    TaskSortCriteria.COMPLETED_DATE: _nulls_last(lambda t: t.completed_date),
}


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class TaskService:
    def __init__(self, repo: TaskRepository, using_database_storage: bool = False) -> None:
        self._repo = repo
        self._using_database_storage = using_database_storage

    @classmethod
    def from_settings(cls, settings: Settings) -> TaskService:
        repo, using_database = select_repository(settings)
        return cls(repo, using_database)

    @property
    def using_database_storage(self) -> bool:
        return self._using_database_storage

    def create_task(
        self,
        title: str | None,
        description: str | None = None,
        priority: Priority | None = None,
        due_date: Optional[datetime] = None,
    ) -> Task:
        if _is_blank(title):
            raise ValidationError("Task title cannot be empty")

        task = Task(
            title=title.strip(),
            description=description.strip() if description is not None else None,
            priority=priority or Priority.MEDIUM,
            due_date=due_date,
        )
        return self._repo.save(task)

    def update_task(self, task: Task | None) -> Task:
        if task is None or task.id is None:
            raise ValidationError("Invalid task for update")
        if _is_blank(task.title):
            raise ValidationError("Task title cannot be empty")
        return self._repo.save(task)

    def get_task_by_id(self, task_id: int) -> Task | None:
        return self._repo.find_by_id(task_id)

    def get_all_tasks(self) -> list[Task]:
        return self._repo.find_all()

    def mark_task_completed(self, task_id: int) -> Task:
        return self._set_completed(task_id, True)

    def mark_task_pending(self, task_id: int) -> Task:
        return self._set_completed(task_id, False)

    def _set_completed(self, task_id: int, completed: bool) -> Task:
        task = self._repo.find_by_id(task_id)
        if task is None:
            raise NotFoundError(task_id)
        task.set_completed(completed)
        return self._repo.save(task)

    def delete_task(self, task_id: int) -> bool:
        return self._repo.delete_by_id(task_id)

    def delete_all_completed_tasks(self) -> int:
        return self._repo.delete_completed_tasks()

    def search_tasks(self, term: str | None) -> list[Task]:
        if _is_blank(term):
            return self._repo.find_all()
        return self._repo.search_tasks(term.strip())

    def get_filtered_tasks(self, task_filter: TaskFilter) -> list[Task]:
        if task_filter == TaskFilter.PENDING:
            return self._repo.find_by_completed(False)
        if task_filter == TaskFilter.COMPLETED:
            return self._repo.find_by_completed(True)
        if task_filter == TaskFilter.OVERDUE:
            return self._repo.find_overdue_tasks()
        if task_filter == TaskFilter.DUE_TODAY:
            return self._repo.find_tasks_due_today()
        if task_filter == TaskFilter.HIGH_PRIORITY:
            return self._repo.find_by_priority(Priority.HIGH)
        if task_filter == TaskFilter.URGENT:
            return self._repo.find_by_priority(Priority.URGENT)
        return self._repo.find_all()

    def get_tasks_sorted_by(self, criteria: TaskSortCriteria, ascending: bool = True) -> list[Task]:
        key = SORT_KEYS.get(criteria, SORT_KEYS[TaskSortCriteria.CREATED_DATE])
        return sorted(self._repo.find_all(), key=key, reverse=not ascending)

    def get_statistics(self) -> TaskStatistics:
        return TaskStatistics(
            total=self._repo.get_total_count(),
            completed=self._repo.get_completed_count(),
            pending=self._repo.get_pending_count(),
            overdue=len(self._repo.find_overdue_tasks()),
            due_today=len(self._repo.find_tasks_due_today()),
        )

    def close(self) -> None:
        self._repo.close()
        logger.info("Task service closed")
