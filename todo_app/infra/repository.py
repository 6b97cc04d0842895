from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, time, timedelta
from typing import Optional, Protocol

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from todo_app.domain.entities import Task
from todo_app.domain.enums import Priority
from todo_app.domain.errors import NotFoundError, StorageError

from .db import Database
from .models import TaskModel

logger = logging.getLogger(__name__)


class TaskRepository(Protocol):
    """Persistence contract shared by the file and database stores.

    Tasks handed out are detached copies; changes reach the store only
    through :meth:`save`.
    """

    def save(self, task: Task) -> Task: ...

    def find_by_id(self, task_id: int) -> Optional[Task]: ...

    def find_all(self) -> list[Task]: ...

    def find_by_completed(self, completed: bool) -> list[Task]: ...

    def find_by_priority(self, priority: Priority) -> list[Task]: ...

    def find_overdue_tasks(self) -> list[Task]: ...

    def find_tasks_due_today(self) -> list[Task]: ...

    def search_tasks(self, term: str) -> list[Task]: ...

    def delete_by_id(self, task_id: int) -> bool: ...

    def delete_completed_tasks(self) -> int: ...

    def get_total_count(self) -> int: ...

    def get_completed_count(self) -> int: ...

    def get_pending_count(self) -> int: ...

    def close(self) -> None: ...


def _to_entity(model: TaskModel) -> Task:
    return Task(
        id=model.id,
        title=model.title,
        description=model.description,
        priority=Priority[model.priority],
        completed=bool(model.completed),
        due_date=model.due_date,
        created_date=model.created_date,
        completed_date=model.completed_date,
    )


def _apply(model: TaskModel, task: Task) -> None:
    model.title = task.title
    model.description = task.description
    model.priority = task.priority.name
    model.completed = task.completed
    model.due_date = task.due_date
    model.completed_date = task.completed_date


def _today_bounds() -> tuple[datetime, datetime]:
    start = datetime.combine(datetime.now().date(), time.min)
    return start, start + timedelta(days=1)


NEWEST_FIRST = (TaskModel.created_date.desc(), TaskModel.id.desc())


class SqlTaskRepository:
    def __init__(self, database: Database) -> None:
        self._db = database

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        try:
            with self._db.SessionLocal() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.exception("Database error while trying to %s", action)
            raise StorageError(f"Failed to {action}") from exc

    def _query(self, action: str, *criteria, order_by=NEWEST_FIRST) -> list[Task]:
        with self._session(action) as session:
            stmt = select(TaskModel).order_by(*order_by)
            if criteria:
                stmt = stmt.where(*criteria)
            return [_to_entity(task) for task in session.scalars(stmt)]

    def _count(self, *criteria) -> int:
        with self._session("count tasks") as session:
            stmt = select(func.count()).select_from(TaskModel)
            if criteria:
                stmt = stmt.where(*criteria)
            return session.scalar(stmt) or 0

    def save(self, task: Task) -> Task:
        if task.id is None:
            return self._insert(task)
        return self._update(task)

    def _insert(self, task: Task) -> Task:
        with self._session("insert task") as session:
            model = TaskModel(created_date=task.created_date)
            _apply(model, task)
            session.add(model)
            session.commit()
            session.refresh(model)
            task.id = model.id
        logger.info("Task created with ID: %s", task.id)
        return task

    def _update(self, task: Task) -> Task:
        with self._session("update task") as session:
            model = session.get(TaskModel, task.id)
            if model is None:
                raise NotFoundError(task.id)
            _apply(model, task)
            session.commit()
        logger.info("Task updated with ID: %s", task.id)
        return task

    def find_by_id(self, task_id: int) -> Optional[Task]:
        with self._session("find task") as session:
            model = session.get(TaskModel, task_id)
            return _to_entity(model) if model else None

    def find_all(self) -> list[Task]:
        return self._query("list tasks")

    def find_by_completed(self, completed: bool) -> list[Task]:
        return self._query("list tasks by state", TaskModel.completed.is_(completed))

    def find_by_priority(self, priority: Priority) -> list[Task]:
        return self._query("list tasks by priority", TaskModel.priority == priority.name)

    def find_overdue_tasks(self) -> list[Task]:
        return self._query(
            "list overdue tasks",
            TaskModel.due_date.is_not(None),
            TaskModel.due_date < datetime.now(),
            TaskModel.completed.is_(False),
            order_by=(TaskModel.due_date.asc(), TaskModel.id.asc()),
        )

    def find_tasks_due_today(self) -> list[Task]:
        start, end = _today_bounds()
        return self._query(
            "list tasks due today",
            TaskModel.due_date >= start,
            TaskModel.due_date < end,
            order_by=(TaskModel.due_date.asc(), TaskModel.id.asc()),
        )

    def search_tasks(self, term: str) -> list[Task]:
        return self._query(
            "search tasks",
            or_(
                TaskModel.title.icontains(term, autoescape=True),
                TaskModel.description.icontains(term, autoescape=True),
            ),
        )

    def delete_by_id(self, task_id: int) -> bool:
        with self._session("delete task") as session:
            result = session.execute(delete(TaskModel).where(TaskModel.id == task_id))
            session.commit()
        if result.rowcount:
            logger.info("Task deleted with ID: %s", task_id)
            return True
        return False

    def delete_completed_tasks(self) -> int:
        with self._session("delete completed tasks") as session:
            result = session.execute(delete(TaskModel).where(TaskModel.completed.is_(True)))
            session.commit()
        logger.info("Deleted %s completed tasks", result.rowcount)
        return result.rowcount

    def get_total_count(self) -> int:
        return self._count()

    def get_completed_count(self) -> int:
        return self._count(TaskModel.completed.is_(True))

    def get_pending_count(self) -> int:
        return self._count(TaskModel.completed.is_(False))

    def close(self) -> None:
        self._db.dispose()
