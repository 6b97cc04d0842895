from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Optional

from .enums import Priority

DUE_SOON_WINDOW = timedelta(days=3)


def now() -> datetime:
    return datetime.now().replace(microsecond=0)


@dataclass(eq=False)
class Task:
    """A single entry of the task list.

    ``completed_date`` is set exactly when ``completed`` is true. Assigning
    ``completed`` (directly or through :meth:`set_completed`) stamps the
    completion time if it is unset and clears it when reopening.

    Equality is keyed on ``id`` alone. Unsaved tasks (``id is None``) only
    compare equal to themselves.
    """

    title: str
    description: Optional[str] = None
    priority: Priority = Priority.MEDIUM
    due_date: Optional[datetime] = None
    completed: bool = False
    id: int | None = None
    created_date: datetime = field(default_factory=now)
    completed_date: Optional[datetime] = None

    def __post_init__(self) -> None:
        self._sync_completed_date()

    def __setattr__(self, name: str, value: object) -> None:
        super().__setattr__(name, value)
        # completed_date is absent from __dict__ until __init__ reaches it
        if name == "completed" and "completed_date" in self.__dict__:
            self._sync_completed_date()

    def _sync_completed_date(self) -> None:
        if self.completed and self.completed_date is None:
            self.completed_date = now()
        elif not self.completed:
            self.completed_date = None

    def set_completed(self, completed: bool) -> None:
        self.completed = bool(completed)

    def is_overdue(self, current: datetime | None = None) -> bool:
        current = current or datetime.now()
        return self.due_date is not None and not self.completed and self.due_date < current

    def is_due_today(self, current: datetime | None = None) -> bool:
        if self.due_date is None:
            return False
        current = current or datetime.now()
        return self.due_date.date() == current.date()

    def is_due_soon(self, current: datetime | None = None) -> bool:
        if self.due_date is None:
            return False
        current = current or datetime.now()
        return current < self.due_date < current + DUE_SOON_WINDOW

    def copy(self) -> Task:
        return replace(self)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Task):
            return NotImplemented
        return self.id is not None and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return (
            f"Task(id={self.id}, title={self.title!r}, priority={self.priority.display_name}, "
            f"completed={self.completed}, due_date={self.due_date})"
        )


@dataclass(frozen=True)
class TaskStatistics:
    total: int
    completed: int
    pending: int
    overdue: int
    due_today: int

    @property
    def completion_percentage(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.completed / self.total * 100
