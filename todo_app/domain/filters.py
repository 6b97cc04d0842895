from __future__ import annotations

from enum import StrEnum


class TaskFilter(StrEnum):
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    HIGH_PRIORITY = "high_priority"
    URGENT = "urgent"


class TaskSortCriteria(StrEnum):
    TITLE = "title"
    PRIORITY = "priority"
    DUE_DATE = "due_date"
    CREATED_DATE = "created_date"
    COMPLETED_DATE = "completed_date"
