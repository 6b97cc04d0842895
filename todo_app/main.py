from __future__ import annotations

from todo_app.config import load_settings
from todo_app.infra.logging import setup_logging
from todo_app.services.task_service import TaskService


def main() -> None:
    settings = load_settings()
    setup_logging(settings)

    service = TaskService.from_settings(settings)
    try:
        stats = service.get_statistics()
        storage = "database" if service.using_database_storage else "file"
        print(
            f"{stats.total} tasks ({stats.completed} completed, {stats.pending} pending, "
            f"{stats.overdue} overdue, {stats.due_today} due today) "
            f"{stats.completion_percentage:.1f}% done [{storage} storage]"
        )
    finally:
        service.close()


if __name__ == "__main__":
    main()
