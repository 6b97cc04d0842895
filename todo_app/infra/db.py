from __future__ import annotations

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from todo_app.config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_url(settings: Settings) -> URL:
    if not settings.database_url:
        raise ValueError("database_url is not configured")
    url = make_url(settings.database_url)
    if settings.database_driver:
        url = url.set(drivername=settings.database_driver)
    if settings.database_username:
        url = url.set(username=settings.database_username)
    if settings.database_password:
        url = url.set(password=settings.database_password)
    return url


class Database:
    """Engine and session factory shared by every database-backed operation.

    Connections come from the engine's pool; ``pool_pre_ping`` replaces a
    connection the server has closed before it is handed out.
    """

    def __init__(self, settings: Settings) -> None:
        self.url = build_url(settings)
        self.engine: Engine = create_engine(self.url, pool_pre_ping=True)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)

    def init_db(self) -> None:
        from . import models  # noqa: F401  registers the tasks table

        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        Base.metadata.create_all(self.engine)
        logger.info("Database table 'tasks' ready at %s", self.url.render_as_string(hide_password=True))

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database connections closed")
