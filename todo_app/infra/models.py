from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, Column, DateTime, Integer, String, Text, func

from todo_app.domain.entities import now

from .db import Base


class TaskModel(Base):
    __tablename__ = "tasks"

    # BIGINT on servers, INTEGER on SQLite so the rowid autoincrements
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(String(20), nullable=False, default="MEDIUM", index=True)
    completed = Column(Boolean, nullable=False, default=False, index=True)
    due_date = Column(DateTime, nullable=True, index=True)
    created_date = Column(DateTime, nullable=False, default=now, server_default=func.now(), index=True)
    completed_date = Column(DateTime, nullable=True)
