"""
Task and task-permission models; comments and tags are stored inline as JSON.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (JSON, Column, DateTime, Float, ForeignKey, Integer,
                        String, Text, UniqueConstraint)

from docdesk.db.base import Base


class Task(Base):
    __tablename__ = "tasks"

    id: int = Column(Integer, primary_key=True, autoincrement=True)  # type: ignore[assignment]
    title: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    description: str = Column(Text, nullable=False, default="")  # type: ignore[assignment]
    type: str = Column(String(50), nullable=False, index=True)  # type: ignore[assignment]
    priority: str = Column(String(20), default="medium", index=True)  # type: ignore[assignment]
    status: str = Column(String(20), default="pending", index=True)  # type: ignore[assignment]
    assigned_to: str = Column(String(255), nullable=False, default="", index=True)  # type: ignore[assignment]
    assigned_by: str = Column(String(255), nullable=False, default="")  # type: ignore[assignment]
    document_id: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]
    customer_id: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]
    builder_id: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]
    due_date: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    completed_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    estimated_hours: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    actual_hours: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    tags: list | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    comments: list | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    created_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    updated_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]


class TaskPermission(Base):
    __tablename__ = "task_permissions"
    __table_args__ = (UniqueConstraint("user_id", "task_type", name="unique_user_task_type"),)

    id: int = Column(Integer, primary_key=True, autoincrement=True)  # type: ignore[assignment]
    user_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    task_type: str = Column(String(50), nullable=False, index=True)  # type: ignore[assignment]
    # {"can_view": ..., "can_edit": ...}
    permissions: dict = Column(JSON, nullable=False)  # type: ignore[assignment]
    restrictions: dict | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    created_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    updated_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
