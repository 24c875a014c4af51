from sqlmodel import SQLModel, Field
from sqlalchemy import Index
from typing import Optional
from datetime import datetime, timezone
import uuid
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskStatus(str, Enum):
    pending = "Pending"
    in_progress = "In Progress"
    completed = "Completed"


class TaskPriority(str, Enum):
    high = "High"
    medium = "Medium"
    low = "Low"


DEFAULT_CATEGORY = "General"
TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


class Task(SQLModel, table=True):
    __tablename__ = "tasks"
    # Read-optimization only: every query is scoped by owner first
    __table_args__ = (
        Index("ix_tasks_user_status", "user_id", "status"),
        Index("ix_tasks_user_priority", "user_id", "priority"),
        Index("ix_tasks_user_due_date", "user_id", "due_date"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False)
    title: str = Field(max_length=TITLE_MAX_LENGTH, nullable=False)
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    category: str = Field(default=DEFAULT_CATEGORY, nullable=False)
    status: TaskStatus = Field(default=TaskStatus.pending)
    priority: TaskPriority = Field(default=TaskPriority.medium)
    due_date: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)
