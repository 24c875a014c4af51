from typing import Any, List, Optional
from datetime import date, datetime, time, timezone
import uuid

from pydantic import AliasChoices, Field, field_validator, model_validator

from .base import APIModel, UTCDateTime, as_utc
from ..models.task import (
    DEFAULT_CATEGORY,
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    TaskPriority,
    TaskStatus,
)


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def parse_due_date(value: Any) -> Optional[datetime]:
    """Accept ISO-8601 dates and date-times; blank means "no due date"."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            # fromisoformat() does not take a trailing "Z" before Python 3.11
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise ValueError(f"Invalid date: {value!r}")
        # Offset-less input is read as UTC
        return as_utc(parsed)
    raise ValueError("Invalid date")


class TaskBase(APIModel):
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    category: Optional[str] = DEFAULT_CATEGORY
    priority: TaskPriority = TaskPriority.medium
    status: TaskStatus = TaskStatus.pending
    due_date: Optional[datetime] = None

    @field_validator("title", "description", "category", mode="before")
    @classmethod
    def strip_strings(cls, v):
        return _strip(v)

    @field_validator("category")
    @classmethod
    def default_category(cls, v: Optional[str]) -> str:
        return v or DEFAULT_CATEGORY

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_date(cls, v):
        return parse_due_date(v)


class TaskCreate(TaskBase):
    pass


class TaskUpdate(APIModel):
    """Partial update: only the keys present in the request body are applied."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    category: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None

    @field_validator("title", "description", "category", mode="before")
    @classmethod
    def strip_strings(cls, v):
        return _strip(v)

    @field_validator("category")
    @classmethod
    def default_category(cls, v: Optional[str]) -> str:
        return v or DEFAULT_CATEGORY

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_date(cls, v):
        return parse_due_date(v)

    @model_validator(mode="after")
    def reject_null_required(self):
        for name in ("title", "priority", "status"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class TaskRead(APIModel):
    id: uuid.UUID = Field(validation_alias=AliasChoices("id", "_id"), serialization_alias="_id")
    title: str
    description: Optional[str] = None
    category: str
    priority: TaskPriority
    status: TaskStatus
    due_date: Optional[UTCDateTime] = None
    user_id: uuid.UUID = Field(validation_alias=AliasChoices("user_id", "user"), serialization_alias="user")
    created_at: UTCDateTime
    updated_at: UTCDateTime


class TaskData(APIModel):
    task: TaskRead


class TaskResponse(APIModel):
    status: str = "success"
    data: TaskData


class TaskMessageResponse(TaskResponse):
    message: str


class TaskListData(APIModel):
    tasks: List[TaskRead]


class TaskListResponse(APIModel):
    status: str = "success"
    count: int
    data: TaskListData


# --- STATS SCHEMAS ---
class StatusCounts(APIModel):
    pending: int = 0
    in_progress: int = Field(default=0, alias="in-progress")
    completed: int = 0


class PriorityCounts(APIModel):
    high: int = 0
    medium: int = 0
    low: int = 0


class CategoryCount(APIModel):
    category: str
    count: int


class TaskStats(APIModel):
    total: int
    by_status: StatusCounts
    by_priority: PriorityCounts
    top_categories: List[CategoryCount]


class TaskStatsResponse(APIModel):
    status: str = "success"
    data: TaskStats
