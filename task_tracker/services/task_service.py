"""
Task service module
Handles business logic for task CRUD, filtering and statistics.

Every query is scoped by the caller's identity: a task owned by someone else
behaves exactly like a task that does not exist.
"""
import logging
from typing import Any, List, Mapping, Optional, Union
import uuid

from sqlmodel import Session, func, select

from ..core.exceptions import NotFoundError, ValidationError
from ..models.task import Task, TaskPriority, TaskStatus, utcnow
from ..schemas.task import (
    CategoryCount,
    PriorityCounts,
    StatusCounts,
    TaskCreate,
    TaskStats,
    TaskUpdate,
)
from ..schemas.user import Identity
from ._validation import coerce_payload

logger = logging.getLogger(__name__)

TOP_CATEGORIES_LIMIT = 5

# Sortable fields, by wire name and by attribute name
SORT_FIELDS = {
    "title": Task.title,
    "description": Task.description,
    "category": Task.category,
    "priority": Task.priority,
    "status": Task.status,
    "dueDate": Task.due_date,
    "due_date": Task.due_date,
    "createdAt": Task.created_at,
    "created_at": Task.created_at,
    "updatedAt": Task.updated_at,
    "updated_at": Task.updated_at,
}


def status_key(status: TaskStatus) -> str:
    """"In Progress" -> "in-progress"."""
    return status.value.lower().replace(" ", "-")


def _parse_task_id(task_id: Union[str, uuid.UUID]) -> Optional[uuid.UUID]:
    if isinstance(task_id, uuid.UUID):
        return task_id
    try:
        return uuid.UUID(str(task_id))
    except ValueError:
        return None


class TaskService:
    """Service class for task operations"""

    @staticmethod
    def list_tasks(
        db: Session,
        identity: Identity,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        category: Optional[str] = None,
        sort_by: Optional[str] = None,
        order: Optional[str] = None,
    ) -> List[Task]:
        """
        Get the caller's tasks matching every supplied filter.

        Args:
            db: Database session
            identity: Authenticated caller
            status: Exact status value, e.g. "In Progress"
            priority: Exact priority value, e.g. "High"
            category: Exact category name
            sort_by: Field to sort by; defaults to newest first
            order: "desc" for descending, anything else ascending

        Returns:
            List of Task objects, possibly empty

        Raises:
            ValidationError: If sort_by names a field that can't be sorted on
        """
        statement = select(Task).where(Task.user_id == identity.user_id)

        if status:
            try:
                statement = statement.where(Task.status == TaskStatus(status))
            except ValueError:
                # Not a status any task can have
                return []
        if priority:
            try:
                statement = statement.where(Task.priority == TaskPriority(priority))
            except ValueError:
                return []
        if category:
            statement = statement.where(Task.category == category)

        if sort_by:
            column = SORT_FIELDS.get(sort_by)
            if column is None:
                raise ValidationError(
                    f"Cannot sort by '{sort_by}'",
                    errors=[{"field": "sortBy", "message": f"Unknown field '{sort_by}'"}],
                )
            statement = statement.order_by(column.desc() if order == "desc" else column.asc())
        else:
            statement = statement.order_by(Task.created_at.desc())

        return list(db.exec(statement).all())

    @staticmethod
    def get_task(db: Session, identity: Identity, task_id: Union[str, uuid.UUID]) -> Task:
        """
        Raises:
            NotFoundError: If no task with this id is owned by the caller
        """
        parsed_id = _parse_task_id(task_id)
        task = None
        if parsed_id is not None:
            task = db.exec(
                select(Task).where(Task.id == parsed_id, Task.user_id == identity.user_id)
            ).first()
        if not task:
            raise NotFoundError("Task not found")
        return task

    @staticmethod
    def create_task(
        db: Session,
        identity: Identity,
        payload: Union[TaskCreate, Mapping[str, Any]],
    ) -> Task:
        task_create = coerce_payload(TaskCreate, payload)

        # Ownership always comes from the token, never from the body
        db_task = Task(**task_create.model_dump(), user_id=identity.user_id)
        db.add(db_task)
        db.commit()
        db.refresh(db_task)

        logger.info("Created task %s for user %s", db_task.id, identity.user_id)
        return db_task

    @staticmethod
    def update_task(
        db: Session,
        identity: Identity,
        task_id: Union[str, uuid.UUID],
        payload: Union[TaskUpdate, Mapping[str, Any]],
    ) -> Task:
        """Apply only the fields present in ``payload``; absent fields are left alone."""
        task = TaskService.get_task(db, identity, task_id)
        task_update = coerce_payload(TaskUpdate, payload)

        for key, value in task_update.model_dump(exclude_unset=True).items():
            setattr(task, key, value)

        task.updated_at = utcnow()
        db.add(task)
        db.commit()
        db.refresh(task)
        return task

    @staticmethod
    def delete_task(db: Session, identity: Identity, task_id: Union[str, uuid.UUID]) -> Task:
        """Delete the task and return a detached copy of its last state."""
        task = TaskService.get_task(db, identity, task_id)
        snapshot = Task(**task.model_dump())

        db.delete(task)
        db.commit()

        logger.info("Deleted task %s for user %s", snapshot.id, identity.user_id)
        return snapshot

    @staticmethod
    def get_stats(db: Session, identity: Identity) -> TaskStats:
        """
        Aggregate the caller's tasks.

        Status, priority and category counts are independent group-and-count
        queries. Categories with equal counts come back in whatever order the
        database groups them.
        """
        owned = Task.user_id == identity.user_id

        total = db.exec(select(func.count(Task.id)).where(owned)).one()

        status_rows = db.exec(
            select(Task.status, func.count(Task.id)).where(owned).group_by(Task.status)
        ).all()
        by_status = {status_key(status): 0 for status in TaskStatus}
        for status, count in status_rows:
            by_status[status_key(TaskStatus(status))] = count

        priority_rows = db.exec(
            select(Task.priority, func.count(Task.id)).where(owned).group_by(Task.priority)
        ).all()
        by_priority = {priority.value.lower(): 0 for priority in TaskPriority}
        for priority, count in priority_rows:
            by_priority[TaskPriority(priority).value.lower()] = count

        category_count = func.count(Task.id).label("count")
        category_rows = db.exec(
            select(Task.category, category_count)
            .where(owned)
            .group_by(Task.category)
            .order_by(category_count.desc())
            .limit(TOP_CATEGORIES_LIMIT)
        ).all()

        return TaskStats(
            total=total,
            by_status=StatusCounts.model_validate(by_status),
            by_priority=PriorityCounts.model_validate(by_priority),
            top_categories=[
                CategoryCount(category=category, count=count) for category, count in category_rows
            ],
        )
