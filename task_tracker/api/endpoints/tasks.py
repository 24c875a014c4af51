from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from task_tracker.api.deps import get_identity, get_session
from task_tracker.schemas.task import (
    TaskCreate,
    TaskData,
    TaskListData,
    TaskListResponse,
    TaskMessageResponse,
    TaskRead,
    TaskResponse,
    TaskStatsResponse,
    TaskUpdate,
)
from task_tracker.schemas.user import Identity
from task_tracker.services.task_service import TaskService

router = APIRouter()


# Declared before "/{task_id}" so "stats" isn't taken for an id
@router.get("/stats", response_model=TaskStatsResponse)
def get_task_stats(
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    return TaskStatsResponse(data=TaskService.get_stats(session, identity))


@router.get("", response_model=TaskListResponse)
def list_user_tasks(
    task_status: Optional[str] = Query(default=None, alias="status"),
    priority: Optional[str] = None,
    category: Optional[str] = None,
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    order: Optional[str] = None,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    tasks = TaskService.list_tasks(
        session,
        identity,
        status=task_status,
        priority=priority,
        category=category,
        sort_by=sort_by,
        order=order,
    )
    return TaskListResponse(
        count=len(tasks),
        data=TaskListData(tasks=[TaskRead.model_validate(task) for task in tasks]),
    )


@router.post("", response_model=TaskMessageResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_create: TaskCreate,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    task = TaskService.create_task(session, identity, task_create)
    return TaskMessageResponse(
        message="Task created successfully",
        data=TaskData(task=TaskRead.model_validate(task)),
    )


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    task = TaskService.get_task(session, identity, task_id)
    return TaskResponse(data=TaskData(task=TaskRead.model_validate(task)))


@router.put("/{task_id}", response_model=TaskMessageResponse)
def update_task(
    task_id: str,
    task_update: TaskUpdate,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    task = TaskService.update_task(session, identity, task_id, task_update)
    return TaskMessageResponse(
        message="Task updated successfully",
        data=TaskData(task=TaskRead.model_validate(task)),
    )


@router.delete("/{task_id}", response_model=TaskMessageResponse)
def delete_task(
    task_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    task = TaskService.delete_task(session, identity, task_id)
    return TaskMessageResponse(
        message="Task deleted successfully",
        data=TaskData(task=TaskRead.model_validate(task)),
    )
