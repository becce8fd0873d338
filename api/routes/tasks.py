"""
api/routes/tasks.py -- Owner-scoped task CRUD.

Routes:
  POST   /api/tasks         -- create a task owned by the caller (201)
  GET    /api/tasks         -- list the caller's tasks, newest first
  GET    /api/tasks/{id}    -- one task (owner only)
  PUT    /api/tasks/{id}    -- update title/description/completed (owner only)
  DELETE /api/tasks/{id}    -- delete (owner only)

Every route requires authentication. Ownership is enforced by TaskService:
404 if the task does not exist, 403 if it belongs to someone else. Admins get
no override here.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.models import (
    ResourceId,
    TaskCreate,
    TaskDeleteResponse,
    TaskEnvelope,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
)
from auth.dependencies import get_current_user
from auth.models import Identity
from tasks.service import TaskService

router = APIRouter()


@router.post("/tasks", response_model=TaskEnvelope, status_code=201)
def create_task(
    request: Request,
    body: TaskCreate,
    identity: Identity = Depends(get_current_user),
) -> TaskEnvelope:
    task_service: TaskService = request.app.state.task_service
    task = task_service.create(identity, body.title, body.description, body.completed)
    return TaskEnvelope(data=TaskResponse.from_task(task))


@router.get("/tasks", response_model=TaskListResponse)
def list_tasks(request: Request, identity: Identity = Depends(get_current_user)) -> TaskListResponse:
    """Return only the caller's tasks, most recent first."""
    task_service: TaskService = request.app.state.task_service
    rows = [TaskResponse.from_task(t) for t in task_service.list_for(identity)]
    return TaskListResponse(count=len(rows), data=rows)


@router.get("/tasks/{task_id}", response_model=TaskEnvelope)
def get_task(request: Request, task_id: ResourceId, identity: Identity = Depends(get_current_user)) -> TaskEnvelope:
    task_service: TaskService = request.app.state.task_service
    return TaskEnvelope(data=TaskResponse.from_task(task_service.get(identity, task_id)))


@router.put("/tasks/{task_id}", response_model=TaskEnvelope)
def update_task(
    request: Request,
    task_id: ResourceId,
    body: TaskUpdate,
    identity: Identity = Depends(get_current_user),
) -> TaskEnvelope:
    task_service: TaskService = request.app.state.task_service
    task = task_service.update(identity, task_id, body.title, body.description, body.completed)
    return TaskEnvelope(data=TaskResponse.from_task(task))


@router.delete("/tasks/{task_id}", response_model=TaskDeleteResponse)
def delete_task(
    request: Request,
    task_id: ResourceId,
    identity: Identity = Depends(get_current_user),
) -> TaskDeleteResponse:
    task_service: TaskService = request.app.state.task_service
    task_service.delete(identity, task_id)
    return TaskDeleteResponse()
