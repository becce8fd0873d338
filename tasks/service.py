"""
tasks/service.py -- Owner-scoped task operations.

Every method takes the caller's Identity (already resolved by the auth core)
and plain field values, and raises core.errors on failure. Evaluation order for
single-task operations is existence (404) before ownership (403).
"""

from __future__ import annotations

import logging

from auth.models import Identity
from auth.policy import ensure_task_owner
from core.errors import NotFoundError, ValidationError
from tasks.models import TITLE_MAX_LENGTH, Task
from tasks.store import TaskStore

logger = logging.getLogger("taskboard.tasks")


def _clean_title(title: str | None) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title is required.")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title cannot exceed {TITLE_MAX_LENGTH} characters.")
    return title


def _clean_description(description: str | None) -> str:
    description = (description or "").strip()
    if not description:
        raise ValidationError("Description is required.")
    return description


class TaskService:
    def __init__(self, store: TaskStore) -> None:
        self.store = store

    def create(self, identity: Identity, title: str, description: str, completed: bool = False) -> Task:
        """Create a task owned by the caller."""
        task = Task(
            title=_clean_title(title),
            description=_clean_description(description),
            completed=bool(completed),
            user_id=identity.id,
        )
        task_id = self.store.create_task(task)
        logger.info("Task %s created by user %s", task_id, identity.id)
        return self.store.get_task(task_id)

    def list_for(self, identity: Identity) -> list[Task]:
        return self.store.list_for_owner(identity.id)

    def get(self, identity: Identity, task_id: int, action: str = "access") -> Task:
        task = self.store.get_task(task_id)
        if task is None:
            raise NotFoundError("Task not found.")
        ensure_task_owner(identity, task, action)
        return task

    def update(
        self,
        identity: Identity,
        task_id: int,
        title: str | None = None,
        description: str | None = None,
        completed: bool | None = None,
    ) -> Task:
        """Apply the provided fields; None means "leave unchanged"."""
        self.get(identity, task_id, action="update")
        updates: dict = {}
        if title is not None:
            updates["title"] = _clean_title(title)
        if description is not None:
            updates["description"] = _clean_description(description)
        if completed is not None:
            updates["completed"] = completed
        if updates:
            self.store.update_task(task_id, **updates)
        return self.store.get_task(task_id)

    def delete(self, identity: Identity, task_id: int) -> None:
        self.get(identity, task_id, action="delete")
        self.store.delete_task(task_id)
        logger.info("Task %s deleted by user %s", task_id, identity.id)
