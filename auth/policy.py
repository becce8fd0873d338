"""
auth/policy.py -- Ownership and role rules.

Each check takes an already-resolved Identity and raises ForbiddenError when
the operation is not permitted. Callers check that the target exists first,
so a missing resource is a 404 even for its would-be owner.

Rules:
  Tasks:        owner only. No role bypass; admins cannot touch other users' tasks.
  User update:  self, or any admin.
  User delete:  admin only. A non-admin cannot delete even their own account.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.errors import ForbiddenError

if TYPE_CHECKING:
    from auth.models import Identity
    from tasks.models import Task


def ensure_task_owner(identity: Identity, task: Task, action: str = "access") -> None:
    if task.user_id != identity.id:
        raise ForbiddenError(f"Not authorized to {action} this task.")


def ensure_can_modify_user(identity: Identity, target_id: int) -> None:
    if identity.id != target_id and not identity.is_admin:
        raise ForbiddenError("Not authorized to update this user.")


def ensure_admin(identity: Identity) -> None:
    if not identity.is_admin:
        raise ForbiddenError("Admin access required.")


def ensure_can_delete_user(identity: Identity) -> None:
    ensure_admin(identity)
