"""
api/routes/users.py -- User profile endpoints.

Routes:
  GET    /api/users          -- list users (requires auth)
  GET    /api/users/{id}     -- one user (requires auth)
  PUT    /api/users/{id}     -- update name/email/password (self or admin)
  DELETE /api/users/{id}     -- delete user and their tasks (admin only)

Ownership and role rules are enforced in UserService via auth/policy.py.
DELETE additionally uses require_admin so a non-admin is refused before the
target is even looked up.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.models import MessageResponse, ResourceId, UserResponse, UserUpdate, UserUpdateResponse
from auth.dependencies import get_current_user, require_admin
from auth.models import Identity
from auth.service import UserService

router = APIRouter()


@router.get("/users", response_model=list[UserResponse])
def list_users(request: Request, identity: Identity = Depends(get_current_user)) -> list[UserResponse]:
    user_service: UserService = request.app.state.user_service
    return [UserResponse.from_user(u) for u in user_service.list_users()]


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(request: Request, user_id: ResourceId, identity: Identity = Depends(get_current_user)) -> UserResponse:
    user_service: UserService = request.app.state.user_service
    return UserResponse.from_user(user_service.get_user(user_id))


@router.put("/users/{user_id}", response_model=UserUpdateResponse)
def update_user(
    request: Request,
    user_id: ResourceId,
    body: UserUpdate,
    identity: Identity = Depends(get_current_user),
) -> UserUpdateResponse:
    """Update a profile. Permitted for the user themself or any admin."""
    user_service: UserService = request.app.state.user_service
    updated = user_service.update_user(identity, user_id, body.name, body.email, body.password)
    return UserUpdateResponse(data=UserResponse.from_user(updated))


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    request: Request,
    user_id: ResourceId,
    identity: Identity = Depends(require_admin),
) -> MessageResponse:
    """Delete a user account. Admin only, including for one's own account."""
    user_service: UserService = request.app.state.user_service
    user_service.delete_user(identity, user_id)
    return MessageResponse(message="User removed")
