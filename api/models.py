"""
API request and response models for Taskboard REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py and
tasks/models.py, which own the internal domain representation. Route handlers
map between the two via the from_* factory methods below.
"""

from typing import Annotated, Optional

from fastapi import Path
from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from auth.models import EMAIL_PATTERN, Identity, User
from tasks.models import TITLE_MAX_LENGTH, Task

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PASSWORD_MAX_LENGTH = 128
# Largest value a SQLite INTEGER primary key can hold.
MAX_RESOURCE_ID = 2**63 - 1

# Path parameter for /tasks/{task_id} and /users/{user_id}. Out-of-range ids
# are a 400 here instead of an overflow in the driver.
ResourceId = Annotated[int, Path(ge=1, le=MAX_RESOURCE_ID)]


# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/auth/register.

    Password length is enforced by AuthService from Settings.password_min_length.
    """

    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
    email: Annotated[str, StringConstraints(strip_whitespace=True, max_length=255, pattern=EMAIL_PATTERN)]
    # Not stripped: the string hashed here must be the one compared at login.
    password: str = Field(max_length=PASSWORD_MAX_LENGTH)


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login.

    No format rules beyond non-empty: a malformed email is just another
    unknown email and must get the same 401 as a wrong password.
    """

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH)


# ---------------------------------------------------------------------------
# Auth / users -- response models
# ---------------------------------------------------------------------------


class IdentityResponse(BaseModel):
    """The caller's identity: GET /api/auth/me and GET /api/auth/profile."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    role: str

    @classmethod
    def from_identity(cls, identity: Identity) -> "IdentityResponse":
        return cls(id=identity.id, name=identity.name, email=identity.email, role=identity.role)


class AuthResponse(IdentityResponse):
    """Register / login response: identity plus a fresh bearer token."""

    token: str

    @classmethod
    def from_login(cls, identity: Identity, token: str) -> "AuthResponse":
        return cls(id=identity.id, name=identity.name, email=identity.email, role=identity.role, token=token)


class UserResponse(BaseModel):
    """Public view of a stored user. Never includes the password hash."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    role: str
    created_at: str
    updated_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            created_at=user.created_at or "",
            updated_at=user.updated_at or "",
        )


class UserUpdate(BaseModel):
    """Request body for PUT /api/users/{id} and PUT /api/auth/profile.

    Every field is optional; omitted or empty fields are left unchanged.
    Email format and password length are checked by UserService so the
    404/403 checks run first. The password is not stripped.
    """

    name: Optional[Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]] = None
    email: Optional[Annotated[str, StringConstraints(strip_whitespace=True, max_length=255)]] = None
    password: Optional[str] = Field(default=None, max_length=PASSWORD_MAX_LENGTH)


class UserUpdateResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    data: UserResponse


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


class TaskCreate(BaseModel):
    """Request body for POST /api/tasks."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(min_length=1)
    completed: bool = False


class TaskUpdate(BaseModel):
    """Request body for PUT /api/tasks/{id}. Omitted fields are left unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, min_length=1)
    completed: Optional[bool] = None


class TaskResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    description: str
    completed: bool
    user_id: int
    created_at: str
    updated_at: str

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            completed=task.completed,
            user_id=task.user_id,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class TaskEnvelope(BaseModel):
    """Single-task envelope: create, get and update responses."""

    model_config = ConfigDict(frozen=True)

    success: bool = True
    data: TaskResponse


class TaskListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    count: int
    data: list[TaskResponse]


class TaskDeleteResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    message: str = "Task deleted successfully"
    data: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail
    timestamp: str
    path: str


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "OK"
    timestamp: str
    uptime: float
    environment: str
    database: str
