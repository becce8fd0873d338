"""
auth/service.py -- Registration, login and user profile management.

AuthService moves a caller from anonymous to token-holding:
  register(name, email, password) -> (Identity, token)
  login(email, password)          -> (Identity, token)

UserService owns profile reads/updates and admin deletion.

Security:
  login() goes through authenticate_user(), which equalizes bcrypt timing for
  unknown emails. Unknown email and wrong password raise the same
  InvalidCredentialsError -- never split them.

  Email uniqueness is checked up front for a clean error, and the UNIQUE
  constraint is still caught (IntegrityError) for the concurrent-request race.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from auth.identity import to_identity
from auth.models import EMAIL_PATTERN, ROLE_USER, Identity, User
from auth.policy import ensure_can_delete_user, ensure_can_modify_user
from auth.store import UserStore
from auth.tokens import authenticate_user, hash_password, issue_token
from core.errors import DuplicateEmailError, InvalidCredentialsError, NotFoundError, ValidationError

if TYPE_CHECKING:
    from tasks.store import TaskStore

logger = logging.getLogger("taskboard.auth")

DEFAULT_PASSWORD_MIN_LENGTH = 6

_EMAIL_RE = re.compile(EMAIL_PATTERN)


def _require(value: str | None, label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{label} is required.")
    return value


def _check_email(email: str) -> str:
    if not _EMAIL_RE.match(email):
        raise ValidationError("Please provide a valid email.")
    return email


def _check_password(password: str, min_length: int) -> str:
    """Length only. Passwords are used exactly as given, whitespace included."""
    if len(password) < min_length:
        raise ValidationError(f"Password must be at least {min_length} characters.")
    return password


class AuthService:
    def __init__(self, users: UserStore, password_min_length: int = DEFAULT_PASSWORD_MIN_LENGTH) -> None:
        self.users = users
        self.password_min_length = password_min_length

    def register(self, name: str, email: str, password: str) -> tuple[Identity, str]:
        name = _require(name, "Name")
        email = _check_email(_require(email, "Email"))
        _check_password(password or "", self.password_min_length)
        if self.users.get_by_email(email) is not None:
            raise DuplicateEmailError("User already exists.")

        user = User(name=name, email=email, hashed_password=hash_password(password), role=ROLE_USER)
        try:
            user_id = self.users.create_user(user)
        except IntegrityError as exc:
            raise DuplicateEmailError("User already exists.") from exc

        created = self.users.get_by_id(user_id)
        logger.info("Registered user id=%s", user_id)
        return to_identity(created), issue_token(user_id)

    def login(self, email: str, password: str) -> tuple[Identity, str]:
        user = authenticate_user(self.users, email or "", password or "")
        if user is None:
            logger.info("Failed login attempt")
            raise InvalidCredentialsError()
        return to_identity(user), issue_token(user.id)


class UserService:
    def __init__(
        self,
        users: UserStore,
        tasks: TaskStore | None = None,
        password_min_length: int = DEFAULT_PASSWORD_MIN_LENGTH,
    ) -> None:
        self.users = users
        self.tasks = tasks
        self.password_min_length = password_min_length

    def list_users(self) -> list[User]:
        return self.users.list_users()

    def get_user(self, user_id: int) -> User:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found.")
        return user

    def update_user(
        self,
        identity: Identity,
        user_id: int,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> User:
        """Update a profile. Order: 404, then 403, then field validation.

        Empty strings are treated like omitted fields.
        """
        target = self.get_user(user_id)
        ensure_can_modify_user(identity, target.id)

        updates: dict = {}
        if name and name.strip():
            updates["name"] = name.strip()
        if email and email.strip():
            email = _check_email(email.strip())
            existing = self.users.get_by_email(email)
            if existing is not None and existing.id != target.id:
                raise DuplicateEmailError("Email is already in use.")
            updates["email"] = email
        if password:
            updates["hashed_password"] = hash_password(_check_password(password, self.password_min_length))

        if updates:
            try:
                self.users.update_user(target.id, **updates)
            except IntegrityError as exc:
                raise DuplicateEmailError("Email is already in use.") from exc
        return self.users.get_by_id(target.id)

    def delete_user(self, identity: Identity, user_id: int) -> None:
        """Admin-only delete. The role check runs before the existence check."""
        ensure_can_delete_user(identity)
        target = self.get_user(user_id)
        if self.tasks is not None:
            removed = self.tasks.delete_for_owner(target.id)
            logger.info("Removed %d tasks owned by user id=%s", removed, target.id)
        self.users.delete_user(target.id)
        logger.info("User id=%s deleted by admin id=%s", target.id, identity.id)
