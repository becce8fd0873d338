"""
auth/identity.py -- Resolve a bearer token into the caller's Identity.

This is the request-facing half of the auth core. It depends only on the raw
Authorization header value and the UserStore, never on a web framework's
request type; auth/dependencies.py is the FastAPI adapter.

Failure semantics:
  - No header, or not "Bearer <token>"          -> AuthenticationError (401)
  - Token fails verification (any kind)          -> AuthenticationError (401)
  - Token valid but the user no longer exists    -> AuthenticationError (401)

The last two share one message. Whether a token was forged, expired,
truncated or belongs to a deleted account is logged server-side only.
"""

from __future__ import annotations

import logging

from auth.models import Identity, User
from auth.store import UserStore
from auth.tokens import verify_token
from core.errors import AuthenticationError

logger = logging.getLogger("taskboard.auth")

_MISSING_TOKEN = "Not authorized, no token."
_REJECTED_TOKEN = "Not authorized, token failed."


def extract_bearer_token(header: str | None) -> str | None:
    """Return the token from an "Authorization: Bearer <token>" value, else None."""
    if not header:
        return None
    parts = header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def to_identity(user: User) -> Identity:
    return Identity(id=user.id, name=user.name, email=user.email, role=user.role)


def resolve_identity(authorization: str | None, store: UserStore) -> Identity:
    """Authenticate a request from its Authorization header value.

    Side effects: one read lookup against the user store.
    """
    token = extract_bearer_token(authorization)
    if token is None:
        raise AuthenticationError(_MISSING_TOKEN)

    check = verify_token(token)
    if not check.ok:
        logger.info("Rejected bearer token (%s)", check.failure.value)
        raise AuthenticationError(_REJECTED_TOKEN)

    user = store.get_by_id(check.user_id)
    if user is None:
        logger.info("Rejected bearer token for deleted user id=%s", check.user_id)
        raise AuthenticationError(_REJECTED_TOKEN)
    return to_identity(user)
