"""
auth/dependencies.py -- FastAPI Depends() adapters for the auth core.

The actual work lives in auth/identity.py and auth/policy.py, which know
nothing about FastAPI. These functions only pull the Authorization header and
the UserStore off the request and hand them over.

get_current_user() raises AuthenticationError (401) if unauthenticated.
require_admin() wraps it and raises ForbiddenError (403) if not admin.
api/main.py renders both through the AppError exception handler.

Layer rule: this module may import from fastapi because it is part of the
FastAPI dependency injection system. Nothing else in auth/ may.
"""

from __future__ import annotations

from fastapi import Request

from auth.identity import resolve_identity
from auth.models import Identity
from auth.policy import ensure_admin


def get_current_user(request: Request) -> Identity:
    """Require authentication.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: Identity = Depends(get_current_user)): ...
    """
    return resolve_identity(request.headers.get("Authorization"), request.app.state.user_store)


def require_admin(request: Request) -> Identity:
    """Require admin role. 401 if unauthenticated, 403 if not admin."""
    identity = get_current_user(request)
    ensure_admin(identity)
    return identity
