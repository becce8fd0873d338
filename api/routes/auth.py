"""
api/routes/auth.py -- Registration, login and current-identity endpoints.

Routes:
  POST /api/auth/register   -- create account; returns identity + token (201)
  POST /api/auth/login      -- password login; returns identity + token
  GET  /api/auth/me         -- current identity (requires auth)
  GET  /api/auth/profile    -- alias of /me (requires auth)
  PUT  /api/auth/profile    -- update own profile (requires auth)

Security:
  POST /login and POST /register are rate-limited per client IP.
  AuthService.login() uses authenticate_user(), which equalizes timing for
  unknown emails. Unknown email and wrong password share one 401 body.
  Cache-Control: no-store on responses that carry a token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter, login_limit, register_limit
from api.models import (
    AuthResponse,
    IdentityResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
    UserUpdate,
    UserUpdateResponse,
)
from auth.dependencies import get_current_user
from auth.models import Identity
from auth.service import AuthService, UserService

# Auth policy:
# - POST /api/auth/register:  public
# - POST /api/auth/login:     public
# - GET  /api/auth/me:        requires auth (get_current_user)
# - GET  /api/auth/profile:   requires auth (get_current_user)
# - PUT  /api/auth/profile:   requires auth; always targets the caller's own id
router = APIRouter()


def _token_response(status_code: int, identity: Identity, token: str) -> JSONResponse:
    resp = JSONResponse(status_code=status_code, content=AuthResponse.from_login(identity, token).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@limiter.limit(register_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create a user account with role "user" and return a bearer token."""
    auth_service: AuthService = request.app.state.auth_service
    identity, token = auth_service.register(body.name, body.email, body.password)
    return _token_response(201, identity, token)


@limiter.limit(login_limit)
@router.post("/auth/login", response_model=AuthResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password and return a fresh bearer token.

    A failed login raises InvalidCredentialsError; the exception handler adds
    Cache-Control: no-store to every 401.
    """
    auth_service: AuthService = request.app.state.auth_service
    identity, token = auth_service.login(body.email, body.password)
    return _token_response(200, identity, token)


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=IdentityResponse)
def me(identity: Identity = Depends(get_current_user)) -> IdentityResponse:
    """Return identity information for the currently authenticated user."""
    return IdentityResponse.from_identity(identity)


@router.get("/auth/profile", response_model=IdentityResponse)
def get_profile(identity: Identity = Depends(get_current_user)) -> IdentityResponse:
    return IdentityResponse.from_identity(identity)


@router.put("/auth/profile", response_model=UserUpdateResponse)
def update_profile(
    request: Request,
    body: UserUpdate,
    identity: Identity = Depends(get_current_user),
) -> UserUpdateResponse:
    """Update the caller's own name, email or password."""
    user_service: UserService = request.app.state.user_service
    updated = user_service.update_user(identity, identity.id, body.name, body.email, body.password)
    return UserUpdateResponse(data=UserResponse.from_user(updated))
