"""
auth/tokens.py -- JWT codec and password hashing.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry the
       user id as the subject claim plus iat/exp. verify_token() never raises
       for attacker-controlled input; it returns a TokenCheck that either holds
       the user id or names the failure (bad signature, expired, malformed).
       The identity layer collapses all three into one 401 so callers learn
       nothing about why a token was rejected.

  Passwords: bcrypt with a random per-user salt from bcrypt.gensalt().
       bcrypt.checkpw compares in constant time relative to the stored hash.
       The _DUMMY_HASH constant enables timing equalization in
       authenticate_user() so response time does not reveal whether an email
       is registered.

  SECRET_KEY: sourced from core.config.get_settings(), which validates it at
       startup (see core/config.py).

Layer rule: no imports from api/ or tasks/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING

import bcrypt
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JOSEError, JWTClaimsError

from core.config import get_settings

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("taskboard.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

# bcrypt only reads the first 72 bytes; bcrypt >= 5 rejects longer input.
_BCRYPT_MAX_BYTES = 72

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def _password_bytes(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password."""
    return bcrypt.hashpw(_password_bytes(plain), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A stored value that is not a valid bcrypt hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("taskboard_timing_dummy")


# ---------------------------------------------------------------------------
# JWT issue / verify
# ---------------------------------------------------------------------------


class TokenFailure(str, Enum):
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class TokenCheck:
    """Outcome of verify_token(): exactly one of user_id / failure is set."""

    user_id: int | None = None
    failure: TokenFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def issue_token(user_id: int, expire_seconds: int = 0, now: datetime | None = None) -> str:
    """Encode a signed JWT asserting "this bearer is user_id".

    Args:
        user_id:        Database ID of the user; stored as the "sub" claim.
        expire_seconds: Token lifetime in seconds. If 0 (default), uses
                        Settings.token_expire_seconds (30 days unless configured).
        now:            Issue time. Defaults to the current UTC time; tests pass
                        a past instant to mint already-expired tokens.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=duration),
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def verify_token(token: object) -> TokenCheck:
    """Check signature and expiry of a bearer token.

    Failure kinds:
      MALFORMED          -- not a string, not three base64url segments, claims
                            are not a JSON object, or "sub" is not a user id.
      INVALID_SIGNATURE  -- structurally sound but the signature (or alg) does
                            not match SECRET_KEY / HS256.
      EXPIRED            -- signature verifies but "exp" has elapsed.

    python-jose checks the signature before the claims, so a forged token that
    is also expired reports INVALID_SIGNATURE.
    """
    if not isinstance(token, str) or not token:
        return TokenCheck(failure=TokenFailure.MALFORMED)
    try:
        jwt.get_unverified_claims(token)
    except JOSEError:
        return TokenCheck(failure=TokenFailure.MALFORMED)

    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except ExpiredSignatureError:
        return TokenCheck(failure=TokenFailure.EXPIRED)
    except JWTClaimsError:
        return TokenCheck(failure=TokenFailure.MALFORMED)
    except JOSEError:
        return TokenCheck(failure=TokenFailure.INVALID_SIGNATURE)

    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub.isdigit() or "exp" not in payload:
        return TokenCheck(failure=TokenFailure.MALFORMED)
    return TokenCheck(user_id=int(sub))


# ---------------------------------------------------------------------------
# User authentication (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, email: str, password: str) -> User | None:
    """Authenticate an email/password login with timing equalization.

    Always runs bcrypt whether or not the user exists:
    - Unknown email: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real hash (same cost)

    Returns the User on success, None on any failure.
    """
    user = store.get_by_email(email)
    if user is None:
        # Do NOT return early before running bcrypt.
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user
