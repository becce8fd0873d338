"""
core/config.py -- Taskboard settings, read from the environment and .env.

Every environment read goes through get_settings(); nothing else calls
os.getenv(). Field names map to env var names (secret_key -> SECRET_KEY,
password_min_length -> PASSWORD_MIN_LENGTH).

SECRET_KEY signs every bearer token, so it is the one setting with a startup
rule: missing is an error unless DEBUG=true (then a throwaway key is generated),
and anything shorter than 32 characters is rejected.

Layer rule: core/ may not import from api/, auth/, or tasks/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("taskboard.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'taskboard.db'}"
_MIN_SECRET_KEY_LENGTH = 32


class Settings(BaseSettings):
    """Settings() works without a .env file as long as DEBUG=true."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    debug: bool = False
    # "production" hides tracebacks from 500 responses.
    environment: str = "development"
    secret_key: str = ""  # "" means unset; resolved by _resolve_secret_key
    database_url: str = _DEFAULT_DB_URL

    token_expire_seconds: int = Field(default=30 * 24 * 3600, gt=0)
    # Single source for the password rule: registration, profile and user updates.
    password_min_length: int = Field(default=6, ge=1)

    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:5174",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]
    login_rate_limit: str = "10/minute"
    register_rate_limit: str = "5/minute"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @model_validator(mode="after")
    def _resolve_secret_key(self) -> "Settings":
        if not self.secret_key:
            if not self.debug:
                raise ValueError("SECRET_KEY is required unless DEBUG=true.")
            self.secret_key = secrets.token_hex(_MIN_SECRET_KEY_LENGTH)
            logger.warning("SECRET_KEY not set; generated one for this process. Tokens die with it.")
        if len(self.secret_key) < _MIN_SECRET_KEY_LENGTH:
            raise ValueError(f"SECRET_KEY must be at least {_MIN_SECRET_KEY_LENGTH} characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the cached Settings instance (get_settings.cache_clear() resets it)."""
    return Settings()
