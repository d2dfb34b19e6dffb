"""
Configuration helpers for the Roster backend.

Settings are read once from environment variables; tests call
``get_settings.cache_clear()`` after changing the environment.
"""

from dataclasses import dataclass
from functools import lru_cache
import os

DEV_JWT_SECRET = "dev-secret-change-me"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    jwt_secret: str
    jwt_algorithm: str
    access_token_ttl_seconds: int
    admin_emails: frozenset
    page_size: int
    seed_file: str
    log_level: str
    cors_origins: tuple


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _csv(value: str | None) -> list[str]:
        return [item.strip() for item in (value or "").split(",") if item.strip()]

    app_env = (os.getenv("APP_ENV") or "dev").lower()
    jwt_secret = os.getenv("JWT_SECRET") or DEV_JWT_SECRET
    if app_env == "prod" and jwt_secret == DEV_JWT_SECRET:
        raise RuntimeError("JWT_SECRET must be configured when APP_ENV=prod.")

    default_origins = "" if app_env == "prod" else "http://localhost:8000,http://127.0.0.1:8000"
    return Settings(
        app_env=app_env,
        database_url=(os.getenv("DATABASE_URL") or "sqlite:///./roster.db").strip(),
        jwt_secret=jwt_secret,
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        access_token_ttl_seconds=max(60, _int(os.getenv("ACCESS_TOKEN_TTL_SECONDS", "3600"), 3600)),
        admin_emails=frozenset(e.lower() for e in _csv(os.getenv("ADMIN_EMAILS"))),
        page_size=min(100, max(1, _int(os.getenv("PAGE_SIZE", "20"), 20))),
        seed_file=(os.getenv("SEED_FILE") or "").strip(),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        cors_origins=tuple(_csv(os.getenv("CORS_ORIGINS", default_origins))),
    )
