from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the roster package importable when tests run from a source checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from roster.core import config as core_config  # noqa: E402
from roster.core.rate_limiter import limiter  # noqa: E402
from roster.db import session as db_session  # noqa: E402
from roster.db.create_tables import create_all, drop_all  # noqa: E402


def _reset_caches() -> None:
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def db_env(tmp_path, monkeypatch):
    """Point the account store at a temporary SQLite file and reset cached settings/engine."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("ADMIN_EMAILS", "admin@example.com")
    monkeypatch.delenv("SEED_FILE", raising=False)
    monkeypatch.delenv("APP_ENV", raising=False)
    _reset_caches()
    limiter.clear()

    engine = db_session.get_engine()
    drop_all()
    create_all()

    yield db_file

    drop_all()
    engine.dispose()
    _reset_caches()
    limiter.clear()
