"""Create (or drop) the account schema.

Run ``python -m roster.db.create_tables`` once against a fresh database; the
application also calls :func:`create_all` on startup.
"""
from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from .session import Base, get_engine
from . import models  # noqa: F401  # ensure models are imported for metadata

logger = logging.getLogger(__name__)


def create_all() -> None:
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    logger.debug("Account tables ensured on %s", engine.url.render_as_string(hide_password=True))


def drop_all() -> None:
    Base.metadata.drop_all(bind=get_engine())


if __name__ == "__main__":
    try:
        create_all()
        print("Account tables created successfully.")
    except SQLAlchemyError as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
