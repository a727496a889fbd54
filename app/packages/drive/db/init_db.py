"""Database bootstrapping utilities."""

from __future__ import annotations

import logging

from app.packages.drive.db import session as db_session
from app.packages.drive.models.base import Base
from app.packages.drive.models.entry import FileSystemEntry  # noqa: F401 - ensure table creation

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Create all database tables if they do not exist."""
    try:
        Base.metadata.create_all(bind=db_session.engine)
    except Exception:  # pragma: no cover - surfaced at startup
        logger.exception("Failed to create tables during database initialization")
        raise
