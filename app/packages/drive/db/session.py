"""Database engine and session factory configuration."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.packages.drive.core.config import get_settings

settings = get_settings()


def build_engine(url: str, *, echo: bool = False):
    """Create an engine; SQLite needs ``check_same_thread`` disabled for the threadpool."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    # ``pool_pre_ping`` keeps the connection pool healthy across database restarts.
    return create_engine(url, pool_pre_ping=True, echo=echo, connect_args=connect_args)


engine = build_engine(settings.sql_database_url, echo=settings.database_echo)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
