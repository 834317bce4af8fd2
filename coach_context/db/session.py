from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from coach_context.config.settings import settings

# Lazy initialization to avoid import-time database connections
_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Get or create the database engine (lazy initialization)."""
    global _engine
    if _engine is None:
        logger.info(f"Initializing database engine: {settings.database_url}")

        connect_args = {}
        if "sqlite" in settings.database_url.lower():
            connect_args = {"check_same_thread": False}

        _engine = create_engine(
            settings.database_url,
            connect_args=connect_args,
            echo=False,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        logger.info("Database engine initialized")
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the session factory (lazy initialization)."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
        logger.info("Database session factory initialized")
    return _SessionLocal


@contextmanager
def get_session(factory: sessionmaker[Session] | None = None) -> Generator[Session, None, None]:
    """Read-only session context manager.

    Never commits. Any exception is logged, the session is rolled back and the
    exception is re-raised to the caller.
    """
    session = (factory or get_session_factory())()
    try:
        yield session
    except Exception as e:
        logger.error(f"Database error, rolling back session: {e}")
        session.rollback()
        raise
    finally:
        session.close()
