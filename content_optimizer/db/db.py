"""
Database session management and initialization.

The engine is created lazily from ``settings.database_url`` so that importing
the package never touches the database; ``configure`` rebinds it.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from contextlib import contextmanager
from typing import Optional
import logging

from ..config import settings
from .models import Base

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None

# Session factory, bound on first use
SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def configure(database_url: Optional[str] = None) -> Engine:
    """
    Create the engine and bind the session factory.

    Args:
        database_url: Connection URL (default: ``settings.database_url``)
    """
    global _engine

    url = database_url or settings.database_url
    if _engine is not None:
        _engine.dispose()

    _engine = create_engine(url, echo=False, pool_pre_ping=True)
    SessionLocal.configure(bind=_engine)
    logger.debug(f"Database engine bound to {_engine.url!r}")

    return _engine


def get_engine() -> Engine:
    """Return the engine, creating it from settings if needed."""
    if _engine is None:
        return configure()
    return _engine


def init_db():
    """Initialize database schema."""
    logger.info("Initializing database schema...")
    Base.metadata.create_all(bind=get_engine())
    logger.info("Database schema created successfully")


@contextmanager
def get_session() -> Session:
    """
    Get database session context manager.

    Usage:
        with get_session() as session:
            session.query(...)
    """
    get_engine()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database error: {e}")
        raise
    finally:
        session.close()
