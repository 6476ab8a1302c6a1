"""
Database engine and session management.

Sessions are handed to the reminder store explicitly; nothing below keeps a
module-level client that the scheduler reaches for on its own.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from finplan.core.config import settings
from finplan.db.base import Base

logger = logging.getLogger(__name__)


def build_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    url = url or settings.SQLALCHEMY_DATABASE_URI
    kwargs = {}
    if url.startswith("sqlite"):
        # SQLite connections are shared with Celery's worker threads
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_size=10,
            max_overflow=20,
            pool_recycle=300,      # Recycle connections every 5 minutes
            pool_pre_ping=True,    # Validate connections before use
        )
    return create_engine(
        url,
        echo=settings.SQLALCHEMY_ECHO if echo is None else echo,
        **kwargs,
    )


engine = build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(bind: Optional[Engine] = None) -> None:
    """Create missing tables for every model registered on Base."""
    # Import models so they register on Base.metadata
    from finplan.reminders import unified_models  # noqa: F401

    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    logger.info("Database tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))


@contextmanager
def get_db_session(factory: Optional[sessionmaker] = None) -> Generator[Session, None, None]:
    """
    Get a database session with proper cleanup using context manager.

    Usage:
        with get_db_session() as db:
            store = SqlAlchemyReminderStore(db)
    """
    db = (factory or SessionLocal)()
    try:
        yield db
        db.commit()  # Commit successful operations
    except Exception as e:
        db.rollback()  # Rollback on any exception
        logger.error(f"Database session error: {e}")
        raise
    finally:
        db.close()  # Always close the session
