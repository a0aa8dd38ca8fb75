"""
Database configuration and session management for the SQLite cache store.
"""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from ai_editor.core.config import get_cache_db_path

# Create SQLAlchemy base class for models
Base = declarative_base()

# Database engine (will be initialized on first use)
_engine: Optional[Engine] = None


def create_cache_engine(database_url: Optional[str] = None) -> Engine:
    """Create an engine for the cache database (defaults to data/cache.db)."""
    if database_url is None:
        database_url = f"sqlite:///{get_cache_db_path()}"
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False, "timeout": 30},
        echo=False,
    )


def get_engine() -> Engine:
    """Get or create the database engine."""
    global _engine
    if _engine is None:
        _engine = create_cache_engine()
    return _engine


def get_session_factory(engine: Optional[Engine] = None):
    """Return a session factory bound to the given (or default) engine."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine or get_engine(),
    )


def init_db(engine: Optional[Engine] = None) -> None:
    """
    Create all tables.
    Called on startup when the sqlite cache backend is selected.
    """
    # Import models so they are registered with Base
    from ai_editor.models import cached_response  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())


def drop_db(engine: Optional[Engine] = None) -> None:
    """
    Drop all database tables.
    Use with caution - only for testing purposes.
    """
    Base.metadata.drop_all(bind=engine or get_engine())
