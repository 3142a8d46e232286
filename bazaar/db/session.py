"""
Database Session
Engine and session factory, created lazily from API settings.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from ..api.config import get_settings

logger = logging.getLogger(__name__)

_engine = None
_SessionLocal = None


def get_db_engine():
    """Get database engine (singleton)."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_engine(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=True,  # Verify connections before using
        )
        logger.info(f"Database engine created: {settings.database_url.split('@')[-1]}")
    return _engine


def get_session_factory():
    """Get database session factory (singleton)."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_db_engine())
        logger.info("Database session factory created")
    return _SessionLocal
