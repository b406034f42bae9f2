"""
Database configuration and session management
Handles engine creation, connection pooling and retry logic
"""

import logging
import time
from contextlib import contextmanager
from functools import wraps
from typing import Generator, Optional

import sentry_sdk
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DisconnectionError, OperationalError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM models"""


def create_db_engine(database_url: Optional[str] = None, **kwargs) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL

    SQLite gets ``check_same_thread=False`` because request handlers run in a
    thread pool; server databases get the configured pool settings.
    """
    url = database_url or settings.get_database_url()
    options = {"echo": settings.DEBUG, "future": True}

    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
        )

    options.update(kwargs)
    return create_engine(url, **options)


# Create engine with configured settings
engine = create_db_engine()

# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def init_db(bind: Optional[Engine] = None) -> None:
    """Initialize database, create tables if they don't exist"""
    bind = bind or engine
    try:
        # Import all models here to ensure they're registered
        from app import models  # noqa: F401

        # Create all tables
        Base.metadata.create_all(bind=bind)
        logger.info("Database tables created successfully")

        # Test connection
        with bind.connect() as conn:
            if conn.execute(text("SELECT 1")).scalar() == 1:
                logger.info("Database connection successful")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        if settings.SENTRY_DSN:
            sentry_sdk.capture_exception(e)
        raise


@contextmanager
def get_db_session(session_factory: sessionmaker = SessionLocal) -> Generator[Session, None, None]:
    """
    Context manager for database session
    Commits on success, rolls back on any error
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database session error: {e}")
        raise
    finally:
        session.close()


def check_connection(bind: Optional[Engine] = None) -> dict:
    """Check database connection health"""
    bind = bind or engine
    start_time = time.time()
    try:
        with bind.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "healthy", "response_time": round(time.time() - start_time, 4)}
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "status": "unhealthy",
            "error": str(e),
            "response_time": round(time.time() - start_time, 4),
        }


# Retry decorator for database operations
def with_db_retry(max_attempts: int = 3, delay: float = 0.2):
    """
    Decorator to retry database operations on transient connection failures

    Args:
        max_attempts: Maximum number of attempts
        delay: Base delay between retries in seconds
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except (OperationalError, DisconnectionError) as e:
                    if attempt == max_attempts - 1:
                        logger.error(
                            f"Database operation failed after {max_attempts} attempts: {e}"
                        )
                        raise
                    logger.warning(
                        f"Database operation failed (attempt {attempt + 1}/{max_attempts}): {e}"
                    )
                    time.sleep(delay * (attempt + 1))

        return wrapper

    return decorator
