"""
Database connection and session management for SQLAlchemy 2.0.
Configured for async operations; SQLite through aiosqlite by default.
"""
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from sqlalchemy import text
import logging
import os

from clinicsite.config import settings
from clinicsite.exceptions import SiteError

logger = logging.getLogger(__name__)

# Create declarative base for models
Base = declarative_base()

DATABASE_URL = settings.database_url

_engine_args = {
    "echo": False,  # Set to True for SQL query logging in development
}

if DATABASE_URL.startswith("sqlite"):
    # aiosqlite connections are bound to the event loop that opened them
    _engine_args["poolclass"] = NullPool
elif DATABASE_URL.startswith("postgresql"):
    _engine_args.update({
        "pool_size": 5,
        "max_overflow": 10,
        "pool_pre_ping": True,  # Verify connections before using (handles stale connections)
        "pool_recycle": 3600,
    })

engine = create_async_engine(DATABASE_URL, **_engine_args)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncSession:
    """
    FastAPI dependency for database sessions.
    Provides async database session with automatic commit/rollback.

    Usage:
        @router.get("/endpoint")
        async def my_endpoint(db: AsyncSession = Depends(get_db)):
            # Use db session here
            pass
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except SiteError:
            # Expected outcomes (404s, validation failures) are handled by the routes
            await session.rollback()
            raise
        except Exception as e:
            await session.rollback()
            logger.error(f"Database session error: {str(e)}", exc_info=True)
            raise
        finally:
            await session.close()


def _validate_database_url(url: str) -> tuple[bool, str]:
    """
    Validate database URL and provide diagnostic information.
    Returns (is_valid, diagnostic_message)
    """
    if not url:
        return False, "DATABASE_URL is empty"

    try:
        parsed = make_url(url)
    except ArgumentError as e:
        return False, f"Error parsing DATABASE_URL: {str(e)}"

    if parsed.get_backend_name() == "sqlite":
        return True, f"SQLite database at {parsed.database or ':memory:'}"

    if parsed.get_backend_name() == "postgresql":
        if not parsed.host:
            return False, "No hostname found in DATABASE_URL"
        return True, f"Hostname: {parsed.host}, Port: {parsed.port or 5432}, Database: {parsed.database or 'postgres'}"

    return False, f"Unsupported database backend: {parsed.get_backend_name()}"


def _ensure_sqlite_directory(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite" or not parsed.database or parsed.database == ":memory:":
        return
    directory = os.path.dirname(os.path.abspath(parsed.database))
    os.makedirs(directory, exist_ok=True)


async def init_db():
    """
    Initialize the database: create missing tables and verify the connection.
    Called from the startup event before default content is seeded.
    """
    is_valid, diagnostic = _validate_database_url(DATABASE_URL)
    if not is_valid:
        logger.error(f"Invalid DATABASE_URL: {diagnostic}")
        raise ValueError(f"Invalid DATABASE_URL: {diagnostic}")

    logger.info(f"Database URL validation: {diagnostic}")
    _ensure_sqlite_directory(DATABASE_URL)

    # Register models on Base.metadata before create_all
    from clinicsite import models  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            await conn.execute(text("SELECT 1"))
            logger.info("Database schema initialized successfully")
    except Exception as e:
        logger.error(
            f"Database initialization failed ({type(e).__name__}): {str(e)}\n"
            f"Diagnostic: {diagnostic}"
        )
        raise


async def close_db():
    """
    Close database connections.
    Can be used for shutdown events.
    """
    await engine.dispose()
    logger.info("Database connections closed")
