"""
SchoolMap Backend - Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       FastAPI session dependency.
How:   One async engine owns a bounded connection pool; every request gets its
       own AsyncSession that commits on success and rolls back on error.
Who:   Used by route handlers through Depends(get_db_session) and by services.

Connection Pooling:
    pool_size=10, max_overflow=0: at most ten connections. When the pool is
    exhausted, a request waits (suspends) for a connection to be returned
    instead of failing immediately.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy import insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


def _engine_options(database_url: str) -> Dict[str, Any]:
    """Pool options for the configured backend (SQLite manages its own pool)."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if make_url(database_url).get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# expire_on_commit=False: records stay readable after the service commits
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object, which Alembic reads for migrations and the
    test suite uses to create the schema.
    """
    pass


def upsert_statement(session: AsyncSession, table):
    """
    Return a dialect-specific INSERT construct supporting ON CONFLICT.

    PostgreSQL and SQLite both expose `on_conflict_do_nothing()`; the plain
    INSERT is returned for any other backend.
    """
    dialect = session.bind.dialect.name if session.bind is not None else ""
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    return insert(table)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits whatever the services left pending
        4. On error: rolls back and re-raises for the global handlers
        5. Always: closes the session (returns the connection to the pool)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def dispose_engine() -> None:
    """Close every pooled connection. Called from the shutdown hook."""
    await engine.dispose()
