"""Async database engine and session management.

This module provides the async SQLAlchemy 2.0 engine configuration and
session factory. The worker creates one engine at startup, passes the
session factory to the services that need it, and disposes the engine on
shutdown. Nothing here is created at import time.

Usage:
    from video_converter.database import create_engine_and_session_factory

    engine, session_factory = create_engine_and_session_factory(get_database_url())
    store = SqlAlchemyVideoStore(session_factory)
    ...
    await engine.dispose()
"""

import os

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def create_engine_and_session_factory(
    database_url: str,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create the production engine and its session factory.

    Args:
        database_url: SQLAlchemy URL with async driver (postgresql+asyncpg://...)

    Returns:
        Tuple of (engine, async_session_factory).
    """
    engine = create_async_engine(
        database_url,
        pool_size=5,
        max_overflow=5,
        pool_pre_ping=True,
        echo=os.getenv("DATABASE_ECHO", "").lower() == "true",
    )
    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,  # CRITICAL: prevents attribute expiration after commit
    )
    return engine, session_factory


def create_test_engine(
    database_url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create an async engine for testing.

    Args:
        database_url: Test database URL (defaults to in-memory SQLite).

    Returns:
        Tuple of (engine, async_session_factory) for testing.
    """
    test_engine = create_async_engine(
        database_url,
        echo=False,
    )
    test_session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return test_engine, test_session_factory
