"""
Database initialization and connection management.

This module provides functions for:
1. Creating the async engine and session factory
2. Creating the schema
3. Disposing of the connection pool
"""

from typing import Any, Dict, Optional
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lingotrack.common.logger import app_logger
from lingotrack.database.base import Base
# Register the tables on Base.metadata
from lingotrack.database import models  # noqa: F401

# Setup module logger
logger = app_logger.getChild("database.init_db")

# Global engine and session factory
_engine: Optional[AsyncEngine] = None
_session_factory: Optional[sessionmaker] = None


def get_engine_kwargs(database_url: str, echo: bool = False) -> Dict[str, Any]:
    """
    Get engine keyword arguments based on database type.
    Different databases support different connection options.
    """
    kwargs: Dict[str, Any] = {"echo": echo, "future": True}

    if database_url.startswith("postgresql"):
        kwargs.update({
            "pool_size": 5,
            "max_overflow": 10,
            "pool_pre_ping": True,
            "pool_recycle": 300,  # Recycle connections every 5 minutes
        })
    elif database_url.startswith("sqlite") and ":memory:" in database_url:
        # One shared connection, otherwise every checkout sees an empty database
        kwargs.update({
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        })

    return kwargs


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    """Create an AsyncSession factory bound to an engine."""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def initialize_database(
    database_url: str,
    echo: bool = False,
    create_tables: bool = True
) -> AsyncEngine:
    """
    Initialize the async database engine.

    Args:
        database_url: Database connection URL
        echo: Whether to echo SQL statements
        create_tables: Whether to create missing tables

    Returns:
        AsyncEngine instance
    """
    global _engine, _session_factory

    try:
        logger.info(f"Initializing database with URL: {database_url[:10]}...")

        _engine = create_async_engine(database_url, **get_engine_kwargs(database_url, echo))
        _session_factory = create_session_factory(_engine)

        # Test connection
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

        if create_tables:
            await create_schema(_engine)

        logger.info("Database engine initialized successfully")
        return _engine

    except Exception as e:
        logger.error(f"Failed to initialize async database: {str(e)}")
        raise


def get_session_factory() -> sessionmaker:
    """Get the global session factory."""
    if _session_factory is None:
        raise RuntimeError("Database engine not initialized. Call initialize_database() first.")
    return _session_factory


async def close_database() -> None:
    """Close the database engine and all connections."""
    global _engine, _session_factory

    if _engine:
        try:
            await _engine.dispose()
            logger.info("Database engine closed successfully")
        except Exception as e:
            logger.error(f"Error closing database engine: {str(e)}")
            raise
        finally:
            _engine = None
            _session_factory = None
