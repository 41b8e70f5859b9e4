"""
Database engine and session management
"""

import logging
from typing import Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from config.settings import DATABASE_URL, DB_ECHO, DB_POOL_SIZE
from database.tables import Base

logger = logging.getLogger(__name__)

# Global engine and session factory
engine: Optional[AsyncEngine] = None
session_factory: Optional[async_sessionmaker] = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def init_database(url: Optional[str] = None):
    """Initialize the database engine, session factory and schema"""
    global engine, session_factory
    url = url or DATABASE_URL

    engine_kwargs = {"echo": DB_ECHO}
    if url.startswith("sqlite"):
        if ":memory:" in url or url.endswith("://"):
            # Every session must see the same in-memory database
            engine_kwargs.update(
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
    else:
        engine_kwargs.update(pool_size=DB_POOL_SIZE, pool_pre_ping=True)

    engine = create_async_engine(url, **engine_kwargs)

    if url.startswith("sqlite"):
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(text("SELECT 1"))

    logger.info(f"Database initialized successfully ({engine.url.get_backend_name()})")


async def close_database():
    """Dispose of the database engine"""
    global engine, session_factory
    if engine:
        await engine.dispose()
    engine = None
    session_factory = None
    logger.info("Database connections closed")


def get_session_factory() -> async_sessionmaker:
    """Get the session factory instance"""
    if session_factory is None:
        raise RuntimeError("Database not initialized - call init_database() first")
    return session_factory


async def check_database() -> bool:
    """Run a trivial query against the store"""
    async with get_session_factory()() as session:
        await session.execute(text("SELECT 1"))
    return True
