"""Async engine and sessions for the pension store.

SQLite under ``DATA_PATH`` by default. The API and the daily expiry run share
the file, so it is opened in WAL mode. Point ``DATABASE_URL`` at
``postgresql+asyncpg://...`` for a shared server.
"""
import logging
import os
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from .config import settings, get_database_url, is_postgresql

logger = logging.getLogger(__name__)

SQLITE_BUSY_TIMEOUT_MS = 30000


def _enable_wal(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS}")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def build_engine(url: str) -> AsyncEngine:
    """Create the engine for ``url``, tuned for PostgreSQL or SQLite."""
    if url.startswith("postgresql"):
        logger.info("Pension store: PostgreSQL")
        return create_async_engine(
            url,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,
            pool_recycle=3600,
        )

    logger.info("Pension store: SQLite")
    sqlite_engine = create_async_engine(
        url,
        pool_pre_ping=True,
        connect_args={"timeout": SQLITE_BUSY_TIMEOUT_MS / 1000},
    )
    event.listen(sqlite_engine.sync_engine, "connect", _enable_wal)
    return sqlite_engine


engine = build_engine(get_database_url())

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_db() -> AsyncSession:
    """FastAPI dependency yielding a request-scoped session."""
    async with async_session() as session:
        yield session


async def init_db():
    """Create the tables, and the data directory when using SQLite."""
    from . import models  # noqa: F401  (register tables on Base.metadata)

    if not is_postgresql():
        os.makedirs(settings.data_path, exist_ok=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    await engine.dispose()
