"""Engine and session plumbing.

One engine and one session factory per process, built lazily from
``get_config().db``. Request handlers and CLI commands open a unit of work
with ``get_session()``.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from craftshare.config import AppConfig, get_config
from craftshare.db.models import Base

_engine: AsyncEngine | None = None
_session_factory: sessionmaker | None = None


def _engine_options(config: AppConfig) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": config.db.echo}
    if config.is_sqlite:
        # SQLite uses a file lock, not a server-side pool
        return options
    options.update(
        pool_size=config.db.pool_size,
        max_overflow=config.db.pool_max_overflow,
        pool_timeout=config.db.pool_timeout,
        pool_pre_ping=True,
        pool_recycle=3600,
    )
    return options


def get_engine() -> AsyncEngine:
    """Return the process-wide async engine.

    Raises:
        KeyError: DATABASE_URL is not set
    """
    global _engine
    if _engine is None:
        config = get_config()
        _engine = create_async_engine(config.db.url, **_engine_options(config))
        if config.is_sqlite:
            enable_sqlite_foreign_keys(_engine)
            use_immediate_transactions(_engine)
    return _engine


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Turn on FK enforcement for every new SQLite connection.

    Binding rows RESTRICT deletes of their material/tool, which SQLite only
    honours with ``PRAGMA foreign_keys=ON``.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def use_immediate_transactions(engine: AsyncEngine) -> None:
    """Open every SQLite transaction with ``BEGIN IMMEDIATE``.

    pysqlite's deferred BEGIN lets two connections both read and then fail
    with "database is locked" when each tries to upgrade to a write lock.
    Taking the write lock up front makes concurrent writers queue on the
    busy timeout instead, so the conditional stock UPDATE decides the loser.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Open one unit of work.

    Everything written inside the block is committed together when it exits
    normally and rolled back together when it raises, so a rejected ledger
    operation never leaves stock or bindings half-changed.

    Usage:
        async with get_session() as session:
            ledger = InventoryLedger(session, ResourceKind.MATERIAL)
            await ledger.commit(project_id, material_id, 4)
    """
    session = get_session_factory()()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency form of ``get_session()``."""
    async with get_session() as session:
        yield session


async def init_db(drop: bool = False) -> None:
    """Create all tables, optionally dropping existing ones first."""
    async with get_engine().begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose the engine; the next ``get_engine()`` builds a fresh one."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
