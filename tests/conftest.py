"""Pytest configuration and fixtures for CraftShare tests.

Provides an in-memory SQLite database plus seeded users, projects and stock.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from craftshare.config import reset_config
from craftshare.db import connection
from craftshare.db.connection import enable_sqlite_foreign_keys, use_immediate_transactions
from craftshare.db.models import (
    Base,
    MaterialModel,
    ProjectModel,
    ToolModel,
    UserModel,
)


@dataclass
class Seed:
    """Primary keys of the rows created by ``seed_marketplace``."""

    owner_id: int
    helper_id: int
    project_id: int
    other_project_id: int
    material_id: int
    tool_id: int


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.delenv("LEDGER_MAX_COMMIT_QUANTITY", raising=False)
    reset_config()
    yield
    reset_config()


@pytest_asyncio.fixture()
async def db_engine():
    """Single-connection in-memory database shared by every session in a test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine, monkeypatch):
    """Session factory installed as the app-wide factory used by get_session()."""
    factory = sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(connection, "_session_factory", factory)
    return factory


@pytest_asyncio.fixture()
async def db_session(db_engine) -> AsyncSession:
    SessionLocal = sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        await session.close()


async def seed_marketplace(session: AsyncSession) -> Seed:
    """Two users, two projects, 10 units of yarn and 2 looms owned by the first user."""
    owner = UserModel(
        display_name="Ada Weaver",
        email="ada@example.com",
        location="Galway",
        interests="weaving, dyeing",
    )
    helper = UserModel(
        display_name="Sam Potter",
        email="sam@example.com",
        location="Cork",
        interests="ceramics",
    )
    session.add_all([owner, helper])
    await session.flush()

    project = ProjectModel(
        title="Festival Banner",
        description="Woven banner for the summer festival",
        group_size=4,
        difficulty="medium",
        category="textile crafts",
        creator_id=owner.id,
        cost=Decimal("120.00"),
    )
    other_project = ProjectModel(
        title="Table Runner",
        description="Runner for the community hall",
        group_size=2,
        difficulty="easy",
        category="textile crafts",
        creator_id=owner.id,
        cost=Decimal("40.00"),
    )
    material = MaterialModel(
        name="Merino Yarn", user_id=owner.id, quantity=10, cost=Decimal("4.50")
    )
    tool = ToolModel(name="Table Loom", user_id=owner.id, quantity=2, cost=Decimal("85.00"))
    session.add_all([project, other_project, material, tool])
    await session.commit()

    return Seed(
        owner_id=owner.id,
        helper_id=helper.id,
        project_id=project.id,
        other_project_id=other_project.id,
        material_id=material.id,
        tool_id=tool.id,
    )


@pytest_asyncio.fixture()
async def seed(db_session: AsyncSession) -> Seed:
    return await seed_marketplace(db_session)


@pytest_asyncio.fixture()
async def seeded(session_factory) -> Seed:
    """Seed through a short-lived session so route sessions own the connection."""
    async with session_factory() as session:
        return await seed_marketplace(session)


@pytest_asyncio.fixture()
async def file_db(tmp_path):
    """Seeded file-backed database whose sessions each get their own connection.

    Yields ``(session_factory, seed)``. Used where two units of work must
    really run side by side, which a single shared in-memory connection
    cannot show.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    enable_sqlite_foreign_keys(engine)
    use_immediate_transactions(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        seed = await seed_marketplace(session)
    try:
        yield factory, seed
    finally:
        await engine.dispose()
