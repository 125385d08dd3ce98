"""Shared helpers for CraftShare web routes.

Row lookups raise ``NotFoundError`` so every route reports missing rows the
same way through the registered error handler.

Usage:
    async with get_session() as session:
        project = await require_row(session, ProjectModel, project_id, "Project")
"""

from __future__ import annotations

from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from craftshare.errors import NotFoundError

ModelT = TypeVar("ModelT")


async def require_row(
    session: AsyncSession, model: type[ModelT], row_id: int, label: str
) -> ModelT:
    """Fetch a row by primary key or raise NotFoundError.

    Args:
        session: Open database session
        model: ORM model class
        row_id: Primary key value
        label: Human-readable entity name for the error message

    Returns:
        The loaded model instance
    """
    row = await session.get(model, row_id)
    if row is None:
        raise NotFoundError(f"{label} {row_id} not found")
    return row
