"""User profile routes. Authentication is handled by the identity provider."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Response
from sqlalchemy import delete, or_, select

from craftshare.db.connection import get_session
from craftshare.db.models import (
    MaterialModel,
    ProjectModel,
    SkillModel,
    TaskModel,
    ToolModel,
    UserModel,
)
from craftshare.errors import ConflictError
from craftshare.inventory import InventoryLedger
from craftshare.models import ResourceKind
from craftshare.web.dependencies import require_row
from craftshare.web.models import UserCreate, UserUpdate

router = APIRouter(tags=["users"])
logger = structlog.get_logger(__name__)


def _user_to_dict(user: UserModel) -> dict:
    return {
        "id": user.id,
        "display_name": user.display_name,
        "email": user.email,
        "location": user.location,
        "interests": user.interests,
    }


async def _ensure_email_free(session, email: str, exclude_id: int | None = None):
    stmt = select(UserModel.id).where(UserModel.email == email)
    if exclude_id is not None:
        stmt = stmt.where(UserModel.id != exclude_id)
    if (await session.execute(stmt)).first() is not None:
        raise ConflictError("A user with this email already exists")


@router.post("/api/users", status_code=201)
async def create_user(data: UserCreate):
    async with get_session() as session:
        await _ensure_email_free(session, data.email)

        user = UserModel(
            display_name=data.display_name,
            email=data.email,
            location=data.location,
            interests=data.interests,
        )
        session.add(user)
        await session.flush()
        return _user_to_dict(user)


@router.get("/api/users/{user_id}")
async def get_user(user_id: int):
    async with get_session() as session:
        user = await require_row(session, UserModel, user_id, "User")
        return _user_to_dict(user)


@router.patch("/api/users/{user_id}")
async def update_user(user_id: int, changes: UserUpdate):
    """Edit profile fields. Only provided fields change."""
    async with get_session() as session:
        user = await require_row(session, UserModel, user_id, "User")

        updates = changes.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in updates and updates["email"] != user.email:
            await _ensure_email_free(session, updates["email"], user.id)

        for field_name, value in updates.items():
            setattr(user, field_name, value)

        await session.flush()
        return _user_to_dict(user)


@router.delete("/api/users/{user_id}", status_code=204)
async def delete_user(user_id: int):
    """Delete a member with their stock, skills, projects and tasks.

    Their materials and tools are first released from every project that
    uses them, then everything bound to their own projects goes back to the
    other owners' stock, the same way a project delete does.
    """
    async with get_session() as session:
        user = await require_row(session, UserModel, user_id, "User")

        project_ids = (
            await session.execute(
                select(ProjectModel.id)
                .where(ProjectModel.creator_id == user_id)
                .order_by(ProjectModel.id)
            )
        ).scalars().all()

        released = 0
        for kind in ResourceKind:
            ledger = InventoryLedger(session, kind)
            released += await ledger.release_owner(user_id)
            for project_id in project_ids:
                released += await ledger.release_project(project_id)

        await session.execute(
            delete(TaskModel).where(
                or_(TaskModel.user_id == user_id, TaskModel.project_id.in_(project_ids))
            )
        )
        await session.execute(delete(ProjectModel).where(ProjectModel.creator_id == user_id))
        for model in (SkillModel, MaterialModel, ToolModel):
            await session.execute(delete(model).where(model.user_id == user_id))
        await session.delete(user)

        logger.info(
            "user_deleted", user_id=user_id, projects=len(project_ids), released=released
        )

    return Response(status_code=204)
