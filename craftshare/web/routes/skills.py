"""Skills offered by users."""

from __future__ import annotations

from fastapi import APIRouter, Response
from sqlalchemy import select

from craftshare.db.connection import get_session
from craftshare.db.models import SkillModel, UserModel
from craftshare.errors import ConflictError, NotFoundError
from craftshare.web.dependencies import require_row
from craftshare.web.models import SkillCreate

router = APIRouter(tags=["skills"])


@router.post("/api/users/{user_id}/skills", status_code=201)
async def add_skill(user_id: int, data: SkillCreate):
    async with get_session() as session:
        await require_row(session, UserModel, user_id, "User")

        existing = await session.execute(
            select(SkillModel.id).where(
                SkillModel.user_id == user_id, SkillModel.name == data.name
            )
        )
        if existing.first() is not None:
            raise ConflictError("Skill already exists for this user")

        skill = SkillModel(name=data.name, user_id=user_id)
        session.add(skill)
        await session.flush()
        return {"id": skill.id, "name": skill.name, "user_id": skill.user_id}


@router.get("/api/users/{user_id}/skills")
async def list_skills(user_id: int):
    async with get_session() as session:
        result = await session.execute(
            select(SkillModel).where(SkillModel.user_id == user_id).order_by(SkillModel.id.asc())
        )
        return [
            {"id": s.id, "name": s.name, "user_id": s.user_id}
            for s in result.scalars().all()
        ]


@router.delete("/api/users/{user_id}/skills/{skill_id}", status_code=204)
async def delete_skill(user_id: int, skill_id: int):
    async with get_session() as session:
        result = await session.execute(
            select(SkillModel).where(SkillModel.id == skill_id, SkillModel.user_id == user_id)
        )
        skill = result.scalar_one_or_none()
        if skill is None:
            raise NotFoundError("Skill not found or not owned by the specified user")
        await session.delete(skill)
    return Response(status_code=204)


@router.patch("/api/skills/{skill_id}")
async def rename_skill(skill_id: int, data: SkillCreate):
    async with get_session() as session:
        skill = await require_row(session, SkillModel, skill_id, "Skill")

        if data.name != skill.name:
            clash = await session.execute(
                select(SkillModel.id).where(
                    SkillModel.user_id == skill.user_id, SkillModel.name == data.name
                )
            )
            if clash.first() is not None:
                raise ConflictError("Skill already exists for this user")
            skill.name = data.name
            await session.flush()

        return {"id": skill.id, "name": skill.name, "user_id": skill.user_id}
