"""Materials and tools owned by users.

Owners add, edit, list and delete their own stock here. Moving stock into
projects goes through the project resource routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from sqlalchemy import select

from craftshare.db.connection import get_session
from craftshare.db.models import UserModel
from craftshare.errors import ConflictError
from craftshare.inventory import resource_spec
from craftshare.models import ResourceKind
from craftshare.web.dependencies import require_row
from craftshare.web.models import ResourceCreate, ResourceUpdate

router = APIRouter(tags=["inventory"])


def _resource_to_dict(resource) -> dict:
    return {
        "id": resource.id,
        "name": resource.name,
        "quantity": resource.quantity,
        "cost": float(resource.cost),
        "user_id": resource.user_id,
    }


async def _ensure_name_free(session, spec, user_id: int, name: str, exclude_id: int | None = None):
    model = spec.resource_model
    stmt = select(model.id).where(model.user_id == user_id, model.name == name)
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    if (await session.execute(stmt)).first() is not None:
        raise ConflictError(f"{spec.label} with the same name already exists for this user")


@router.post("/api/users/{user_id}/resources/{kind}", status_code=201)
async def add_resource(user_id: int, kind: ResourceKind, data: ResourceCreate):
    """Add a material or tool to a user's stock."""
    spec = resource_spec(kind)
    async with get_session() as session:
        await require_row(session, UserModel, user_id, "User")
        await _ensure_name_free(session, spec, user_id, data.name)

        resource = spec.resource_model(
            name=data.name,
            quantity=data.quantity,
            cost=data.cost,
            user_id=user_id,
        )
        session.add(resource)
        await session.flush()
        return _resource_to_dict(resource)


@router.get("/api/users/{user_id}/resources/{kind}")
async def list_resources(user_id: int, kind: ResourceKind):
    spec = resource_spec(kind)
    model = spec.resource_model
    async with get_session() as session:
        result = await session.execute(
            select(model).where(model.user_id == user_id).order_by(model.id.asc())
        )
        return [_resource_to_dict(r) for r in result.scalars().all()]


@router.patch("/api/resources/{kind}/{resource_id}")
async def update_resource(kind: ResourceKind, resource_id: int, changes: ResourceUpdate):
    """Owner edit of name, on-hand quantity or cost."""
    spec = resource_spec(kind)
    async with get_session() as session:
        resource = await require_row(session, spec.resource_model, resource_id, spec.label)

        updates = changes.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in updates and updates["name"] != resource.name:
            await _ensure_name_free(session, spec, resource.user_id, updates["name"], resource.id)

        for field_name, value in updates.items():
            setattr(resource, field_name, value)

        await session.flush()
        return _resource_to_dict(resource)


@router.delete("/api/resources/{kind}/{resource_id}", status_code=204)
async def delete_resource(kind: ResourceKind, resource_id: int):
    """Delete a material or tool that is not committed to any project."""
    spec = resource_spec(kind)
    async with get_session() as session:
        resource = await require_row(session, spec.resource_model, resource_id, spec.label)

        in_use = await session.execute(
            select(spec.binding_model.id).where(spec.binding_fk_column == resource_id).limit(1)
        )
        if in_use.first() is not None:
            raise ConflictError(
                f"{spec.label} is used in a project and cannot be deleted"
            )

        await session.delete(resource)
    return Response(status_code=204)
