"""Read-side queries over materials, tools and their project bindings."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from craftshare.db.models import ProjectModel, UserModel
from craftshare.errors import NotFoundError
from craftshare.inventory.models import (
    CommittedResource,
    ProjectCost,
    StockPosition,
    resource_spec,
)
from craftshare.models import ResourceKind


async def list_for_project(
    session: AsyncSession,
    project_id: int,
    kind: ResourceKind | str,
) -> list[CommittedResource]:
    """Return every resource of ``kind`` committed to the project.

    Lines come back in binding insertion order. A project with no bindings
    yields an empty list; a missing project raises NotFoundError.
    """
    spec = resource_spec(kind)
    if await session.get(ProjectModel, project_id) is None:
        raise NotFoundError(f"Project {project_id} not found")

    binding_model = spec.binding_model
    resource_model = spec.resource_model
    stmt = (
        select(binding_model, resource_model)
        .join(resource_model, resource_model.id == spec.binding_fk_column)
        .where(binding_model.project_id == project_id)
        .order_by(binding_model.id.asc())
    )

    rows = await session.execute(stmt)
    return [
        CommittedResource(
            resource_id=resource.id,
            name=resource.name,
            cost=Decimal(resource.cost),
            user_id=resource.user_id,
            quantity_used=binding.quantity_used,
        )
        for binding, resource in rows.all()
    ]


async def project_cost(session: AsyncSession, project_id: int) -> ProjectCost:
    """Sum ``quantity_used * cost`` over the project's materials and tools."""
    materials = await list_for_project(session, project_id, ResourceKind.MATERIAL)
    tools = await list_for_project(session, project_id, ResourceKind.TOOL)

    return ProjectCost(
        project_id=project_id,
        materials=sum((line.line_cost for line in materials), Decimal("0")),
        tools=sum((line.line_cost for line in tools), Decimal("0")),
        lines=materials + tools,
    )


async def stock_summary(
    session: AsyncSession,
    user_id: int,
    kind: ResourceKind | str,
) -> list[StockPosition]:
    """Return the user's resources with on-hand stock and committed totals."""
    spec = resource_spec(kind)
    if await session.get(UserModel, user_id) is None:
        raise NotFoundError(f"User {user_id} not found")

    resource_model = spec.resource_model
    binding_model = spec.binding_model
    committed = func.coalesce(func.sum(binding_model.quantity_used), 0).label("committed")
    stmt = (
        select(resource_model, committed)
        .outerjoin(binding_model, spec.binding_fk_column == resource_model.id)
        .where(resource_model.user_id == user_id)
        .group_by(resource_model.id)
        .order_by(resource_model.name.asc())
    )

    rows = await session.execute(stmt)
    return [
        StockPosition(
            resource_id=resource.id,
            name=resource.name,
            cost=Decimal(resource.cost),
            on_hand=resource.quantity,
            committed=int(total),
        )
        for resource, total in rows.all()
    ]
