"""Project resource routes: commit, adjust, release and list materials/tools.

Every write runs inside one ``get_session()`` block, so a failing ledger
operation leaves stock and bindings untouched.
"""

from __future__ import annotations

from fastapi import APIRouter

from craftshare.db.connection import get_session
from craftshare.inventory import (
    InventoryLedger,
    list_for_project,
    project_cost,
    stock_summary,
)
from craftshare.models import ResourceKind
from craftshare.web.models import QuantityRequest

router = APIRouter(tags=["project-resources"])


@router.post("/api/projects/{project_id}/resources/{kind}/{resource_id}")
async def commit_resource(
    project_id: int, kind: ResourceKind, resource_id: int, body: QuantityRequest
):
    """Commit units of a material/tool from its owner's stock to the project."""
    async with get_session() as session:
        ledger = InventoryLedger(session, kind)
        commitment = await ledger.commit(project_id, resource_id, body.quantity_used)
    return commitment.to_dict()


@router.put("/api/projects/{project_id}/resources/{kind}/{resource_id}")
async def adjust_resource(
    project_id: int, kind: ResourceKind, resource_id: int, body: QuantityRequest
):
    """Set the committed quantity, moving the difference to or from stock."""
    async with get_session() as session:
        ledger = InventoryLedger(session, kind)
        commitment = await ledger.adjust(project_id, resource_id, body.quantity_used)
    return commitment.to_dict()


@router.delete("/api/projects/{project_id}/resources/{kind}/{resource_id}")
async def release_resource(project_id: int, kind: ResourceKind, resource_id: int):
    """Remove the commitment and return its quantity to stock."""
    async with get_session() as session:
        ledger = InventoryLedger(session, kind)
        released = await ledger.release(project_id, resource_id)
    return {
        "message": f"Project {kind.value} deleted successfully",
        "released": released,
    }


@router.get("/api/projects/{project_id}/resources/{kind}")
async def list_project_resources(project_id: int, kind: ResourceKind):
    """List the project's committed materials or tools."""
    async with get_session() as session:
        lines = await list_for_project(session, project_id, kind)
    return [
        {
            "resource_id": line.resource_id,
            "name": line.name,
            "cost": float(line.cost),
            "user_id": line.user_id,
            "quantity_used": line.quantity_used,
        }
        for line in lines
    ]


@router.get("/api/projects/{project_id}/cost")
async def get_project_cost(project_id: int):
    """Committed cost of the project across materials and tools."""
    async with get_session() as session:
        cost = await project_cost(session, project_id)
    return {
        "project_id": cost.project_id,
        "materials": float(cost.materials),
        "tools": float(cost.tools),
        "total": float(cost.total),
    }


@router.get("/api/users/{user_id}/stock/{kind}")
async def get_user_stock(user_id: int, kind: ResourceKind):
    """A user's materials or tools with on-hand and committed quantities."""
    async with get_session() as session:
        positions = await stock_summary(session, user_id, kind)
    return [
        {
            "resource_id": p.resource_id,
            "name": p.name,
            "cost": float(p.cost),
            "on_hand": p.on_hand,
            "committed": p.committed,
            "total_owned": p.total_owned,
        }
        for p in positions
    ]
