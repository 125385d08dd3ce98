"""Shared Pydantic models for the CraftShare web API.

Usage:
    from craftshare.web.models import QuantityRequest

    @router.post("/api/projects/{project_id}/resources/{kind}/{resource_id}")
    async def commit(project_id: int, kind: ResourceKind, resource_id: int, body: QuantityRequest):
        ...
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field

from craftshare.models import Category, Difficulty, TaskStatus


# ============================================================================
# Users & Inventory
# ============================================================================


class UserCreate(BaseModel):
    """Profile fields for a new member. Credentials are handled upstream."""

    display_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    location: str
    interests: str = ""


class UserUpdate(BaseModel):
    """Profile edit. Omitted fields are left unchanged."""

    display_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    location: Optional[str] = None
    interests: Optional[str] = None


class ResourceCreate(BaseModel):
    """New material or tool for a user's stock."""

    name: str = Field(min_length=1, max_length=100)
    quantity: int = Field(ge=0)
    cost: Decimal = Field(default=Decimal("0"), ge=0)


class ResourceUpdate(BaseModel):
    """Owner edit of a material or tool. Omitted fields are left unchanged."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    quantity: Optional[int] = Field(default=None, ge=0)
    cost: Optional[Decimal] = Field(default=None, ge=0)


class SkillCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class QuantityRequest(BaseModel):
    """Body of commit/adjust requests.

    Left untyped; the ledger validates the value and reports ``invalid_quantity``.
    """

    quantity_used: Any = None


# ============================================================================
# Projects & Tasks
# ============================================================================


class ProjectCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1)
    group_size: int = Field(gt=0)
    difficulty: Difficulty
    category: Category
    cost: Decimal = Field(default=Decimal("0"), ge=0)


class ProjectUpdate(BaseModel):
    """Partial project edit. ``is_completed`` is owned by the completion rollup."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1)
    group_size: Optional[int] = Field(default=None, gt=0)
    difficulty: Optional[Difficulty] = None
    category: Optional[Category] = None
    cost: Optional[Decimal] = Field(default=None, ge=0)


class TaskCreate(BaseModel):
    description: str = Field(min_length=1)
    comment: str = ""
    status: TaskStatus = TaskStatus.PENDING
    user_id: int


class TaskUpdate(BaseModel):
    """Partial task edit. Status is overwritten without transition rules."""

    description: Optional[str] = Field(default=None, min_length=1)
    comment: Optional[str] = None
    status: Optional[TaskStatus] = None
