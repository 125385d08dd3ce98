"""Data structures used by the inventory ledger."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from craftshare.db.models import (
    MaterialModel,
    ProjectMaterialModel,
    ProjectToolModel,
    ToolModel,
)
from craftshare.models import ResourceKind


@dataclass(frozen=True, slots=True)
class ResourceSpec:
    """Tables behind one resource kind.

    Materials and tools share the same shape (``id``, ``name``, ``user_id``,
    ``quantity``, ``cost``) and their bindings differ only in the name of the
    resource foreign key, so the ledger runs one algorithm over either spec.
    """

    kind: ResourceKind
    resource_model: Any
    binding_model: Any
    binding_fk: str
    label: str

    @property
    def binding_fk_column(self):
        return getattr(self.binding_model, self.binding_fk)


_SPECS: dict[ResourceKind, ResourceSpec] = {
    ResourceKind.MATERIAL: ResourceSpec(
        kind=ResourceKind.MATERIAL,
        resource_model=MaterialModel,
        binding_model=ProjectMaterialModel,
        binding_fk="material_id",
        label="Material",
    ),
    ResourceKind.TOOL: ResourceSpec(
        kind=ResourceKind.TOOL,
        resource_model=ToolModel,
        binding_model=ProjectToolModel,
        binding_fk="tool_id",
        label="Tool",
    ),
}


def resource_spec(kind: ResourceKind | str) -> ResourceSpec:
    return _SPECS[ResourceKind(kind)]


@dataclass(slots=True)
class Commitment:
    """State of one (project, resource) binding after a ledger operation."""

    id: int
    project_id: int
    resource_id: int
    kind: ResourceKind
    quantity_used: int
    stock_remaining: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "resource_id": self.resource_id,
            "kind": self.kind.value,
            "quantity_used": self.quantity_used,
            "stock_remaining": self.stock_remaining,
        }


@dataclass(slots=True)
class CommittedResource:
    """One line of a project's resource list."""

    resource_id: int
    name: str
    cost: Decimal
    user_id: int
    quantity_used: int

    @property
    def line_cost(self) -> Decimal:
        return self.cost * self.quantity_used


@dataclass(slots=True)
class StockPosition:
    """A user's resource with on-hand and committed totals."""

    resource_id: int
    name: str
    cost: Decimal
    on_hand: int
    committed: int

    @property
    def total_owned(self) -> int:
        return self.on_hand + self.committed


@dataclass(slots=True)
class ProjectCost:
    """Committed cost of a project, split by resource kind."""

    project_id: int
    materials: Decimal = Decimal("0")
    tools: Decimal = Decimal("0")
    lines: list[CommittedResource] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return self.materials + self.tools
