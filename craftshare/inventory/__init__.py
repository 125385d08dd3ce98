"""Inventory ledger for project materials and tools."""

from craftshare.inventory.ledger import InventoryLedger
from craftshare.inventory.models import (
    Commitment,
    CommittedResource,
    ProjectCost,
    ResourceSpec,
    StockPosition,
    resource_spec,
)
from craftshare.inventory.repository import list_for_project, project_cost, stock_summary

__all__ = [
    "InventoryLedger",
    "Commitment",
    "CommittedResource",
    "ProjectCost",
    "ResourceSpec",
    "StockPosition",
    "resource_spec",
    "list_for_project",
    "project_cost",
    "stock_summary",
]
