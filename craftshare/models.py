"""CraftShare domain enums shared by the database, ledger and web layers."""

from __future__ import annotations

from enum import Enum


class Difficulty(str, Enum):
    """Project difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Category(str, Enum):
    """Closed set of craft categories a project can belong to."""

    TEXTILE = "textile crafts"
    PAPER = "paper crafts"
    WOOD = "wood crafts"
    METAL = "metal crafts"
    CERAMICS = "ceramics and pottery"
    GLASS = "glass crafts"
    JEWELRY = "jewelry making"
    MIXED_MEDIA = "mixed media crafts"


class TaskStatus(str, Enum):
    """Task lifecycle states. Any state may move to any other."""

    PENDING = "pending"
    IN_PROGRESS = "in progress"
    COMPLETED = "completed"


class ResourceKind(str, Enum):
    """Kinds of stocked resources a project can draw on."""

    MATERIAL = "material"
    TOOL = "tool"
