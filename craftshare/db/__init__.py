"""Database layer for CraftShare with async SQLAlchemy."""

from craftshare.db.connection import get_session, init_db
from craftshare.db.models import (
    Base,
    MaterialModel,
    ProjectMaterialModel,
    ProjectModel,
    ProjectToolModel,
    SkillModel,
    TaskModel,
    ToolModel,
    UserModel,
)

__all__ = [
    "Base",
    "UserModel",
    "MaterialModel",
    "ToolModel",
    "SkillModel",
    "ProjectModel",
    "ProjectMaterialModel",
    "ProjectToolModel",
    "TaskModel",
    "get_session",
    "init_db",
]
