"""SQLAlchemy async database models for CraftShare.

Flat relational layout: every table has an integer primary key and foreign
keys to its owning rows. Stock never goes negative and each (project, resource)
pair has at most one binding row.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func

from craftshare.models import Category, Difficulty, TaskStatus


def _in_values(column: str, enum_cls) -> str:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class UserModel(Base):
    """Marketplace member. Credentials live with the identity provider."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(Text, nullable=False)
    interests: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)


class MaterialModel(Base):
    """Consumable material owned by one user."""

    __tablename__ = "materials"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_materials_quantity_non_negative"),
        UniqueConstraint("user_id", "name", name="uq_materials_user_name"),
    )


class ToolModel(Base):
    """Reusable tool owned by one user."""

    __tablename__ = "tools"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_tools_quantity_non_negative"),
        UniqueConstraint("user_id", "name", name="uq_tools_user_name"),
    )


class SkillModel(Base):
    """Skill a user offers to collaborators."""

    __tablename__ = "skills"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_skills_user_name"),)


class ProjectModel(Base):
    """Craft project created by a user.

    ``is_completed`` is derived: only the completion rollup writes it.
    """

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    group_size: Mapped[int] = mapped_column(Integer, nullable=False)
    difficulty: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    creator_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))

    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Audit
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("creator_id", "title", name="uq_projects_creator_title"),
        CheckConstraint(_in_values("difficulty", Difficulty), name="ck_projects_difficulty"),
        CheckConstraint(_in_values("category", Category), name="ck_projects_category"),
        CheckConstraint("group_size > 0", name="ck_projects_group_size_positive"),
        Index("idx_projects_creator", "creator_id"),
    )


class ProjectMaterialModel(Base):
    """Quantity of a material committed to a project."""

    __tablename__ = "project_materials"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    material_id: Mapped[int] = mapped_column(
        ForeignKey("materials.id", ondelete="RESTRICT"), nullable=False
    )
    quantity_used: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("project_id", "material_id", name="uq_project_materials_pair"),
        CheckConstraint("quantity_used >= 0", name="ck_project_materials_quantity_used"),
        Index("idx_project_materials_project", "project_id"),
    )


class ProjectToolModel(Base):
    """Quantity of a tool committed to a project."""

    __tablename__ = "project_tools"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    tool_id: Mapped[int] = mapped_column(
        ForeignKey("tools.id", ondelete="RESTRICT"), nullable=False
    )
    quantity_used: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("project_id", "tool_id", name="uq_project_tools_pair"),
        CheckConstraint("quantity_used >= 0", name="ck_project_tools_quantity_used"),
        Index("idx_project_tools_project", "project_id"),
    )


class TaskModel(Base):
    """Unit of work on a project assigned to a user."""

    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(Text, nullable=False, default=TaskStatus.PENDING.value)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )

    __table_args__ = (
        CheckConstraint(_in_values("status", TaskStatus), name="ck_tasks_status"),
    )
