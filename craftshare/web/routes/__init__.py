"""CraftShare Web Route Modules.

Each module exports a `router` object (APIRouter instance) that the main app
includes in craftshare.web.app. Core errors raised inside handlers are turned
into responses by craftshare.web.errors.

Usage:
    from craftshare.web.routes import projects
    app.include_router(projects.router)
"""

from craftshare.web.routes import (
    completion,
    health,
    inventory,
    project_resources,
    projects,
    skills,
    tasks,
    users,
)

__all__ = [
    "completion",
    "health",
    "inventory",
    "project_resources",
    "projects",
    "skills",
    "tasks",
    "users",
]
