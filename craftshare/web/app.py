"""FastAPI application for the CraftShare marketplace API."""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.middleware.base import BaseHTTPMiddleware

from craftshare import __version__
from craftshare.core.logging import configure_logging
from craftshare.db.connection import close_db
from craftshare.startup_validation import run_startup_validation
from craftshare.web.errors import register_error_handlers
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

configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await run_startup_validation()
    logger.info("api_started", version=__version__)
    yield
    await close_db()
    logger.info("api_stopped")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Bind a request id to every log line and echo it in X-Request-ID."""

    async def dispatch(self, request: Request, call_next):
        structlog.contextvars.clear_contextvars()

        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )

        started = time.perf_counter()
        try:
            response = await call_next(request)
            logger.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as exc:
            logger.error("request_failed", error=str(exc))
            raise


def create_app() -> FastAPI:
    """Build the API application with all routers and handlers."""
    app = FastAPI(
        title="CraftShare API",
        description="Hobby-craft collaboration marketplace: inventory and projects",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)

    Instrumentator().instrument(app).expose(app)

    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(inventory.router)
    app.include_router(skills.router)
    app.include_router(projects.router)
    app.include_router(tasks.router)
    app.include_router(project_resources.router)
    app.include_router(completion.router)

    return app


app = create_app()
