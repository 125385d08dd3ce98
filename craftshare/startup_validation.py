"""Startup validation for CraftShare.

Fail fast when configuration or the database is unusable, instead of failing
on the first ledger request.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from craftshare.config import get_config
from craftshare.db.connection import get_session
from craftshare.db.models import ProjectModel

logger = logging.getLogger(__name__)


class StartupValidationError(Exception):
    """Raised when startup validation fails."""
    pass


def validate_config() -> None:
    """Validate configuration values.

    Raises:
        StartupValidationError: If DATABASE_URL is missing, a number does not parse,
            or limits are invalid
    """
    try:
        config = get_config()
    except (KeyError, ValueError) as e:
        raise StartupValidationError(str(e)) from e

    if config.ledger.max_commit_quantity <= 0:
        raise StartupValidationError(
            "LEDGER_MAX_COMMIT_QUANTITY must be a positive integer "
            f"(got {config.ledger.max_commit_quantity})"
        )

    if config.environment == "production" and config.is_sqlite:
        logger.warning(
            "⚠ SQLite configured in production. Concurrent ledger writes "
            "will serialize on the database lock."
        )

    logger.info(f"✓ Configuration OK (environment={config.environment})")


async def validate_database_connection(session: AsyncSession) -> int:
    """Validate database connection and schema.

    Returns:
        Number of projects currently stored

    Raises:
        StartupValidationError: If database connection or schema is invalid
    """
    try:
        await session.execute(text("SELECT 1"))
        result = await session.execute(select(func.count()).select_from(ProjectModel))
        project_count = result.scalar() or 0
    except Exception as e:
        raise StartupValidationError(
            f"Database connection failed: {e}. "
            "Check DATABASE_URL and run 'craftshare init' to create tables."
        ) from e

    logger.info(f"✓ Database connection OK ({project_count} projects)")
    return project_count


async def run_startup_validation() -> None:
    """Run all startup checks.

    Raises:
        StartupValidationError: On the first failing check
    """
    logger.info("Running startup validation...")
    validate_config()

    async with get_session() as session:
        await validate_database_connection(session)

    logger.info("✓ Startup validation passed")
