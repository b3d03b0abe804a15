# ==============================================================================
# MAIN - Application Bootstrap
# ==============================================================================
# Wires settings, logging, the connection pool and the transfer service
# ==============================================================================

from __future__ import annotations

import logging
from typing import Optional

from bank_transfer.core.logging import setup_logging
from bank_transfer.core.settings import Settings, get_settings
from bank_transfer.database.factory import DatabaseFactory
from bank_transfer.database.repositories.member_repository import MemberRepository
from bank_transfer.services.transfer_service import TransferService

logger = logging.getLogger(__name__)


def create_transfer_service(
    settings: Optional[Settings] = None,
    create_schema: Optional[bool] = None,
) -> TransferService:
    """
    Create and configure the transfer service.

    Configures logging, initializes the shared connection pool and
    injects it into a new service instance.

    Args:
        settings: Configuration (defaults to the process settings)
        create_schema: Create missing tables; defaults to True outside production

    Returns:
        Ready-to-use transfer service
    """
    settings = settings or get_settings()
    setup_logging(level=settings.LOG_LEVEL, log_file=settings.LOG_FILE)

    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT.value}")

    if create_schema is None:
        create_schema = not settings.is_production

    pool = DatabaseFactory.initialize(settings, create_schema=create_schema)
    return TransferService.from_settings(pool, MemberRepository(), settings)


def shutdown() -> None:
    """Dispose the shared connection pools."""
    logger.info("Shutting down...")
    DatabaseFactory.shutdown()
    logger.info("Shutdown complete")
