# ==============================================================================
# DATABASE FACTORY - Pool Instantiation & Lifecycle Management
# ==============================================================================
# Factory Pattern for creating and managing connection pools
# Pools are cached by name so one process shares one pool per database
# ==============================================================================

from __future__ import annotations

import logging
from typing import Dict, Optional

from bank_transfer.core.exceptions import DatabaseError
from bank_transfer.core.settings import Settings, get_settings
from bank_transfer.database.pool import SQLAlchemyConnectionPool

logger = logging.getLogger(__name__)


class DatabaseFactory:
    """
    Factory class for creating and managing connection pools.

    Class Attributes:
        _instances: Cache of created pools keyed by pool name

    Example:
        >>> # Initialize at application startup
        >>> pool = DatabaseFactory.initialize()
        >>>
        >>> # Shutdown at application exit
        >>> DatabaseFactory.shutdown()
    """

    _instances: Dict[str, SQLAlchemyConnectionPool] = {}

    @classmethod
    def create_pool(
        cls,
        settings: Optional[Settings] = None,
    ) -> SQLAlchemyConnectionPool:
        """
        Create and return the pool described by ``settings``.

        Returns the cached instance when a pool with the same name
        already exists.

        Args:
            settings: Configuration (defaults to the process settings)

        Returns:
            Connection pool instance
        """
        settings = settings or get_settings()
        name = settings.DB_POOL_NAME

        if name in cls._instances:
            return cls._instances[name]

        pool = SQLAlchemyConnectionPool.from_settings(settings)
        cls._instances[name] = pool
        return pool

    @classmethod
    def initialize(
        cls,
        settings: Optional[Settings] = None,
        create_schema: bool = True,
    ) -> SQLAlchemyConnectionPool:
        """
        Create the pool and verify it can reach the database.

        Should be called at application startup.

        Args:
            settings: Configuration (defaults to the process settings)
            create_schema: Create missing tables (development and tests)

        Returns:
            Initialized connection pool

        Raises:
            DatabaseError: If the database cannot be reached
        """
        pool = cls.create_pool(settings)

        if create_schema:
            try:
                pool.create_schema()
            except Exception as e:
                logger.error(f"Schema creation failed on '{pool.name}': {e}")
                cls._discard(pool)
                raise DatabaseError(
                    f"Failed to initialize database: {e}",
                    details={"pool": pool.name},
                ) from e

        if not pool.health_check():
            cls._discard(pool)
            raise DatabaseError(
                f"Database behind pool '{pool.name}' is unreachable",
                details={"pool": pool.name},
            )

        logger.info(f"Database initialized: pool '{pool.name}'")
        return pool

    @classmethod
    def _discard(cls, pool: SQLAlchemyConnectionPool) -> None:
        """Forget and dispose a pool that failed initialization."""
        cls._instances.pop(pool.name, None)
        try:
            pool.dispose()
        except Exception as e:
            logger.error(f"Error disposing pool '{pool.name}': {e}")

    @classmethod
    def get_pool(cls, name: Optional[str] = None) -> SQLAlchemyConnectionPool:
        """
        Get an existing pool.

        Raises:
            RuntimeError: If the pool was never created
        """
        name = name or get_settings().DB_POOL_NAME

        if name not in cls._instances:
            raise RuntimeError(
                f"Connection pool '{name}' not initialized. "
                f"Call DatabaseFactory.initialize() first."
            )
        return cls._instances[name]

    @classmethod
    def is_initialized(cls, name: Optional[str] = None) -> bool:
        """Check if a pool with this name exists."""
        name = name or get_settings().DB_POOL_NAME
        return name in cls._instances

    @classmethod
    def health_check(cls, name: Optional[str] = None) -> bool:
        """Check database health through a cached pool."""
        try:
            pool = cls.get_pool(name)
        except RuntimeError:
            return False
        return pool.health_check()

    @classmethod
    def shutdown(cls) -> None:
        """
        Dispose every cached pool.

        Should be called at application shutdown.
        """
        for name, pool in cls._instances.items():
            try:
                pool.dispose()
            except Exception as e:
                logger.error(f"Error disposing pool '{name}': {e}")

        cls._instances.clear()
        logger.info("All connection pools closed")

    @classmethod
    def reset(cls) -> None:
        """
        Reset factory state.

        Clears the pool cache without disposing. Primarily for tests.
        """
        cls._instances.clear()
