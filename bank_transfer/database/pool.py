# ==============================================================================
# CONNECTION POOL - Bounded Connection Checkout
# ==============================================================================
# Hands out exclusively owned ConnectionHandles from a SQLAlchemy engine pool
# Acquisition waits at most pool_timeout seconds, then fails with PoolExhausted
# ==============================================================================

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import Field
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.pool import NullPool, QueuePool

from bank_transfer.core.constants import DatabaseConstants
from bank_transfer.core.exceptions import DatabaseError, PoolExhausted
from bank_transfer.core.settings import PoolClass, Settings
from bank_transfer.database.connection import ConnectionHandle
from bank_transfer.domain_models.base import SQLBase
from bank_transfer.schemas.base import BaseSchema

logger = logging.getLogger(__name__)


def _use_immediate_transactions(engine: Engine) -> None:
    """
    Make every SQLite transaction take the write lock when it begins.

    pysqlite defers BEGIN until the first write, so reads issued at the
    start of a transaction would run unlocked. Driver-level transaction
    handling is switched off and SQLAlchemy emits BEGIN IMMEDIATE itself.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(connection):
        connection.exec_driver_sql("BEGIN IMMEDIATE")


class PoolStatus(BaseSchema):
    """Point-in-time snapshot of pool usage for monitoring."""

    name: str = Field(..., description="Pool identifier")
    pool_class: PoolClass = Field(..., description="Pooling strategy")
    size: Optional[int] = Field(None, description="Configured pool size")
    max_overflow: Optional[int] = Field(None, description="Overflow limit")
    checked_out: int = Field(..., ge=0, description="Handles currently borrowed")
    detail: str = Field("", description="Engine pool status line")


class BaseConnectionPool(ABC):
    """
    Abstract connection pool capability.

    The transfer service depends only on this interface, so tests
    and alternative drivers can supply their own pool.
    """

    @abstractmethod
    def acquire(self) -> ConnectionHandle:
        """
        Borrow a connection in auto-commit mode.

        Raises:
            PoolExhausted: If no connection is available within the wait bound
        """
        pass

    @abstractmethod
    def release(self, handle: ConnectionHandle) -> None:
        """Return a borrowed connection. Releasing twice is a no-op."""
        pass

    @property
    @abstractmethod
    def checked_out(self) -> int:
        """Number of handles currently borrowed."""
        pass

    @abstractmethod
    def dispose(self) -> None:
        """Close every pooled connection."""
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """Return True if a connection can run a trivial query."""
        pass


class SQLAlchemyConnectionPool(BaseConnectionPool):
    """
    Connection pool backed by a SQLAlchemy engine.

    Features:
        - Bounded QueuePool (pool_size + max_overflow connections)
        - Optional NullPool: a new physical connection per acquire
        - Checkout wait bounded by pool_timeout
        - Checked-out accounting and status snapshots

    Attributes:
        _name: Pool identifier used in logs
        _engine: SQLAlchemy engine owning the physical connections
        _checked_out: Handles acquired and not yet released

    Example:
        >>> pool = SQLAlchemyConnectionPool("sqlite:///./bank.db", pool_size=5)
        >>> handle = pool.acquire()
        >>> pool.checked_out
        1
        >>> pool.release(handle)
    """

    def __init__(
        self,
        database_url: str,
        pool_name: str = "transfer-pool",
        pool_class: PoolClass = PoolClass.QUEUE,
        pool_size: int = 10,
        max_overflow: int = 0,
        pool_timeout: float = 30.0,
        pool_recycle: int = 3600,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ) -> None:
        self._name = pool_name
        self._pool_class = PoolClass(pool_class)
        self._pool_size = pool_size
        self._max_overflow = max_overflow
        self._pool_timeout = pool_timeout
        self._checked_out = 0
        self._lock = threading.Lock()

        engine_kwargs: Dict[str, Any] = {
            "echo": echo,
            "pool_pre_ping": pool_pre_ping,
            "pool_logging_name": pool_name,
        }
        if database_url.startswith("sqlite"):
            # Pooled SQLite connections may be returned from another thread
            engine_kwargs["connect_args"] = {"check_same_thread": False}

        if self._pool_class == PoolClass.QUEUE:
            engine_kwargs.update(
                poolclass=QueuePool,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
            )
        else:
            engine_kwargs["poolclass"] = NullPool

        try:
            self._engine: Engine = create_engine(database_url, **engine_kwargs)
        except (SQLAlchemyError, ImportError) as e:
            logger.error(f"Failed to create engine for pool '{pool_name}': {e}")
            raise DatabaseError(
                f"Could not create connection pool '{pool_name}': {e}",
                details={"pool": pool_name},
            ) from e

        if self._engine.dialect.name == "sqlite":
            _use_immediate_transactions(self._engine)

        logger.info(
            f"Created {self._pool_class.value} pool '{pool_name}' "
            f"(size={pool_size}, max_overflow={max_overflow}, timeout={pool_timeout}s)"
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "SQLAlchemyConnectionPool":
        """Build a pool from application settings."""
        return cls(
            database_url=settings.DATABASE_URL,
            pool_name=settings.DB_POOL_NAME,
            pool_class=settings.DB_POOL_CLASS,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
            echo=settings.DB_ECHO or settings.DEBUG,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def engine(self) -> Engine:
        return self._engine

    # ==========================================================================
    # CHECKOUT / CHECKIN
    # ==========================================================================

    def acquire(self) -> ConnectionHandle:
        """
        Borrow a connection, waiting at most ``pool_timeout`` seconds.

        Returns:
            Handle in auto-commit mode, owned by the caller

        Raises:
            PoolExhausted: On checkout timeout or when no connection
                can be established
        """
        started = time.perf_counter()
        try:
            connection = self._engine.connect()
        except PoolTimeoutError as e:
            logger.warning(
                f"Pool '{self._name}' exhausted: no connection within "
                f"{self._pool_timeout}s ({self.checked_out} checked out)"
            )
            raise PoolExhausted(
                f"No connection available from pool '{self._name}' "
                f"within {self._pool_timeout}s",
                details={"pool": self._name, "timeout_seconds": self._pool_timeout},
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Pool '{self._name}' could not open a connection: {e}")
            raise PoolExhausted(
                f"Could not obtain a connection from pool '{self._name}': {e}",
                details={"pool": self._name},
            ) from e

        with self._lock:
            self._checked_out += 1
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(f"Acquired connection from '{self._name}' in {elapsed_ms:.2f}ms")
        return ConnectionHandle(connection, pool_name=self._name)

    def release(self, handle: ConnectionHandle) -> None:
        """Close the handle back into the pool."""
        if handle.closed:
            return
        try:
            handle.close()
        finally:
            with self._lock:
                self._checked_out -= 1

    @property
    def checked_out(self) -> int:
        with self._lock:
            return self._checked_out

    def status(self) -> PoolStatus:
        """Snapshot pool usage."""
        queued = self._pool_class == PoolClass.QUEUE
        return PoolStatus(
            name=self._name,
            pool_class=self._pool_class,
            size=self._pool_size if queued else None,
            max_overflow=self._max_overflow if queued else None,
            checked_out=self.checked_out,
            detail=self._engine.pool.status(),
        )

    # ==========================================================================
    # LIFECYCLE
    # ==========================================================================

    def health_check(self) -> bool:
        """
        Verify database connectivity.

        Returns:
            True if a pooled connection can run ``SELECT 1``
        """
        try:
            handle = self.acquire()
        except PoolExhausted as e:
            logger.warning(f"Health check for '{self._name}' failed: {e}")
            return False
        try:
            handle.fetch_all(text(DatabaseConstants.HEALTH_CHECK_QUERY))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Health check for '{self._name}' failed: {e}")
            return False
        finally:
            self.release(handle)

    def create_schema(self) -> None:
        """Create all tables that do not exist yet."""
        SQLBase.metadata.create_all(self._engine)
        logger.info(f"Schema ensured on pool '{self._name}'")

    def drop_schema(self) -> None:
        """Drop all tables. Development and tests only."""
        SQLBase.metadata.drop_all(self._engine)

    def dispose(self) -> None:
        """Close pooled connections and dispose the engine."""
        self._engine.dispose()
        logger.info(f"Pool '{self._name}' disposed")
