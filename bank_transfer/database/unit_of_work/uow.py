# ==============================================================================
# UNIT OF WORK - Transaction Coordination
# ==============================================================================
# Scoped ownership of one pooled connection with auto-commit disabled.
# Leaving the block always restores auto-commit and returns the connection.
# ==============================================================================

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Type

from bank_transfer.core.exceptions import (
    CommitFailed,
    ReleaseFailed,
    TransactionStartFailed,
)
from bank_transfer.database.connection import ConnectionHandle
from bank_transfer.database.pool import BaseConnectionPool

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """
    Abstract Unit of Work pattern interface.

    Defines the contract for managing a transactional boundary
    around one borrowed connection.
    """

    @abstractmethod
    def __enter__(self) -> "AbstractUnitOfWork":
        """Enter transactional context."""
        pass

    @abstractmethod
    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Any,
    ) -> None:
        """Exit transactional context."""
        pass

    @abstractmethod
    def commit(self) -> None:
        """Commit the transaction."""
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Rollback the transaction."""
        pass


class UnitOfWork(AbstractUnitOfWork):
    """
    Concrete Unit of Work over a connection pool.

    Entering acquires a handle and disables auto-commit. The block
    must end the transaction with :meth:`commit` or :meth:`rollback`;
    if an exception escapes first, exit rolls back. Exit then restores
    auto-commit and returns the handle to the pool on every path.

    Failure mapping:
        - acquire fails: ``PoolExhausted`` from the pool, nothing to release
        - begin fails: handle released, ``TransactionStartFailed``
        - commit fails: ``CommitFailed``, no rollback attempted
        - rollback fails: logged and suppressed
        - release fails: logged as ``ReleaseFailed`` and suppressed

    Example:
        >>> with UnitOfWork(pool) as uow:
        ...     repo.update(uow.handle, "memberA", 8000)
        ...     uow.commit()
    """

    def __init__(self, pool: BaseConnectionPool) -> None:
        """
        Initialize Unit of Work.

        Args:
            pool: Pool the connection is borrowed from
        """
        self._pool = pool
        self._handle: Optional[ConnectionHandle] = None
        self._completed = False
        self._is_active = False

    @property
    def handle(self) -> ConnectionHandle:
        """Connection owned by this unit of work."""
        if self._handle is None or not self._is_active:
            raise RuntimeError("Unit of work is not active")
        return self._handle

    @property
    def is_active(self) -> bool:
        """Check if unit of work holds a connection."""
        return self._is_active

    # ==========================================================================
    # CONTEXT MANAGEMENT
    # ==========================================================================

    def __enter__(self) -> "UnitOfWork":
        self._handle = self._pool.acquire()
        try:
            self._handle.set_transactional(True)
        except Exception as e:
            logger.error(f"Could not disable auto-commit: {e}")
            self._release()
            self._handle = None
            raise TransactionStartFailed(
                f"Could not start transaction: {e}"
            ) from e

        self._completed = False
        self._is_active = True
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Any,
    ) -> None:
        try:
            if not self._completed:
                if exc_type is None:
                    logger.warning("Unit of work left without commit; rolling back")
                self.rollback()
        finally:
            self._release()
            self._is_active = False

    # ==========================================================================
    # TRANSACTION CONTROL
    # ==========================================================================

    def commit(self) -> None:
        """
        Commit the transaction.

        Raises:
            CommitFailed: If the database rejects the commit. The
                outcome is then indeterminate and is not rolled back.
        """
        self._completed = True
        try:
            self.handle.commit()
        except Exception as e:
            logger.error(f"Commit failed: {e}")
            raise CommitFailed(f"Commit failed: {e}") from e

    def rollback(self) -> None:
        """
        Rollback the transaction.

        A failing rollback is logged and suppressed so the error that
        caused it stays the one reported.
        """
        self._completed = True
        try:
            self.handle.rollback()
        except Exception as e:
            logger.warning(f"Rollback failed and was suppressed: {e}", exc_info=True)

    # ==========================================================================
    # RELEASE
    # ==========================================================================

    def _release(self) -> None:
        handle = self._handle
        if handle is None:
            return

        try:
            handle.set_transactional(False)
        except Exception as e:
            self._log_release_failure("restore auto-commit", e)

        try:
            self._pool.release(handle)
        except Exception as e:
            self._log_release_failure("return connection", e)

    @staticmethod
    def _log_release_failure(step: str, error: Exception) -> None:
        failure = ReleaseFailed(
            f"Could not {step}: {error}",
            details={"step": step},
        )
        logger.warning(f"{failure.error_code}: {failure.message}", exc_info=error)
