# ==============================================================================
# CONNECTION HANDLE - Borrowed Connection With Explicit Commit Mode
# ==============================================================================
# Wraps one pooled SQLAlchemy Connection and tracks its lifecycle:
#   acquired -> in_transaction -> committed | rolled_back -> released
# ==============================================================================

from __future__ import annotations

import enum
import logging
from typing import Any, Callable, List, Mapping, Optional, TypeVar

from sqlalchemy.engine import Connection, CursorResult, Row
from sqlalchemy.sql.base import Executable

logger = logging.getLogger(__name__)

R = TypeVar("R")


class HandleState(str, enum.Enum):
    """Lifecycle states of a borrowed connection."""
    ACQUIRED = "acquired"
    IN_TRANSACTION = "in_transaction"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    RELEASED = "released"


class ConnectionHandle:
    """
    Exclusively owned connection borrowed from a pool.

    A fresh handle is in auto-commit mode: every statement executed
    through it is committed on its own. ``set_transactional(True)``
    groups subsequent statements into one transaction that ends with
    :meth:`commit` or :meth:`rollback`.

    The handle is not thread-safe and must be used sequentially by
    the single caller that acquired it.

    Attributes:
        _connection: Underlying SQLAlchemy connection
        _transactional: True while auto-commit is disabled
        _state: Current lifecycle state

    Example:
        >>> handle = pool.acquire()
        >>> handle.set_transactional(True)
        >>> handle.execute(update_stmt)
        1
        >>> handle.commit()
        >>> pool.release(handle)
    """

    def __init__(self, connection: Connection, pool_name: str = "") -> None:
        self._connection = connection
        self._pool_name = pool_name
        self._transactional = False
        self._state = HandleState.ACQUIRED

    # ==========================================================================
    # STATE
    # ==========================================================================

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def autocommit(self) -> bool:
        """True when each statement commits on its own."""
        return not self._transactional

    @property
    def in_transaction(self) -> bool:
        """True when uncommitted work may be pending on the connection."""
        if self.closed:
            return False
        return self._connection.in_transaction()

    @property
    def closed(self) -> bool:
        return self._state is HandleState.RELEASED

    @property
    def pool_name(self) -> str:
        return self._pool_name

    # ==========================================================================
    # TRANSACTION CONTROL
    # ==========================================================================

    def set_transactional(self, enabled: bool) -> None:
        """
        Switch between auto-commit and explicit transaction mode.

        Disabling transactional mode discards any pending work with a
        rollback; it never commits implicitly.

        Args:
            enabled: True to disable auto-commit and begin a transaction
        """
        self._ensure_open()

        if enabled:
            if self._transactional:
                return
            if self._connection.in_transaction():
                self._connection.commit()
            self._connection.begin()
            self._transactional = True
            self._state = HandleState.IN_TRANSACTION
            return

        if not self._transactional:
            return
        if self._connection.in_transaction():
            logger.debug(f"Discarding pending work on {self._pool_name} connection")
            self._connection.rollback()
            if self._state is HandleState.IN_TRANSACTION:
                self._state = HandleState.ROLLED_BACK
        self._transactional = False

    def commit(self) -> None:
        """Commit the current transaction."""
        self._ensure_transactional("commit")
        self._connection.commit()
        self._state = HandleState.COMMITTED

    def rollback(self) -> None:
        """Roll back the current transaction."""
        self._ensure_transactional("rollback")
        self._connection.rollback()
        self._state = HandleState.ROLLED_BACK

    def close(self) -> None:
        """
        Return the connection to its pool.

        Safe to call more than once. The handle is considered released
        even if the driver fails while closing.
        """
        if self.closed:
            return
        try:
            self._connection.close()
        finally:
            self._transactional = False
            self._state = HandleState.RELEASED

    # ==========================================================================
    # STATEMENT EXECUTION
    # ==========================================================================

    def fetch_all(
        self,
        statement: Executable,
        params: Optional[Mapping[str, Any]] = None,
    ) -> List[Row]:
        """Execute a query and return all rows."""
        return self._run(statement, params, lambda result: list(result.all()))

    def execute(
        self,
        statement: Executable,
        params: Optional[Mapping[str, Any]] = None,
    ) -> int:
        """Execute a DML statement and return the affected row count."""
        return self._run(statement, params, lambda result: result.rowcount)

    def _run(
        self,
        statement: Executable,
        params: Optional[Mapping[str, Any]],
        consume: Callable[[CursorResult], R],
    ) -> R:
        self._ensure_open()
        try:
            value = consume(self._connection.execute(statement, params))
        except Exception:
            if not self._transactional and self._connection.in_transaction():
                self._connection.rollback()
            raise
        if not self._transactional and self._connection.in_transaction():
            self._connection.commit()
        return value

    # ==========================================================================
    # HELPERS
    # ==========================================================================

    def _ensure_open(self) -> None:
        if self.closed:
            raise RuntimeError("Connection handle already released to the pool")

    def _ensure_transactional(self, action: str) -> None:
        self._ensure_open()
        if not self._transactional:
            raise RuntimeError(f"Cannot {action} in auto-commit mode")

    def __repr__(self) -> str:
        return (
            f"<ConnectionHandle(pool={self._pool_name!r}, "
            f"state={self._state.value}, autocommit={self.autocommit})>"
        )
