# ==============================================================================
# DATABASE PACKAGE INITIALIZATION
# ==============================================================================
# Connection pool, connection handles, repositories and unit of work
# ==============================================================================

"""
Database Module
===============

Key Components:
- Pool: Bounded connection checkout (SQLAlchemy engine pool)
- Connection: Borrowed handle with explicit auto-commit control
- Factory: Pool creation and lifecycle
- Repositories: Data access on a caller-owned connection
- Unit of Work: Transaction boundary with guaranteed release
"""

from bank_transfer.database.connection import ConnectionHandle, HandleState
from bank_transfer.database.pool import (
    BaseConnectionPool,
    PoolStatus,
    SQLAlchemyConnectionPool,
)
from bank_transfer.database.factory import DatabaseFactory

__all__ = [
    "ConnectionHandle",
    "HandleState",
    "BaseConnectionPool",
    "PoolStatus",
    "SQLAlchemyConnectionPool",
    "DatabaseFactory",
]
