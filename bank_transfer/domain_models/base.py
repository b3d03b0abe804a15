# ==============================================================================
# BASE MODEL - SQLAlchemy Foundation
# ==============================================================================
# Declarative base shared by all table definitions
# ==============================================================================

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import DeclarativeBase


class SQLBase(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Only the table metadata is used at runtime: repositories build
    Core statements against ``Model.__table__`` and execute them on a
    connection supplied by the caller, never through an ORM session.
    """

    def to_dict(self) -> dict[str, Any]:
        """Convert model instance to dictionary."""
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
        }
