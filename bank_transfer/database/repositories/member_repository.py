# ==============================================================================
# MEMBER REPOSITORY - Balance Reads and Writes on a Caller-Owned Connection
# ==============================================================================
# Every method takes the connection handle as its first argument.
# The repository never acquires, commits, rolls back or closes a connection.
# ==============================================================================

from __future__ import annotations

import logging
from typing import List

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Row
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from bank_transfer.core.exceptions import (
    DataIntegrityError,
    DuplicateRecordError,
    RecordNotFoundError,
    RepositoryError,
    StaleWriteError,
)
from bank_transfer.database.connection import ConnectionHandle
from bank_transfer.domain_models.member import member_table
from bank_transfer.schemas.member import Member

logger = logging.getLogger(__name__)


class MemberRepository:
    """
    Data access for the ``member`` table.

    Transaction-agnostic: statements run inside whatever transaction
    the supplied handle has open, so several calls can be composed
    into one atomic unit by the caller.

    Example:
        >>> repo = MemberRepository()
        >>> member = repo.find_by_id(handle, "memberA")
        >>> repo.update(handle, "memberA", member.money - 1000)
    """

    def save(self, handle: ConnectionHandle, member: Member) -> Member:
        """
        Insert a new member.

        Raises:
            DuplicateRecordError: If the member id is taken
            RepositoryError: On any other driver failure
        """
        stmt = insert(member_table).values(
            member_id=member.member_id,
            money=member.money,
        )
        try:
            handle.execute(stmt)
        except IntegrityError as e:
            raise DuplicateRecordError(member.member_id) from e
        except SQLAlchemyError as e:
            raise self._wrap(e, "save", member.member_id) from e
        return member

    def find_by_id(
        self,
        handle: ConnectionHandle,
        member_id: str,
        for_update: bool = False,
    ) -> Member:
        """
        Point lookup by member id.

        Args:
            handle: Caller-owned connection
            member_id: Member key
            for_update: Lock the row until the caller's transaction ends

        Returns:
            The member

        Raises:
            RecordNotFoundError: If no row matches
            DataIntegrityError: If several rows match or the row is invalid
            RepositoryError: On driver failure
        """
        stmt = select(member_table.c.member_id, member_table.c.money).where(
            member_table.c.member_id == member_id
        )
        if for_update:
            stmt = stmt.with_for_update()

        try:
            rows = handle.fetch_all(stmt)
        except SQLAlchemyError as e:
            raise self._wrap(e, "find", member_id) from e

        if not rows:
            raise RecordNotFoundError(member_id)
        if len(rows) > 1:
            raise DataIntegrityError(
                f"Expected one member for member_id={member_id}, found {len(rows)}",
                operation="find",
                details={"record_id": member_id, "row_count": len(rows)},
            )
        return self._to_entity(rows[0])

    def find_all(self, handle: ConnectionHandle) -> List[Member]:
        """Return every member ordered by id."""
        stmt = select(member_table.c.member_id, member_table.c.money).order_by(
            member_table.c.member_id
        )
        try:
            rows = handle.fetch_all(stmt)
        except SQLAlchemyError as e:
            raise self._wrap(e, "find_all", None) from e
        return [self._to_entity(row) for row in rows]

    def update(self, handle: ConnectionHandle, member_id: str, money: int) -> None:
        """
        Overwrite one member's balance.

        Raises:
            StaleWriteError: If no row was updated
            DataIntegrityError: If more than one row was updated
            RepositoryError: On driver failure
        """
        stmt = (
            update(member_table)
            .where(member_table.c.member_id == member_id)
            .values(money=money)
        )
        try:
            rowcount = handle.execute(stmt)
        except SQLAlchemyError as e:
            raise self._wrap(e, "update", member_id) from e

        if rowcount == 0:
            raise StaleWriteError(member_id)
        if rowcount > 1:
            raise DataIntegrityError(
                f"Update of member_id={member_id} touched {rowcount} rows",
                operation="update",
                details={"record_id": member_id, "row_count": rowcount},
            )
        logger.debug(f"Updated member {member_id}: money={money}")

    def delete(self, handle: ConnectionHandle, member_id: str) -> None:
        """
        Delete one member.

        Raises:
            RecordNotFoundError: If no row was deleted
        """
        stmt = delete(member_table).where(member_table.c.member_id == member_id)
        try:
            rowcount = handle.execute(stmt)
        except SQLAlchemyError as e:
            raise self._wrap(e, "delete", member_id) from e

        if rowcount == 0:
            raise RecordNotFoundError(member_id, operation="delete")

    # ==========================================================================
    # HELPERS
    # ==========================================================================

    def _to_entity(self, row: Row) -> Member:
        try:
            return Member.model_validate(dict(row._mapping))
        except SchemaValidationError as e:
            raise DataIntegrityError(
                f"Invalid member row: {e.errors()[0]['msg']}",
                operation="find",
                details={"record_id": row.member_id},
            ) from e

    @staticmethod
    def _wrap(error: SQLAlchemyError, operation: str, member_id) -> RepositoryError:
        logger.error(f"Member {operation} failed for member_id={member_id}: {error}")
        return RepositoryError(
            f"Member {operation} failed: {error}",
            operation=operation,
            details={"record_id": str(member_id)},
        )
