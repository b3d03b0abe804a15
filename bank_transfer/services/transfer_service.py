# ==============================================================================
# TRANSFER SERVICE - Atomic Account Transfer
# ==============================================================================
# Debits one member and credits another inside a single transaction on a
# single pooled connection: both writes commit together or neither is kept.
# ==============================================================================

from __future__ import annotations

import logging
from typing import Dict, Optional, Union

from pydantic import ValidationError as SchemaValidationError

from bank_transfer.core.constants import TransferConstants
from bank_transfer.core.exceptions import (
    DataAccessFailed,
    EntityNotFound,
    RecordNotFoundError,
    RepositoryError,
    StaleWrite,
    StaleWriteError,
    TransferError,
    ValidationFailed,
    WriteFailed,
)
from bank_transfer.core.settings import Settings
from bank_transfer.database.connection import ConnectionHandle
from bank_transfer.database.pool import BaseConnectionPool
from bank_transfer.database.repositories.member_repository import MemberRepository
from bank_transfer.database.unit_of_work.uow import UnitOfWork
from bank_transfer.schemas.member import Member
from bank_transfer.schemas.transfer import TransferReceipt, TransferRequest

logger = logging.getLogger(__name__)

TransferOutcome = Union[TransferReceipt, TransferError]


class TransferService:
    """
    Coordinates money transfers between members.

    Each call borrows exactly one connection, disables auto-commit,
    runs read, read, funds check, debit, validate, credit on that
    connection and commits. Any failure rolls the transaction back.
    The connection is returned to the pool with auto-commit restored
    on every path.

    Attributes:
        _pool: Pool the connection is borrowed from
        _repository: Member data access
        _rejected_member_id: Destination id that fails validation
        _lock_ordering: Read both members FOR UPDATE in ascending id order

    Example:
        >>> service = TransferService(pool, MemberRepository())
        >>> receipt = service.transfer("memberA", "memberB", 2000)
        >>> receipt.from_balance
        8000
    """

    def __init__(
        self,
        pool: BaseConnectionPool,
        repository: MemberRepository,
        rejected_member_id: str = TransferConstants.REJECTED_MEMBER_ID,
        lock_ordering: bool = True,
    ) -> None:
        self._pool = pool
        self._repository = repository
        self._rejected_member_id = rejected_member_id
        self._lock_ordering = lock_ordering

    @classmethod
    def from_settings(
        cls,
        pool: BaseConnectionPool,
        repository: MemberRepository,
        settings: Settings,
    ) -> "TransferService":
        """Build a service using the transfer policy from settings."""
        return cls(
            pool=pool,
            repository=repository,
            rejected_member_id=settings.TRANSFER_REJECTED_MEMBER_ID,
            lock_ordering=settings.TRANSFER_LOCK_ORDERING,
        )

    # ==========================================================================
    # PUBLIC API
    # ==========================================================================

    def transfer(self, from_id: str, to_id: str, amount: int) -> TransferReceipt:
        """
        Move ``amount`` from one member to another atomically.

        Args:
            from_id: Member to debit
            to_id: Member to credit
            amount: Positive integer amount

        Returns:
            Receipt with both balances after commit

        Raises:
            PoolExhausted: No connection within the pool wait bound
            TransactionStartFailed: Auto-commit could not be disabled
            EntityNotFound: Either member does not exist
            ValidationFailed: Invalid request, insufficient funds or rejected destination
            WriteFailed: A balance update failed (StaleWrite if no row matched)
            DataAccessFailed: A member could not be read
            CommitFailed: Commit rejected; outcome indeterminate
            TransferError: Any other failure, after rollback
        """
        request = self._build_request(from_id, to_id, amount)
        logger.info(f"Transfer started: {from_id} -> {to_id} amount={amount}")

        try:
            with UnitOfWork(self._pool) as uow:
                outcome = self._execute(uow.handle, request)
                if isinstance(outcome, TransferError):
                    uow.rollback()
                    raise outcome
                uow.commit()
        except TransferError as e:
            e.bind(from_id, to_id, amount)
            logger.warning(f"Transfer failed [{e.error_code}]: {e.message} {e.details}")
            raise
        except Exception as e:
            logger.exception(f"Transfer aborted by unexpected error: {e}")
            raise TransferError(f"Transfer aborted: {e}").bind(
                from_id, to_id, amount
            ) from e

        logger.info(
            f"Transfer committed: {from_id}={outcome.from_balance}, "
            f"{to_id}={outcome.to_balance}"
        )
        return outcome

    # ==========================================================================
    # BUSINESS LOGIC
    # ==========================================================================

    def _execute(
        self,
        handle: ConnectionHandle,
        request: TransferRequest,
    ) -> TransferOutcome:
        """
        Run the transfer on ``handle`` without ending the transaction.

        Returns the failure instead of raising it, so the caller
        decides on rollback with a plain branch.
        """
        try:
            members = self._load_members(handle, request)
        except RepositoryError as e:
            return self._translate(e)

        source = members[request.from_id]
        destination = members[request.to_id]
        from_balance = source.money - request.amount
        to_balance = destination.money + request.amount

        failure = self._check_funds(source, request.amount)
        if failure is not None:
            return failure

        try:
            self._repository.update(handle, source.member_id, from_balance)
        except RepositoryError as e:
            return self._translate(e)

        failure = self._validate_destination(destination)
        if failure is not None:
            return failure

        try:
            self._repository.update(handle, destination.member_id, to_balance)
        except RepositoryError as e:
            return self._translate(e)

        return TransferReceipt(
            from_id=source.member_id,
            to_id=destination.member_id,
            amount=request.amount,
            from_balance=from_balance,
            to_balance=to_balance,
        )

    def _load_members(
        self,
        handle: ConnectionHandle,
        request: TransferRequest,
    ) -> Dict[str, Member]:
        if self._lock_ordering:
            member_ids = sorted((request.from_id, request.to_id))
        else:
            member_ids = [request.from_id, request.to_id]

        return {
            member_id: self._repository.find_by_id(
                handle, member_id, for_update=self._lock_ordering
            )
            for member_id in member_ids
        }

    @staticmethod
    def _check_funds(source: Member, amount: int) -> Optional[ValidationFailed]:
        if source.money < amount:
            return ValidationFailed(
                f"insufficient funds in member '{source.member_id}'",
                details={"member_id": source.member_id, "balance": source.money},
            )
        return None

    def _validate_destination(self, destination: Member) -> Optional[ValidationFailed]:
        if destination.member_id == self._rejected_member_id:
            return ValidationFailed(
                f"transfers to member '{destination.member_id}' are rejected",
                details={"member_id": destination.member_id},
            )
        return None

    # ==========================================================================
    # HELPERS
    # ==========================================================================

    @staticmethod
    def _build_request(from_id: str, to_id: str, amount: int) -> TransferRequest:
        try:
            return TransferRequest(from_id=from_id, to_id=to_id, amount=amount)
        except SchemaValidationError as e:
            reason = "; ".join(error["msg"] for error in e.errors())
            raise ValidationFailed(reason).bind(from_id, to_id, amount) from e

    @staticmethod
    def _translate(error: RepositoryError) -> TransferError:
        """Map a repository error onto the transfer error callers see."""
        if isinstance(error, RecordNotFoundError):
            translated: TransferError = EntityNotFound(str(error.record_id))
        elif isinstance(error, StaleWriteError):
            translated = StaleWrite(error.message, details=dict(error.details))
        elif error.operation == "update":
            translated = WriteFailed(error.message, details=dict(error.details))
        else:
            translated = DataAccessFailed(error.message, details=dict(error.details))
        translated.__cause__ = error
        return translated
