# ==============================================================================
# CUSTOM EXCEPTIONS - Application Error Hierarchy
# ==============================================================================
# Structured exception classes for consistent error handling
# Repository errors describe data access; transfer errors are what callers see
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict, Optional

from bank_transfer.core.constants import ErrorCodes


class AppException(Exception):
    """
    Base exception for all application errors.

    Provides a consistent interface for error handling with:
    - Error code for programmatic identification
    - Detailed message and optional context

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error identifier
        details: Additional context dictionary

    Example:
        >>> raise AppException(
        ...     message="Something went wrong",
        ...     error_code="INTERNAL_ERROR",
        ... )
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        error_code: str = ErrorCodes.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to a serializable dictionary.

        Returns:
            Dictionary containing error details
        """
        return {
            "success": False,
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}')"
        )


# ==============================================================================
# DATABASE EXCEPTIONS
# ==============================================================================

class DatabaseError(AppException):
    """
    Raised when the engine or pool cannot be set up or torn down.
    """

    def __init__(
        self,
        message: str = "Database operation failed",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCodes.DATABASE_ERROR,
            details=details,
        )


# ==============================================================================
# REPOSITORY EXCEPTIONS
# ==============================================================================

class RepositoryError(AppException):
    """
    Raised when a repository operation fails.

    Repositories never manage transactions, so these errors only
    describe what went wrong with the statement itself. The caller
    holding the connection decides whether to roll back.

    Attributes:
        operation: Repository method that failed (find, update, save, ...)
    """

    def __init__(
        self,
        message: str = "Repository operation failed",
        operation: str = "unknown",
        error_code: str = ErrorCodes.REPOSITORY_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        _details = details or {}
        _details["operation"] = operation
        super().__init__(
            message=message,
            error_code=error_code,
            details=_details,
        )
        self.operation = operation


class RecordNotFoundError(RepositoryError):
    """Raised when no row matches the requested key."""

    def __init__(
        self,
        record_id: Any,
        operation: str = "find",
    ) -> None:
        super().__init__(
            message=f"Member not found: member_id={record_id}",
            operation=operation,
            error_code=ErrorCodes.RECORD_NOT_FOUND,
            details={"record_id": str(record_id)},
        )
        self.record_id = record_id


class StaleWriteError(RepositoryError):
    """Raised when an update keyed by id affected no row."""

    def __init__(
        self,
        record_id: Any,
        operation: str = "update",
    ) -> None:
        super().__init__(
            message=f"Update affected no rows: member_id={record_id}",
            operation=operation,
            error_code=ErrorCodes.STALE_WRITE,
            details={"record_id": str(record_id)},
        )
        self.record_id = record_id


class DuplicateRecordError(RepositoryError):
    """Raised when inserting a key that already exists."""

    def __init__(
        self,
        record_id: Any,
        operation: str = "save",
    ) -> None:
        super().__init__(
            message=f"Member already exists: member_id={record_id}",
            operation=operation,
            error_code=ErrorCodes.DUPLICATE_RECORD,
            details={"record_id": str(record_id)},
        )
        self.record_id = record_id


class DataIntegrityError(RepositoryError):
    """
    Raised when the data contradicts the key contract.

    Covers point lookups returning several rows, updates touching
    more than one row and rows failing entity validation.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            operation=operation,
            error_code=ErrorCodes.DATA_INTEGRITY_ERROR,
            details=details,
        )


# ==============================================================================
# TRANSFER EXCEPTIONS
# ==============================================================================

class TransferError(AppException):
    """
    Base exception for every failed transfer.

    Callers catch this single type; ``error_code`` tells the variants
    apart and ``details`` carries the transfer context (member ids and
    attempted amount) once :meth:`bind` has been called.
    """

    default_message = "Transfer failed"
    default_code = ErrorCodes.TRANSFER_FAILED

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message or self.default_message,
            error_code=self.default_code,
            details=details,
        )

    def bind(self, from_id: str, to_id: str, amount: int) -> "TransferError":
        """
        Attach the transfer request to the error details.

        Returns:
            The same exception, for ``raise exc.bind(...)``
        """
        self.details.setdefault("from_id", from_id)
        self.details.setdefault("to_id", to_id)
        self.details.setdefault("amount", amount)
        return self


class PoolExhausted(TransferError):
    """No connection could be obtained within the pool wait bound."""

    default_message = "No database connection available"
    default_code = ErrorCodes.POOL_EXHAUSTED


class TransactionStartFailed(TransferError):
    """The connection refused to leave auto-commit mode."""

    default_message = "Could not start transaction"
    default_code = ErrorCodes.TRANSACTION_START_FAILED


class EntityNotFound(TransferError):
    """A member referenced by the transfer does not exist."""

    default_code = ErrorCodes.ENTITY_NOT_FOUND

    def __init__(self, member_id: str) -> None:
        super().__init__(
            message=f"Member not found: {member_id}",
            details={"member_id": member_id},
        )
        self.member_id = member_id


class ValidationFailed(TransferError):
    """A business rule rejected the transfer."""

    default_code = ErrorCodes.VALIDATION_FAILED

    def __init__(
        self,
        reason: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        _details = details or {}
        _details["reason"] = reason
        super().__init__(
            message=f"Transfer validation failed: {reason}",
            details=_details,
        )
        self.reason = reason


class WriteFailed(TransferError):
    """A balance update did not complete."""

    default_message = "Balance update failed"
    default_code = ErrorCodes.WRITE_FAILED


class StaleWrite(WriteFailed):
    """A balance update matched no row."""

    default_message = "Balance update affected no rows"
    default_code = ErrorCodes.STALE_WRITE


class DataAccessFailed(TransferError):
    """Reading a member failed for a reason other than absence."""

    default_message = "Could not read member data"
    default_code = ErrorCodes.DATA_ACCESS_FAILED


class CommitFailed(TransferError):
    """
    Commit was rejected after the business logic succeeded.

    The outcome on the database is indeterminate; never retry
    automatically.
    """

    default_message = "Commit failed; transfer outcome is indeterminate"
    default_code = ErrorCodes.COMMIT_FAILED


class ReleaseFailed(TransferError):
    """Diagnostic only. Logged when returning a connection fails; never raised."""

    default_message = "Connection release failed"
    default_code = ErrorCodes.RELEASE_FAILED
