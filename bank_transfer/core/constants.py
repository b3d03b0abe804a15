# ==============================================================================
# APPLICATION CONSTANTS - Centralized Configuration Values
# ==============================================================================
# Immutable constants used throughout the application
# ==============================================================================

from __future__ import annotations

from typing import Final


# ==============================================================================
# DATABASE CONSTANTS
# ==============================================================================

class DatabaseConstants:
    """Database-related constants."""

    MEMBER_TABLE: Final[str] = "member"
    MEMBER_ID_MAX_LENGTH: Final[int] = 10

    HEALTH_CHECK_QUERY: Final[str] = "SELECT 1"


# ==============================================================================
# TRANSFER CONSTANTS
# ==============================================================================

class TransferConstants:
    """Transfer policy constants."""

    # Destination id reserved for exercising the mid-transfer failure path
    REJECTED_MEMBER_ID: Final[str] = "ex"


# ==============================================================================
# ERROR CODES
# ==============================================================================

class ErrorCodes:
    """Machine-readable error identifiers."""

    INTERNAL_ERROR: Final[str] = "INTERNAL_ERROR"
    DATABASE_ERROR: Final[str] = "DATABASE_ERROR"

    # Repository
    REPOSITORY_ERROR: Final[str] = "REPOSITORY_ERROR"
    RECORD_NOT_FOUND: Final[str] = "RECORD_NOT_FOUND"
    STALE_WRITE: Final[str] = "STALE_WRITE"
    DUPLICATE_RECORD: Final[str] = "DUPLICATE_RECORD"
    DATA_INTEGRITY_ERROR: Final[str] = "DATA_INTEGRITY_ERROR"

    # Transfer
    TRANSFER_FAILED: Final[str] = "TRANSFER_FAILED"
    POOL_EXHAUSTED: Final[str] = "POOL_EXHAUSTED"
    TRANSACTION_START_FAILED: Final[str] = "TRANSACTION_START_FAILED"
    ENTITY_NOT_FOUND: Final[str] = "ENTITY_NOT_FOUND"
    VALIDATION_FAILED: Final[str] = "VALIDATION_FAILED"
    WRITE_FAILED: Final[str] = "WRITE_FAILED"
    DATA_ACCESS_FAILED: Final[str] = "DATA_ACCESS_FAILED"
    COMMIT_FAILED: Final[str] = "COMMIT_FAILED"
    RELEASE_FAILED: Final[str] = "RELEASE_FAILED"


# ==============================================================================
# LOGGING CONSTANTS
# ==============================================================================

class LoggingConstants:
    """Logging-related constants."""

    ROOT_LOGGER: Final[str] = "bank_transfer"
    DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
