# ==============================================================================
# CORE PACKAGE INITIALIZATION
# ==============================================================================
# Core utilities: Settings, Exceptions, Constants, Logging
# ==============================================================================

"""
Core Module
===========

Contains core utilities and configurations for the application:
- settings: Environment configuration management
- exceptions: Custom exception classes
- constants: Application-wide constants
- logging: Package logger setup
"""

from bank_transfer.core.settings import settings, get_settings, Settings, PoolClass
from bank_transfer.core.exceptions import (
    AppException,
    DatabaseError,
    RepositoryError,
    RecordNotFoundError,
    StaleWriteError,
    DuplicateRecordError,
    DataIntegrityError,
    TransferError,
    PoolExhausted,
    TransactionStartFailed,
    EntityNotFound,
    ValidationFailed,
    WriteFailed,
    StaleWrite,
    DataAccessFailed,
    CommitFailed,
    ReleaseFailed,
)
from bank_transfer.core.logging import setup_logging, get_logger

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "PoolClass",
    "AppException",
    "DatabaseError",
    "RepositoryError",
    "RecordNotFoundError",
    "StaleWriteError",
    "DuplicateRecordError",
    "DataIntegrityError",
    "TransferError",
    "PoolExhausted",
    "TransactionStartFailed",
    "EntityNotFound",
    "ValidationFailed",
    "WriteFailed",
    "StaleWrite",
    "DataAccessFailed",
    "CommitFailed",
    "ReleaseFailed",
    "setup_logging",
    "get_logger",
]
