# ==============================================================================
# UNIT OF WORK PACKAGE INITIALIZATION
# ==============================================================================

"""
Unit of Work Pattern Implementation
===================================

Provides transactional consistency across repository operations:
- UnitOfWork: Owns one pooled connection for one transaction
"""

from bank_transfer.database.unit_of_work.uow import AbstractUnitOfWork, UnitOfWork

__all__ = [
    "AbstractUnitOfWork",
    "UnitOfWork",
]
