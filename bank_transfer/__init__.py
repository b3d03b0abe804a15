# ==============================================================================
# BANK TRANSFER PACKAGE INITIALIZATION
# ==============================================================================
# Atomic transfers between member accounts over a pooled database connection
# ==============================================================================

"""
Bank Transfer
=============

Moves money between two member accounts inside one database
transaction on one connection borrowed from a shared pool.

Features:
---------
- Bounded connection pool (SQLAlchemy QueuePool or NullPool)
- Repository Pattern over a caller-owned connection
- Unit of Work with guaranteed connection release
- Typed error hierarchy for every failure path

Usage:
------
    from bank_transfer.main import create_transfer_service

    service = create_transfer_service()
    receipt = service.transfer("memberA", "memberB", 2000)
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
