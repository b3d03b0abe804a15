# ==============================================================================
# REPOSITORIES PACKAGE INITIALIZATION
# ==============================================================================

from bank_transfer.database.repositories.member_repository import MemberRepository

__all__ = [
    "MemberRepository",
]
