# ==============================================================================
# DOMAIN MODELS PACKAGE INITIALIZATION
# ==============================================================================

from bank_transfer.domain_models.base import SQLBase
from bank_transfer.domain_models.member import MemberRecord, member_table

__all__ = [
    "SQLBase",
    "MemberRecord",
    "member_table",
]
