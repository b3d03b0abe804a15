# ==============================================================================
# SCHEMAS PACKAGE INITIALIZATION
# ==============================================================================

from bank_transfer.schemas.base import BaseSchema
from bank_transfer.schemas.member import Member
from bank_transfer.schemas.transfer import TransferReceipt, TransferRequest

__all__ = [
    "BaseSchema",
    "Member",
    "TransferRequest",
    "TransferReceipt",
]
