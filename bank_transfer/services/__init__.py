# ==============================================================================
# SERVICES PACKAGE INITIALIZATION
# ==============================================================================
# Business logic layer
# ==============================================================================

from bank_transfer.services.transfer_service import TransferService

__all__ = [
    "TransferService",
]
