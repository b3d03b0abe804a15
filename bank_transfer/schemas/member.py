# ==============================================================================
# MEMBER SCHEMA - Account Entity
# ==============================================================================

from __future__ import annotations

from pydantic import Field

from bank_transfer.schemas.base import BaseSchema


class Member(BaseSchema):
    """
    Member entity as seen by services.

    The balance is checked non-negative when a row is read. The
    transfer service refuses debits larger than the balance, so a
    negative value only appears through writes made outside it.
    """

    member_id: str = Field(
        ...,
        min_length=1,
        max_length=10,
        description="Unique member identifier",
    )
    money: int = Field(
        ...,
        ge=0,
        description="Balance in integer currency units",
    )
