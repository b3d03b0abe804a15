# ==============================================================================
# TRANSFER SCHEMAS - Request / Receipt
# ==============================================================================

from __future__ import annotations

from pydantic import ConfigDict, Field, StrictInt, model_validator

from bank_transfer.schemas.base import BaseSchema


class TransferRequest(BaseSchema):
    """Schema for a transfer between two members."""

    model_config = ConfigDict(frozen=True)

    from_id: str = Field(
        ...,
        min_length=1,
        description="Member debited by the transfer",
    )
    to_id: str = Field(
        ...,
        min_length=1,
        description="Member credited by the transfer",
    )
    amount: StrictInt = Field(
        ...,
        gt=0,
        description="Amount in integer currency units",
    )

    @model_validator(mode="after")
    def check_distinct_members(self) -> "TransferRequest":
        """Reject self-transfers; reading one balance twice would mint money."""
        if self.from_id == self.to_id:
            raise ValueError("source and destination must be different members")
        return self


class TransferReceipt(BaseSchema):
    """Schema describing a committed transfer."""

    from_id: str = Field(..., description="Debited member")
    to_id: str = Field(..., description="Credited member")
    amount: int = Field(..., description="Transferred amount")
    from_balance: int = Field(..., description="Source balance after commit")
    to_balance: int = Field(..., description="Destination balance after commit")
