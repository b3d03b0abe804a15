# ==============================================================================
# MEMBER MODEL - Account Table
# ==============================================================================
# member(member_id varchar(10) primary key, money integer not null default 0)
# ==============================================================================

from __future__ import annotations

from sqlalchemy import Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from bank_transfer.core.constants import DatabaseConstants
from bank_transfer.domain_models.base import SQLBase


class MemberRecord(SQLBase):
    """
    Account row holding a member's balance.

    Attributes:
        member_id: Unique member key
        money: Current balance in integer currency units
    """

    __tablename__ = DatabaseConstants.MEMBER_TABLE

    member_id: Mapped[str] = mapped_column(
        String(DatabaseConstants.MEMBER_ID_MAX_LENGTH),
        primary_key=True,
    )
    money: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    def __repr__(self) -> str:
        return f"<MemberRecord(member_id={self.member_id}, money={self.money})>"


member_table = MemberRecord.__table__
