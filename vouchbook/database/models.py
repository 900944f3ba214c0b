"""
vouchbook.database.models — SQLAlchemy 2.0 Data Models
=======================================================

Every community store holds the same two tables:

- users    — running vouch/referral counters, one row per vouched member
- vouches  — append-only vouch journal (deleted only by a reset)

User ids are Discord snowflakes stored as TEXT.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Vouchbook ORM models."""


# ---------------------------------------------------------------------------
# Users: aggregate counters
# ---------------------------------------------------------------------------
class UserAggregate(Base):
    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String, primary_key=True)
    vouch_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    referral_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    __table_args__ = (
        Index("ix_users_vouch_count", "vouch_count"),
    )

    def __repr__(self) -> str:
        return (
            f"<UserAggregate user_id={self.user_id} "
            f"vouches={self.vouch_count} referrals={self.referral_count}>"
        )


# ---------------------------------------------------------------------------
# Vouches: append-only event log
# ---------------------------------------------------------------------------
class Vouch(Base):
    __tablename__ = "vouches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vouched_for: Mapped[str] = mapped_column(String, nullable=False)
    vouched_by: Mapped[str] = mapped_column(String, nullable=False)
    referral: Mapped[str] = mapped_column(String, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("ix_vouches_vouched_for", "vouched_for"),
        # AUTOINCREMENT: ids are never reused after a reset deletes rows
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<Vouch id={self.id} for={self.vouched_for} by={self.vouched_by}>"
