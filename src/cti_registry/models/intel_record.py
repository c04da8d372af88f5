# src/cti_registry/models/intel_record.py
"""SQLAlchemy model for submitted threat-intelligence records."""

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from cti_registry.db.session import Base


class IntelRecord(Base):
    """One community-submitted intelligence entry.

    The payload itself lives in the content store; only its reference is kept
    here. Identity fields never change after insert, only the tallies and the
    ``active`` flag do.
    """

    __tablename__ = "intel_record"
    __table_args__ = (
        CheckConstraint("upvotes >= 0", name="ck_intel_record_upvotes"),
        CheckConstraint("downvotes >= 0", name="ck_intel_record_downvotes"),
        Index("ix_intel_record_active_id", "active", "id"),
    )

    # Assigned by the registry service, dense and sequential from 1.
    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    submitter: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    content_ref: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    upvotes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    downvotes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Soft-delete flag; inactive rows are invisible to every registry operation.
    active: Mapped[bool] = mapped_column(default=True, nullable=False)
