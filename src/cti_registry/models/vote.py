# src/cti_registry/models/vote.py
"""Models capturing credibility votes on records."""

from sqlalchemy import BigInteger, Boolean, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from cti_registry.db.session import Base


class RecordVote(Base):
    """A single voter's verdict on a record.

    Votes are final: there is no re-voting and no retraction.
    """

    __tablename__ = "record_vote"
    __table_args__ = (Index("ix_record_vote_record_id", "record_id"),)

    record_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("intel_record.id"),
        primary_key=True,
    )
    voter: Mapped[str] = mapped_column(Text, primary_key=True)

    # Composite primary key prevents duplicate votes from the same identity.

    is_upvote: Mapped[bool] = mapped_column(Boolean, nullable=False)
