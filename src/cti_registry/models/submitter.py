# src/cti_registry/models/submitter.py
"""Per-identity bookkeeping."""

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from cti_registry.db.session import Base


class SubmitterStats(Base):
    """Submission counter kept for reporting only, never for access control."""

    __tablename__ = "submitter_stats"

    identity: Mapped[str] = mapped_column(Text, primary_key=True)
    submission_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
