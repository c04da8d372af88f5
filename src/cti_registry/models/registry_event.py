"""SQLAlchemy model for the registry's outbound event log."""

from sqlalchemy import CHAR, VARCHAR, Integer, SmallInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from cti_registry.db.session import Base

EVENT_STATUS_PENDING = "pending"
EVENT_STATUS_DELIVERED = "delivered"
EVENT_STATUS_FAILED = "failed"


class RegistryEvent(Base):
    """Notification appended in the same transaction as the mutation it describes."""

    __tablename__ = "registry_event"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_type: Mapped[str] = mapped_column(Text, nullable=False)  # 'Submitted' or 'Voted'
    event_hash: Mapped[str] = mapped_column(
        CHAR(64), unique=True, nullable=False
    )  # BLAKE3 hash of the canonical payload
    payload: Mapped[str] = mapped_column(Text, nullable=False)  # canonical JSON
    status: Mapped[str] = mapped_column(
        VARCHAR(20), nullable=False, default=EVENT_STATUS_PENDING
    )  # 'pending', 'delivered', 'failed'
    retry_count: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)
