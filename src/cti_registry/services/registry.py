"""Registry state machine for community-submitted threat intelligence.

All mutations go through :class:`RegistryService` and are serialized behind a
single process-wide writer lock, each inside one database transaction.
Reads return frozen snapshots so callers never see a half-applied write.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from cti_registry.db.time import as_utc, utcnow
from cti_registry.models import IntelRecord, RecordVote, SubmitterStats
from cti_registry.services.errors import (
    AlreadyVotedError,
    InvalidArgumentError,
    RecordNotFoundError,
    SelfVoteForbiddenError,
)
from cti_registry.services.events import EventSink

MIN_LIST_LIMIT = 1
MAX_LIST_LIMIT = 100
SUBMIT_ATTEMPTS = 3

logger = logging.getLogger(__name__)

_WRITER_LOCK = threading.RLock()


@dataclass(frozen=True)
class RecordSnapshot:
    """Immutable copy of a record taken in a single read."""

    id: int
    submitter: str
    content_ref: str
    category: str
    title: str
    created_at: datetime
    upvotes: int
    downvotes: int
    active: bool

    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes

    @classmethod
    def from_row(cls, row: IntelRecord) -> RecordSnapshot:
        return cls(
            id=row.id,
            submitter=row.submitter,
            content_ref=row.content_ref,
            category=row.category,
            title=row.title,
            created_at=as_utc(row.created_at),
            upvotes=row.upvotes,
            downvotes=row.downvotes,
            active=row.active,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the external representation of the record."""
        return asdict(self)


def _require_text(value: object, message: str) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidArgumentError(message)
    return value


def _validate_limit(limit: int) -> None:
    if limit < MIN_LIST_LIMIT or limit > MAX_LIST_LIMIT:
        raise InvalidArgumentError("Invalid limit")


class RegistryService:
    """Submission, voting and retrieval over the intelligence ledger."""

    def __init__(self, db: Session, events: EventSink | None = None) -> None:
        self.db = db
        self.events = events or EventSink(db)

    # -- writes -------------------------------------------------------------

    def submit(
        self,
        *,
        content_ref: str,
        category: str,
        title: str,
        submitter: str,
    ) -> int:
        """Create a record and return its id.

        Args:
            content_ref: Handle of the payload in the content store.
            category: Threat category label.
            title: Short summary.
            submitter: Authenticated identity of the caller.

        Returns:
            The newly assigned record id.

        Raises:
            InvalidArgumentError: If any of the three fields is empty.
        """
        _require_text(content_ref, "Content reference cannot be empty")
        _require_text(category, "Category cannot be empty")
        _require_text(title, "Title cannot be empty")

        with _WRITER_LOCK:
            for attempt in range(1, SUBMIT_ATTEMPTS + 1):
                record_id = self._highest_id() + 1
                try:
                    self._insert_record(record_id, content_ref, category, title, submitter)
                except IntegrityError:
                    # Another process sharing the database took this id first.
                    self.db.rollback()
                    if attempt == SUBMIT_ATTEMPTS:
                        raise
                    logger.warning("Record id %d already taken, retrying", record_id)
                    continue
                except SQLAlchemyError:
                    self.db.rollback()
                    raise
                break

        logger.info("Record %d submitted by %s (%s)", record_id, submitter, category)
        return record_id

    def vote(self, record_id: int, is_upvote: bool, voter: str) -> None:
        """Record ``voter``'s verdict on a record.

        Checks run in a fixed order and stop at the first failure: the id must
        be assigned and active, the voter must not have voted yet, and the
        voter must not be the submitter.

        Raises:
            RecordNotFoundError: Unknown or inactive record.
            AlreadyVotedError: The voter already voted on this record.
            SelfVoteForbiddenError: The voter submitted this record.
        """
        with _WRITER_LOCK:
            record = self._load_active(record_id)
            if self._vote_exists(record_id, voter):
                logger.info("Rejected duplicate vote on %d by %s", record_id, voter)
                raise AlreadyVotedError()
            if record.submitter == voter:
                logger.info("Rejected self vote on %d by %s", record_id, voter)
                raise SelfVoteForbiddenError()

            try:
                self.db.add(RecordVote(record_id=record_id, voter=voter, is_upvote=is_upvote))
                if is_upvote:
                    record.upvotes += 1
                else:
                    record.downvotes += 1
                self.events.voted(record_id=record_id, voter=voter, is_upvote=is_upvote)
                self.db.commit()
            except IntegrityError as exc:
                # Another writer sharing the database got there first.
                self.db.rollback()
                raise AlreadyVotedError() from exc
            except SQLAlchemyError:
                self.db.rollback()
                raise

        logger.info(
            "Record %d %s by %s",
            record_id,
            "upvoted" if is_upvote else "downvoted",
            voter,
        )

    # -- reads --------------------------------------------------------------

    def get(self, record_id: int) -> RecordSnapshot:
        """Return a snapshot of an active record.

        Raises:
            RecordNotFoundError: Unknown or inactive record.
        """
        return RecordSnapshot.from_row(self._load_active(record_id))

    def score(self, record_id: int) -> int:
        """Return upvotes minus downvotes for an active record."""
        return self.get(record_id).score

    def has_voted(self, record_id: int, voter: str) -> bool:
        """Return whether ``voter`` holds a vote on an active record.

        Unknown and inactive ids simply answer False.
        """
        stmt = (
            select(RecordVote.record_id)
            .join(IntelRecord, IntelRecord.id == RecordVote.record_id)
            .where(
                RecordVote.record_id == record_id,
                RecordVote.voter == voter,
                IntelRecord.active.is_(True),
            )
        )
        return self.db.execute(stmt).first() is not None

    def active_count(self) -> int:
        return self.db.scalar(
            select(func.count()).select_from(IntelRecord).where(IntelRecord.active.is_(True))
        ) or 0

    def record_counter(self) -> int:
        """Return the highest id assigned so far (0 for an empty registry)."""
        return self._highest_id()

    def list_active(self, limit: int, offset: int = 0) -> list[int]:
        """Return active ids newest first, skipping ``offset`` of them.

        Inactive records neither count towards ``offset`` nor ``limit``.

        Raises:
            InvalidArgumentError: If ``limit`` is outside ``[1, 100]`` or
                ``offset`` is negative.
        """
        _validate_limit(limit)
        if offset < 0:
            raise InvalidArgumentError("Invalid offset")
        stmt = (
            select(IntelRecord.id)
            .where(IntelRecord.active.is_(True))
            .order_by(IntelRecord.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(self.db.scalars(stmt))

    def list_active_records(self, limit: int, offset: int = 0) -> list[RecordSnapshot]:
        """Return full snapshots for the page :meth:`list_active` would return."""
        _validate_limit(limit)
        if offset < 0:
            raise InvalidArgumentError("Invalid offset")
        stmt = (
            select(IntelRecord)
            .where(IntelRecord.active.is_(True))
            .order_by(IntelRecord.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return [RecordSnapshot.from_row(row) for row in self.db.scalars(stmt)]

    def submission_count(self, identity: str) -> int:
        stats = self.db.get(SubmitterStats, identity)
        return stats.submission_count if stats else 0

    # -- helpers ------------------------------------------------------------

    def _insert_record(
        self,
        record_id: int,
        content_ref: str,
        category: str,
        title: str,
        submitter: str,
    ) -> None:
        self.db.add(
            IntelRecord(
                id=record_id,
                submitter=submitter,
                content_ref=content_ref,
                category=category,
                title=title,
                created_at=self._ledger_now(),
                upvotes=0,
                downvotes=0,
                active=True,
            )
        )
        self._bump_submission_count(submitter)
        self.events.submitted(
            record_id=record_id,
            submitter=submitter,
            content_ref=content_ref,
            category=category,
            title=title,
        )
        self.db.commit()

    def _highest_id(self) -> int:
        return self.db.scalar(select(func.max(IntelRecord.id))) or 0

    def _load_active(self, record_id: int) -> IntelRecord:
        if record_id < 1 or record_id > self._highest_id():
            raise RecordNotFoundError()
        record = self.db.get(IntelRecord, record_id)
        if record is None or not record.active:
            raise RecordNotFoundError()
        return record

    def _vote_exists(self, record_id: int, voter: str) -> bool:
        return self.db.get(RecordVote, (record_id, voter)) is not None

    def _ledger_now(self) -> datetime:
        # Never earlier than the newest record, even if the wall clock steps back.
        now = utcnow()
        latest = self.db.scalar(select(func.max(IntelRecord.created_at)))
        if latest is not None and as_utc(latest) > now:
            return as_utc(latest)
        return now

    def _bump_submission_count(self, identity: str) -> None:
        stats = self.db.get(SubmitterStats, identity)
        if stats is None:
            stats = SubmitterStats(identity=identity, submission_count=0)
            self.db.add(stats)
        stats.submission_count += 1
