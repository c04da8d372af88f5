"""Outbound notification channel for committed registry mutations.

Events are appended to the ``registry_event`` table inside the same
transaction as the mutation, so a rolled back operation never leaves an
event behind. Consumers read them back in id order with
:meth:`EventSink.events_after` or receive them through the relay worker.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from blake3 import blake3
from sqlalchemy import select
from sqlalchemy.orm import Session

from cti_registry.models import RegistryEvent
from cti_registry.services.errors import InvalidArgumentError

EVENT_SUBMITTED = "Submitted"
EVENT_VOTED = "Voted"

MAX_EVENT_PAGE = 100


def canonical_payload(event_type: str, payload: dict[str, Any]) -> str:
    """Return the canonical JSON encoding used for storage and hashing."""
    return json.dumps(
        {"type": event_type, "data": payload},
        sort_keys=True,
        separators=(",", ":"),
    )


@dataclass(frozen=True)
class EventSnapshot:
    """Read-only view of a stored event."""

    id: int
    event_type: str
    event_hash: str
    data: dict[str, Any]
    status: str
    retry_count: int

    @classmethod
    def from_row(cls, row: RegistryEvent) -> EventSnapshot:
        body = json.loads(row.payload)
        return cls(
            id=row.id,
            event_type=row.event_type,
            event_hash=row.event_hash,
            data=body["data"],
            status=row.status,
            retry_count=row.retry_count,
        )


class EventSink:
    """Append-only event log backed by the registry database."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def publish(self, event_type: str, payload: dict[str, Any]) -> RegistryEvent:
        """Stage an event in the caller's transaction.

        The caller owns the commit; the event becomes visible together with
        the state change it describes.
        """
        body = canonical_payload(event_type, payload)
        event = RegistryEvent(
            event_type=event_type,
            event_hash=blake3(body.encode("utf-8")).hexdigest(),
            payload=body,
        )
        self.db.add(event)
        return event

    def submitted(
        self,
        *,
        record_id: int,
        submitter: str,
        content_ref: str,
        category: str,
        title: str,
    ) -> RegistryEvent:
        return self.publish(
            EVENT_SUBMITTED,
            {
                "id": record_id,
                "submitter": submitter,
                "content_ref": content_ref,
                "category": category,
                "title": title,
            },
        )

    def voted(self, *, record_id: int, voter: str, is_upvote: bool) -> RegistryEvent:
        return self.publish(
            EVENT_VOTED,
            {"id": record_id, "voter": voter, "is_upvote": is_upvote},
        )

    def events_after(self, after: int = 0, limit: int = 20) -> list[EventSnapshot]:
        """Return committed events with ``id > after`` in publication order.

        Raises:
            InvalidArgumentError: If ``limit`` is outside ``[1, 100]``.
        """
        if limit < 1 or limit > MAX_EVENT_PAGE:
            raise InvalidArgumentError("Invalid limit")
        rows = self.db.scalars(
            select(RegistryEvent)
            .where(RegistryEvent.id > after)
            .order_by(RegistryEvent.id)
            .limit(limit)
        ).all()
        return [EventSnapshot.from_row(row) for row in rows]
