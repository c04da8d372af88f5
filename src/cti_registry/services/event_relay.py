"""Background delivery of outbox events to an external indexer.

The relay pushes pending ``registry_event`` rows, oldest first, to the
configured webhook. Delivery is at-least-once: consumers deduplicate with the
``Idempotency-Key`` header, which carries the event hash.
"""

from __future__ import annotations

import asyncio
import json
import logging

import httpx
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cti_registry.core.settings import settings
from cti_registry.db.session import SessionLocal
from cti_registry.models import RegistryEvent
from cti_registry.models.registry_event import (
    EVENT_STATUS_DELIVERED,
    EVENT_STATUS_FAILED,
    EVENT_STATUS_PENDING,
)
from cti_registry.services.errors import EventDeliveryError

HTTP_MULTIPLE_CHOICES = 300

logger = logging.getLogger(__name__)


class WebhookPublisher:
    """Thin httpx wrapper posting single events to a webhook URL."""

    def __init__(
        self,
        url: str,
        timeout_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.timeout_seconds = timeout_seconds or settings.event_http_timeout_seconds
        self._client = client

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds))
        return self._client

    async def deliver(self, event: RegistryEvent) -> bool:
        """Post one event; return True when the webhook acknowledged it.

        Raises:
            EventDeliveryError: On transport failures.
        """
        client = await self._ensure_client()
        body = {
            "id": event.id,
            "type": event.event_type,
            "data": json.loads(event.payload)["data"],
        }
        try:
            response = await client.post(
                self.url,
                json=body,
                headers={"Idempotency-Key": event.event_hash},
            )
        except httpx.HTTPError as exc:
            raise EventDeliveryError(f"Webhook request failed: {exc}") from exc
        return response.status_code < HTTP_MULTIPLE_CHOICES

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class EventRelayWorker:
    """Periodically pushes pending events to a :class:`WebhookPublisher`."""

    def __init__(
        self,
        publisher: WebhookPublisher,
        db_session: Session | None = None,
    ) -> None:
        """Initialize the relay.

        Args:
            publisher: Destination for events.
            db_session: Optional database session. If None, a new session is
                opened for every batch.
        """
        self.publisher = publisher
        self._db_session = db_session
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    async def start(self) -> None:
        """Start the background relay loop."""
        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background relay loop and release the HTTP client."""
        try:
            if self._task is not None:
                self._stopping.set()
                await self._task
        finally:
            self._task = None
            await self.publisher.close()

    async def _run(self) -> None:
        interval = max(0.1, float(settings.event_relay_interval_seconds))
        while not self._stopping.is_set():
            try:
                await self.relay_pending()
            except SQLAlchemyError as exc:
                logger.error("Event relay database error, retrying: %s", exc, exc_info=True)
            except (OSError, ValueError, KeyError) as exc:
                logger.error("Event relay iteration failed: %s", exc, exc_info=True)
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=interval)
            except TimeoutError:
                continue

    async def relay_pending(self) -> int:
        """Deliver one batch of pending events and return how many succeeded."""
        if self._db_session is not None:
            return await self._relay_with_session(self._db_session)
        with SessionLocal() as db:
            return await self._relay_with_session(db)

    async def _relay_with_session(self, db: Session) -> int:
        try:
            return await self._deliver_batch(db)
        except SQLAlchemyError:
            db.rollback()
            raise

    async def _deliver_batch(self, db: Session) -> int:
        pending = db.scalars(
            select(RegistryEvent)
            .where(RegistryEvent.status == EVENT_STATUS_PENDING)
            .order_by(RegistryEvent.id)
            .limit(settings.event_relay_batch_size)
        ).all()
        logger.debug("Found %d pending registry events", len(pending))

        delivered = 0
        for event in pending:
            try:
                ok = await self.publisher.deliver(event)
            except EventDeliveryError as exc:
                logger.warning("Network error delivering event %s: %s", event.id, exc)
                ok = False

            if ok:
                event.status = EVENT_STATUS_DELIVERED
                delivered += 1
            else:
                event.retry_count += 1
                if event.retry_count >= settings.event_max_retries:
                    event.status = EVENT_STATUS_FAILED
                    logger.error(
                        "Giving up on event %s after %d attempts",
                        event.id,
                        event.retry_count,
                    )
            db.commit()

            if event.status == EVENT_STATUS_PENDING:
                # Preserve publication order; retry this event next round.
                break
        return delivered
