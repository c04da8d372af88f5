import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from cti_registry.core.settings import settings
from cti_registry.models import RegistryEvent
from cti_registry.models.registry_event import (
    EVENT_STATUS_DELIVERED,
    EVENT_STATUS_FAILED,
    EVENT_STATUS_PENDING,
)
from cti_registry.services.errors import EventDeliveryError
from cti_registry.services.event_relay import EventRelayWorker, WebhookPublisher
from tests.conftest import VOTER


@pytest.fixture
def mock_publisher():
    publisher = AsyncMock(spec=WebhookPublisher)
    publisher.deliver.return_value = True  # Default to success
    return publisher


@pytest.fixture
def pending_events(submit_record, registry) -> list[int]:
    record_id = submit_record()
    registry.vote(record_id, True, VOTER)
    return [1, 2]


@pytest.fixture
def max_retries():
    original = settings.event_max_retries
    settings.event_max_retries = 2
    yield 2
    settings.event_max_retries = original


@pytest.mark.asyncio
async def test_relay_delivers_pending_events_in_order(
    db_session: Session,
    mock_publisher: AsyncMock,
    pending_events: list[int],
):
    worker = EventRelayWorker(mock_publisher, db_session=db_session)

    delivered = await worker.relay_pending()

    assert delivered == 2
    sent_ids = [call.args[0].id for call in mock_publisher.deliver.await_args_list]
    assert sent_ids == pending_events
    statuses = {row.id: row.status for row in db_session.query(RegistryEvent).all()}
    assert statuses == {1: EVENT_STATUS_DELIVERED, 2: EVENT_STATUS_DELIVERED}

    # Nothing left to send on the next round.
    assert await worker.relay_pending() == 0
    assert mock_publisher.deliver.await_count == 2


@pytest.mark.asyncio
async def test_relay_stops_at_first_rejection_and_retries(
    db_session: Session,
    mock_publisher: AsyncMock,
    pending_events: list[int],
    max_retries: int,
):
    mock_publisher.deliver.side_effect = [False, True, True]
    worker = EventRelayWorker(mock_publisher, db_session=db_session)

    assert await worker.relay_pending() == 0
    first = db_session.get(RegistryEvent, 1)
    second = db_session.get(RegistryEvent, 2)
    assert first.status == EVENT_STATUS_PENDING
    assert first.retry_count == 1
    assert second.status == EVENT_STATUS_PENDING

    assert await worker.relay_pending() == 2
    assert first.status == EVENT_STATUS_DELIVERED
    assert second.status == EVENT_STATUS_DELIVERED


@pytest.mark.asyncio
async def test_relay_marks_failed_after_max_retries(
    db_session: Session,
    mock_publisher: AsyncMock,
    pending_events: list[int],
    max_retries: int,
):
    mock_publisher.deliver.side_effect = [
        EventDeliveryError("connection refused"),
        False,
        True,
    ]
    worker = EventRelayWorker(mock_publisher, db_session=db_session)

    await worker.relay_pending()
    delivered = await worker.relay_pending()

    first = db_session.get(RegistryEvent, 1)
    second = db_session.get(RegistryEvent, 2)
    assert first.status == EVENT_STATUS_FAILED
    assert first.retry_count == max_retries
    # A failed event no longer blocks the ones behind it.
    assert delivered == 1
    assert second.status == EVENT_STATUS_DELIVERED


@pytest.mark.asyncio
async def test_webhook_publisher_posts_event_body(pending_events, db_session: Session):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    publisher = WebhookPublisher("http://indexer.test/hook", client=client)
    event = db_session.get(RegistryEvent, 2)

    assert await publisher.deliver(event) is True
    await publisher.close()

    request = seen[0]
    assert str(request.url) == "http://indexer.test/hook"
    assert request.headers["Idempotency-Key"] == event.event_hash
    assert json.loads(request.content) == {
        "id": 2,
        "type": "Voted",
        "data": {"id": 1, "voter": VOTER, "is_upvote": True},
    }


@pytest.mark.asyncio
async def test_webhook_publisher_reports_rejection_and_transport_errors(
    pending_events, db_session: Session
):
    event = db_session.get(RegistryEvent, 1)

    rejecting = WebhookPublisher(
        "http://indexer.test/hook",
        client=httpx.AsyncClient(transport=httpx.MockTransport(lambda _: httpx.Response(500))),
    )
    assert await rejecting.deliver(event) is False
    await rejecting.close()

    def broken(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    failing = WebhookPublisher(
        "http://indexer.test/hook",
        client=httpx.AsyncClient(transport=httpx.MockTransport(broken)),
    )
    with pytest.raises(EventDeliveryError):
        await failing.deliver(event)
    await failing.close()


@pytest.mark.asyncio
async def test_worker_start_and_stop(db_session: Session, mock_publisher: AsyncMock):
    worker = EventRelayWorker(mock_publisher, db_session=db_session)

    await worker.start()
    await worker.stop()

    mock_publisher.close.assert_awaited_once()


@pytest.fixture
def fast_interval():
    original = settings.event_relay_interval_seconds
    settings.event_relay_interval_seconds = 0.1
    yield 0.1
    settings.event_relay_interval_seconds = original


@pytest.mark.asyncio
async def test_worker_survives_database_errors(mock_publisher: AsyncMock, fast_interval: float):
    session = MagicMock(spec=Session)
    session.scalars.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))
    worker = EventRelayWorker(mock_publisher, db_session=session)

    await worker.start()
    await asyncio.sleep(fast_interval * 3)

    assert not worker._task.done()
    assert session.scalars.call_count >= 2
    session.rollback.assert_called()
    mock_publisher.deliver.assert_not_awaited()

    await worker.stop()
    mock_publisher.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_worker_resumes_after_failed_commit(
    db_session: Session,
    mock_publisher: AsyncMock,
    pending_events: list[int],
):
    real_commit = db_session.commit
    calls = {"count": 0}

    def flaky_commit():
        calls["count"] += 1
        if calls["count"] == 1:
            raise OperationalError("UPDATE", {}, Exception("database is locked"))
        real_commit()

    db_session.commit = flaky_commit
    worker = EventRelayWorker(mock_publisher, db_session=db_session)

    with pytest.raises(OperationalError):
        await worker.relay_pending()
    assert db_session.get(RegistryEvent, 1).status == EVENT_STATUS_PENDING

    assert await worker.relay_pending() == 2
    statuses = {row.id: row.status for row in db_session.query(RegistryEvent).all()}
    assert statuses == {1: EVENT_STATUS_DELIVERED, 2: EVENT_STATUS_DELIVERED}


@pytest.mark.asyncio
async def test_stop_closes_publisher_when_loop_crashed(mock_publisher: AsyncMock):
    session = MagicMock(spec=Session)
    session.scalars.side_effect = RuntimeError("boom")
    worker = EventRelayWorker(mock_publisher, db_session=session)

    await worker.start()
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    with pytest.raises(RuntimeError):
        await worker.stop()
    mock_publisher.close.assert_awaited_once()
    assert worker._task is None
