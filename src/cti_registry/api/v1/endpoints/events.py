# src/cti_registry/api/v1/endpoints/events.py
"""Polling endpoint over the registry's event log."""

from fastapi import APIRouter, Query

from cti_registry.core.settings import settings
from cti_registry.schemas.event import EventResponse
from cti_registry.services.errors import RegistryError
from cti_registry.services.events import EventSink

from ..dependencies import SessionDep, raise_http_error

router = APIRouter(prefix="/events", tags=["events"])


@router.get("/", response_model=list[EventResponse])
async def list_events(
    db: SessionDep,
    after: int = Query(0, ge=0, description="Return events with an id greater than this cursor"),
    limit: int = Query(settings.default_page_size, description="Page size, 1 to 100"),
) -> list[EventResponse]:
    """Return committed registry events in publication order.

    Consumers pass the id of the last event they processed as ``after``.
    """
    try:
        events = EventSink(db).events_after(after, limit)
    except RegistryError as exc:
        raise_http_error(exc)
    return [EventResponse.model_validate(event) for event in events]
