# src/cti_registry/api/v1/endpoints/records.py
"""Record submission, retrieval and voting endpoints."""

from fastapi import APIRouter, Query, status

from cti_registry.core.settings import settings
from cti_registry.schemas.record import (
    RecordCountResponse,
    RecordCreate,
    RecordCreated,
    RecordResponse,
    ScoreResponse,
)
from cti_registry.schemas.vote import HasVotedResponse, VoteCreate
from cti_registry.services.errors import RegistryError

from ..dependencies import CallerDep, OptionalCallerDep, RegistryDep, raise_http_error

router = APIRouter(prefix="/records", tags=["records"])


@router.post("/", response_model=RecordCreated, status_code=status.HTTP_201_CREATED)
async def submit_record(
    record_data: RecordCreate,
    caller: CallerDep,
    registry: RegistryDep,
) -> RecordCreated:
    """Submit a new intelligence record on behalf of the caller.

    Args:
        record_data: Content reference, category and title
        caller: Authenticated submitter identity
        registry: Registry service

    Returns:
        The assigned record id

    Raises:
        HTTPException: 400 if any field is empty
    """
    try:
        record_id = registry.submit(
            content_ref=record_data.content_ref,
            category=record_data.category,
            title=record_data.title,
            submitter=caller,
        )
    except RegistryError as exc:
        raise_http_error(exc)
    return RecordCreated(id=record_id)


@router.get("/", response_model=list[int])
async def list_active_records(
    registry: RegistryDep,
    limit: int = Query(settings.default_page_size, description="Page size, 1 to 100"),
    offset: int = Query(0, description="Number of active records to skip"),
) -> list[int]:
    """List active record ids, newest first.

    Raises:
        HTTPException: 400 if ``limit`` is outside [1, 100]
    """
    try:
        return registry.list_active(limit, offset)
    except RegistryError as exc:
        raise_http_error(exc)


@router.get("/feed", response_model=list[RecordResponse])
async def record_feed(
    registry: RegistryDep,
    caller: OptionalCallerDep,
    limit: int = Query(settings.default_page_size, description="Page size, 1 to 100"),
    offset: int = Query(0, description="Number of active records to skip"),
) -> list[RecordResponse]:
    """Return full records for a page of the active listing.

    When the request is authenticated each entry also says whether the caller
    has already voted on it.
    """
    try:
        snapshots = registry.list_active_records(limit, offset)
    except RegistryError as exc:
        raise_http_error(exc)

    feed = []
    for snapshot in snapshots:
        entry = RecordResponse.model_validate(snapshot)
        if caller is not None:
            entry.has_voted = registry.has_voted(snapshot.id, caller)
        feed.append(entry)
    return feed


@router.get("/count", response_model=RecordCountResponse)
async def count_records(registry: RegistryDep) -> RecordCountResponse:
    """Return the number of active records and the highest assigned id."""
    return RecordCountResponse(
        active=registry.active_count(),
        total=registry.record_counter(),
    )


@router.get("/{record_id}", response_model=RecordResponse)
async def get_record(record_id: int, registry: RegistryDep) -> RecordResponse:
    """Get a specific active record by id.

    Raises:
        HTTPException: 404 if the record is unknown or inactive
    """
    try:
        snapshot = registry.get(record_id)
    except RegistryError as exc:
        raise_http_error(exc)
    return RecordResponse.model_validate(snapshot)


@router.get("/{record_id}/score", response_model=ScoreResponse)
async def get_record_score(record_id: int, registry: RegistryDep) -> ScoreResponse:
    """Return upvotes minus downvotes for an active record."""
    try:
        score = registry.score(record_id)
    except RegistryError as exc:
        raise_http_error(exc)
    return ScoreResponse(id=record_id, score=score)


@router.post("/{record_id}/votes", status_code=status.HTTP_201_CREATED)
async def cast_vote(
    record_id: int,
    vote_data: VoteCreate,
    caller: CallerDep,
    registry: RegistryDep,
) -> dict[str, str]:
    """Cast the caller's single, final vote on a record.

    Raises:
        HTTPException: 404 unknown/inactive record, 409 already voted,
            403 voting on own submission
    """
    try:
        registry.vote(record_id, vote_data.is_upvote, caller)
    except RegistryError as exc:
        raise_http_error(exc)
    return {"status": "success"}


@router.get("/{record_id}/votes/{voter}", response_model=HasVotedResponse)
async def has_voted(record_id: int, voter: str, registry: RegistryDep) -> HasVotedResponse:
    """Report whether ``voter`` has voted on the record.

    Unknown or inactive ids answer ``false`` rather than 404.
    """
    return HasVotedResponse(
        id=record_id,
        voter=voter,
        has_voted=registry.has_voted(record_id, voter),
    )
