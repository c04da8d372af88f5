# src/cti_registry/api/v1/endpoints/submitters.py
"""Submitter reporting endpoints."""

from fastapi import APIRouter

from cti_registry.schemas.submitter import SubmitterResponse

from ..dependencies import RegistryDep

router = APIRouter(prefix="/submitters", tags=["submitters"])


@router.get("/{identity}", response_model=SubmitterResponse)
async def get_submitter(identity: str, registry: RegistryDep) -> SubmitterResponse:
    """Return how many records ``identity`` has submitted (0 if none)."""
    return SubmitterResponse(
        identity=identity,
        submission_count=registry.submission_count(identity),
    )
