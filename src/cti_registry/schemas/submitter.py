"""Submitter-related Pydantic schemas."""

from pydantic import BaseModel


class SubmitterResponse(BaseModel):
    """Reporting counters for one identity."""

    identity: str
    submission_count: int
