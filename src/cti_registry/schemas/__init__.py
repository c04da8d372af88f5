# src/cti_registry/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .event import EventResponse
from .record import (
    RecordCountResponse,
    RecordCreate,
    RecordCreated,
    RecordResponse,
    ScoreResponse,
)
from .submitter import SubmitterResponse
from .vote import HasVotedResponse, VoteCreate

__all__ = [
    "EventResponse",
    "RecordCountResponse", "RecordCreate", "RecordCreated", "RecordResponse", "ScoreResponse",
    "SubmitterResponse",
    "HasVotedResponse", "VoteCreate",
]
