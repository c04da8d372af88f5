# src/cti_registry/models/__init__.py
"""SQLAlchemy models for the CTI registry."""

from .intel_record import IntelRecord
from .registry_event import RegistryEvent
from .submitter import SubmitterStats
from .vote import RecordVote

__all__ = [
    "IntelRecord",
    "RecordVote",
    "RegistryEvent",
    "SubmitterStats",
]
