# src/cti_registry/services/__init__.py
"""Business logic services for the CTI registry."""

from .errors import (
    AlreadyVotedError,
    InvalidArgumentError,
    RecordNotFoundError,
    RegistryError,
    SelfVoteForbiddenError,
)
from .events import EventSink
from .registry import RecordSnapshot, RegistryService

__all__ = [
    "AlreadyVotedError",
    "EventSink",
    "InvalidArgumentError",
    "RecordNotFoundError",
    "RecordSnapshot",
    "RegistryError",
    "RegistryService",
    "SelfVoteForbiddenError",
]
