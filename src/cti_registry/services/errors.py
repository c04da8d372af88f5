"""Failure kinds surfaced by the registry.

Every condition maps to one stable, named error whose message callers may
show verbatim.
"""


class RegistryError(RuntimeError):
    """Base exception raised for registry failures."""

    default_message = "Registry operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidArgumentError(RegistryError):
    """Raised for an empty required field or an out-of-range page size."""

    default_message = "Invalid argument"


class RecordNotFoundError(RegistryError):
    """Raised when an id was never assigned or the record is inactive."""

    default_message = "Record does not exist"


class AlreadyVotedError(RegistryError):
    """Raised when the voter already holds a vote on the record."""

    default_message = "Already voted on this record"


class SelfVoteForbiddenError(RegistryError):
    """Raised when the submitter tries to vote on their own record."""

    default_message = "Cannot vote on own submission"


class EventDeliveryError(RuntimeError):
    """Raised when the event relay cannot hand an event to its webhook."""
