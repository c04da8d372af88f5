"""Record-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from cti_registry.core.settings import settings


def content_url(content_ref: str) -> str:
    """Return the gateway URL for a content reference."""
    return settings.content_gateway_template.format(ref=content_ref)


class RecordCreate(BaseModel):
    """Schema for submitting a new record.

    Emptiness is checked by the registry so every caller gets the same error.
    """

    content_ref: str = Field(..., description="Content store handle of the report payload")
    category: str = Field(..., description="Threat category label, e.g. Malware")
    title: str = Field(..., description="Short summary of the report")


class RecordCreated(BaseModel):
    """Identifier assigned to a new record."""

    id: int


class RecordResponse(BaseModel):
    """Snapshot of a record returned by the API."""

    id: int
    submitter: str
    content_ref: str
    category: str
    title: str
    created_at: datetime
    upvotes: int
    downvotes: int
    active: bool
    has_voted: bool | None = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes

    @computed_field  # type: ignore[prop-decorator]
    @property
    def content_url(self) -> str:
        return content_url(self.content_ref)


class ScoreResponse(BaseModel):
    id: int
    score: int


class RecordCountResponse(BaseModel):
    """Counters describing the registry as a whole."""

    active: int
    total: int
