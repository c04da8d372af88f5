"""Schemas for the public event feed."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EventResponse(BaseModel):
    """One registry event as published to consumers."""

    id: int = Field(..., description="Monotonic event sequence number; use as the next cursor.")
    event_type: str
    event_hash: str
    data: dict[str, Any]
    status: str

    model_config = ConfigDict(from_attributes=True)
