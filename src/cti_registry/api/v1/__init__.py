# src/cti_registry/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    events_router,
    records_router,
    submitters_router,
    system_router,
)

__all__ = [
    "events_router",
    "records_router",
    "submitters_router",
    "system_router",
]
