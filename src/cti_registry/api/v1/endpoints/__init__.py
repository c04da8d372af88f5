# src/cti_registry/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .events import router as events_router
from .records import router as records_router
from .submitters import router as submitters_router
from .system import router as system_router

__all__ = [
    "events_router",
    "records_router",
    "submitters_router",
    "system_router",
]
