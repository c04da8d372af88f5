"""System and transparency endpoints for the registry API."""

from __future__ import annotations

from fastapi import APIRouter

from cti_registry.core.settings import settings
from cti_registry.services.registry import MAX_LIST_LIMIT, MIN_LIST_LIMIT

router = APIRouter(prefix="/system", tags=["system", "transparency"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings; suitable for transparency UIs.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "jwt_algorithm": settings.jwt_algorithm,
            "debug": settings.debug,
        },
        "listing": {
            "min_limit": MIN_LIST_LIMIT,
            "max_limit": MAX_LIST_LIMIT,
            "default_limit": settings.default_page_size,
        },
        "content": {
            "gateway_template": settings.content_gateway_template,
        },
        "events": {
            "relay_enabled": settings.relay_enabled,
            "max_retries": settings.event_max_retries,
        },
    }
