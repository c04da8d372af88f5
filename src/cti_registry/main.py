# src/cti_registry/main.py
"""Main entry point for the CTI registry application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from cti_registry.api.v1 import (
    events_router,
    records_router,
    submitters_router,
    system_router,
)
from cti_registry.core.logging import configure_logging
from cti_registry.core.settings import settings
from cti_registry.services.event_relay import EventRelayWorker, WebhookPublisher

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="CTI Registry API",
    description="Community threat-intelligence registry with peer credibility voting",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(records_router, prefix="/api/v1")
app.include_router(submitters_router, prefix="/api/v1")
app.include_router(events_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    if settings.relay_enabled and settings.event_webhook_url:
        worker = EventRelayWorker(WebhookPublisher(settings.event_webhook_url))
        await worker.start()
        app.state.event_relay = worker
        logger.info("Event relay started for %s", settings.event_webhook_url)
    else:
        app.state.event_relay = None


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: EventRelayWorker | None = getattr(app.state, "event_relay", None)
    if worker:
        await worker.stop()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Community threat-intelligence registry",
        "docs": "/docs",
        "redoc": "/redoc",
    }


def main() -> None:
    import uvicorn
    uvicorn.run("cti_registry.main:app", host="0.0.0.0", port=8000, reload=settings.debug)


if __name__ == "__main__":
    main()
