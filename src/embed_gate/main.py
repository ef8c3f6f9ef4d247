"""Main entry point for the Embed Gate application."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from embed_gate.api.v1 import system_router, webhook_router
from embed_gate.core.logging import configure_logging
from embed_gate.core.settings import settings
from embed_gate.db.session import create_tables
from embed_gate.services.delivery import get_webhook_delivery

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Embed Gate API",
    description="Abuse-screening relay for webhook embed notifications",
    version=settings.app_version,
)

app.include_router(webhook_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging(settings.log_level)
    if settings.auto_create_tables:
        create_tables()
    if not settings.webhook_enabled:
        logger.warning("DISCORD_WEBHOOK_URL is not set; accepted messages will fail delivery")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await get_webhook_delivery().close()


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
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("embed_gate.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
