"""System and transparency endpoints for the Embed Gate API."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from embed_gate.core.settings import settings

from ..dependencies import DeliveryDep, PolicyDep, SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config(policy: PolicyDep) -> dict[str, object]:
    """Return a sanitized snapshot of the abuse policy.

    Excludes the webhook URL and connection strings.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
        "duplicates": {
            "window_seconds": int(policy.duplicate_window.total_seconds()),
            "threshold": policy.duplicate_threshold,
        },
        "bans": {
            "duration_seconds": int(policy.ban_duration.total_seconds()),
            "purge_batch_size": policy.ban_purge_batch_size,
        },
        "retention": {
            "cap_per_address": policy.message_cap,
            "max_age_seconds": int(policy.retention.total_seconds()),
            "sweep_on_request": policy.sweep_on_request,
        },
        "schema": {
            "min_fields": policy.min_embed_fields,
            "allowed_colors": sorted(policy.allowed_colors),
            "allowed_field_names": sorted(policy.allowed_field_names),
        },
    }


@router.get("/health")
async def get_system_health(db: SessionDep, delivery: DeliveryDep) -> dict[str, object]:
    """Health check covering the database and webhook configuration.

    Returns:
        Dictionary with overall status and per-component health
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError:
        logger.exception("Database health probe failed")
        db_status = "unhealthy"

    webhook_status = "configured" if getattr(delivery, "enabled", True) else "disabled"

    return {
        "status": "healthy" if db_status == "healthy" else "unhealthy",
        "timestamp": int(time.time()),
        "components": {
            "database": db_status,
            "webhook": webhook_status,
        },
        "version": settings.app_version,
    }
