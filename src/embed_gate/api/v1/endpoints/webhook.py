"""Notification ingestion endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from embed_gate.services.gatekeeper import GateDecision, GateOutcome, InboundRequest

from ..dependencies import GateKeeperDep, resolve_source_address

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhook"])

JSON_CONTENT_TYPE = "application/json"

_OUTCOME_STATUS: dict[GateOutcome, int] = {
    GateOutcome.BANNED: status.HTTP_403_FORBIDDEN,
    GateOutcome.MALFORMED: status.HTTP_400_BAD_REQUEST,
    GateOutcome.DUPLICATE_BANNED: status.HTTP_403_FORBIDDEN,
    GateOutcome.ACCEPTED: status.HTTP_200_OK,
    GateOutcome.DELIVERY_FAILED: status.HTTP_502_BAD_GATEWAY,
    GateOutcome.INFRASTRUCTURE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _respond(decision: GateDecision) -> JSONResponse:
    body: dict[str, object] = {"status": decision.outcome.value, "detail": decision.detail}
    if decision.banned_until is not None:
        body["banned_until"] = decision.banned_until.isoformat()
    return JSONResponse(status_code=_OUTCOME_STATUS[decision.outcome], content=body)


def _reject(status_code: int, outcome: str, detail: str, **headers: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": outcome, "detail": detail},
        headers=headers or None,
    )


@router.api_route("/webhook", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def receive_notification(request: Request, gatekeeper: GateKeeperDep) -> JSONResponse:
    """Screen an embed notification and forward it if it passes.

    Banned addresses are turned away before any transport checks, so a banned
    client learns nothing about what a valid request looks like.
    """
    address = resolve_source_address(request)

    decision = gatekeeper.screen(address)
    if decision is not None:
        return _respond(decision)

    if request.method != "POST":
        return _reject(
            status.HTTP_405_METHOD_NOT_ALLOWED,
            "method_not_allowed",
            "Use POST method",
            allow="POST",
        )

    content_type = request.headers.get("content-type", "")
    if JSON_CONTENT_TYPE not in content_type:
        return _reject(
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            "unsupported_media_type",
            "Content-Type must be application/json",
        )

    try:
        payload = await request.json()
    except ValueError:
        return _reject(status.HTTP_400_BAD_REQUEST, "malformed", "Invalid JSON")

    decision = await gatekeeper.admit(InboundRequest(source_address=address, payload=payload))
    return _respond(decision)
