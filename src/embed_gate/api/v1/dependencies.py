"""Shared FastAPI dependencies for the v1 API."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from embed_gate.core.policy import GatePolicy, load_gate_policy
from embed_gate.core.settings import settings
from embed_gate.db.session import get_db
from embed_gate.repositories.sql_repo import SqlGateRepository
from embed_gate.services.delivery import Deliverer, get_webhook_delivery
from embed_gate.services.gatekeeper import GateKeeper

UNKNOWN_ADDRESS = "unknown"


def get_delivery_dep() -> Deliverer:
    """Return the shared webhook delivery client."""
    return get_webhook_delivery()


def get_policy_dep() -> GatePolicy:
    """Return the abuse policy built from current settings."""
    return load_gate_policy()


SessionDep = Annotated[Session, Depends(get_db)]
DeliveryDep = Annotated[Deliverer, Depends(get_delivery_dep)]
PolicyDep = Annotated[GatePolicy, Depends(get_policy_dep)]


def get_gatekeeper(db: SessionDep, delivery: DeliveryDep, policy: PolicyDep) -> GateKeeper:
    """Build a gatekeeper bound to the request's database session."""
    return GateKeeper(SqlGateRepository(db), delivery, policy)


GateKeeperDep = Annotated[GateKeeper, Depends(get_gatekeeper)]


def resolve_source_address(request: Request) -> str:
    """Return the originating address of a request.

    Prefers the configured proxy header (first hop if it is a list), then the
    socket peer, then ``"unknown"``.
    """
    forwarded = request.headers.get(settings.client_ip_header)
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_ADDRESS
