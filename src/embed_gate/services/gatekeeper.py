"""Per-request admission control for inbound notifications.

Each request runs through a fixed sequence of checks and ends in exactly one
`GateOutcome`:

1. BANNED - the address has an active ban.
2. MALFORMED - the payload failed validation.
3. DUPLICATE_BANNED - the same content was already seen ``threshold`` times
   within the window; the address is banned instead of the message stored.
4. ACCEPTED - the fingerprint is stored, retention runs and the embed is
   forwarded.
5. DELIVERY_FAILED - stored, but the downstream channel rejected it.

Store failures on the critical path end the request as INFRASTRUCTURE_ERROR.
Retention housekeeping failures are logged and never change the outcome.

Retention (the per-address cap and the age sweep) runs only once a message
has been stored, so BANNED, MALFORMED and DUPLICATE_BANNED requests never
sweep. Expired rows therefore linger until the next accepted request or an external
`embed-gate-maintenance sweep`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from embed_gate.core.policy import GatePolicy
from embed_gate.db.time import Clock, utcnow
from embed_gate.repositories.base import GateRepository, StoreError
from embed_gate.services.bans import BanRegistry
from embed_gate.services.delivery import Deliverer
from embed_gate.services.duplicates import DuplicateDetector
from embed_gate.services.normalizer import normalize_embed
from embed_gate.services.retention import RetentionManager
from embed_gate.services.validation import validate_payload
from embed_gate.utils.hash import fingerprint

logger = logging.getLogger(__name__)


class GateOutcome(str, Enum):
    """Terminal states of one inbound request."""

    BANNED = "banned"
    MALFORMED = "malformed"
    DUPLICATE_BANNED = "duplicate_banned"
    ACCEPTED = "accepted"
    DELIVERY_FAILED = "delivery_failed"
    INFRASTRUCTURE_ERROR = "infrastructure_error"


@dataclass(frozen=True)
class InboundRequest:
    """An already-parsed request handed over by the transport."""

    source_address: str
    payload: Any

    def __post_init__(self) -> None:
        if not self.source_address:
            raise ValueError("source_address must be a non-empty string")


@dataclass(frozen=True)
class GateDecision:
    """Result returned to the transport for one request."""

    outcome: GateOutcome
    detail: str
    fingerprint: str | None = None
    banned_until: datetime | None = None


_INFRASTRUCTURE_DETAIL = "Internal server error"


class GateKeeper:
    """Sequences ban screening, validation, duplicate detection and delivery.

    Only the ACCEPTED and DELIVERY_FAILED paths run retention housekeeping.
    """

    def __init__(
        self,
        repository: GateRepository,
        delivery: Deliverer,
        policy: GatePolicy | None = None,
        *,
        clock: Clock = utcnow,
    ) -> None:
        self.repository = repository
        self.delivery = delivery
        self.policy = policy or GatePolicy()
        self.clock = clock

        self.bans = BanRegistry(repository, ban_duration=self.policy.ban_duration, clock=clock)
        self.retention = RetentionManager(
            repository,
            cap=self.policy.message_cap,
            max_age=self.policy.retention,
            clock=clock,
        )
        self.duplicates = DuplicateDetector(
            repository,
            self.bans,
            self.retention,
            window=self.policy.duplicate_window,
            threshold=self.policy.duplicate_threshold,
            purge_batch_size=self.policy.ban_purge_batch_size,
            clock=clock,
        )

    def screen(self, source_address: str) -> GateDecision | None:
        """Return a terminal decision if the address may not submit at all."""
        try:
            banned = self.bans.is_banned(source_address)
        except StoreError:
            logger.exception("Ban check failed for %s", source_address)
            return GateDecision(GateOutcome.INFRASTRUCTURE_ERROR, _INFRASTRUCTURE_DETAIL)

        if banned:
            logger.debug("Rejected banned address %s", source_address)
            return GateDecision(GateOutcome.BANNED, "IP is banned")
        return None

    async def admit(self, request: InboundRequest) -> GateDecision:
        """Run everything after the ban screen for a request."""
        address = request.source_address

        validation = validate_payload(request.payload, self.policy)
        if not validation.ok:
            logger.info("Rejected payload from %s: %s", address, validation.reason)
            return GateDecision(GateOutcome.MALFORMED, validation.reason or "Invalid payload")

        embed = validation.embed
        digest = fingerprint(normalize_embed(embed))

        step = "count recent messages"
        try:
            prior = self.duplicates.count_recent(address, digest)
            if self.duplicates.is_burst(prior):
                step = "ban address"
                ban = self.duplicates.escalate(address)
                return GateDecision(
                    GateOutcome.DUPLICATE_BANNED,
                    "IP banned for sending identical messages within a minute",
                    fingerprint=digest,
                    banned_until=ban.banned_until,
                )

            step = "insert message"
            self.repository.insert_message(address, digest, self.clock())
        except StoreError:
            logger.exception("Failed to %s for %s", step, address)
            return GateDecision(GateOutcome.INFRASTRUCTURE_ERROR, _INFRASTRUCTURE_DETAIL)

        self._housekeep(address)

        result = await self.delivery.deliver(embed.to_webhook_payload())
        if not result.ok:
            logger.error(
                "Delivery failed for %s (status=%s, error=%s)",
                address,
                result.status_code,
                result.error,
            )
            return GateDecision(
                GateOutcome.DELIVERY_FAILED,
                "Failed to deliver notification",
                fingerprint=digest,
            )

        return GateDecision(GateOutcome.ACCEPTED, "OK", fingerprint=digest)

    async def process(self, request: InboundRequest) -> GateDecision:
        """Screen and admit a request in one call."""
        decision = self.screen(request.source_address)
        if decision is not None:
            return decision
        return await self.admit(request)

    def _housekeep(self, source_address: str) -> None:
        try:
            self.retention.enforce_cap(source_address)
        except StoreError:
            logger.exception("Cap enforcement failed for %s", source_address)

        if not self.policy.sweep_on_request:
            return
        try:
            self.retention.sweep_expired()
        except StoreError:
            logger.exception("Retention sweep failed")
