"""Windowed duplicate detection and ban escalation."""

from __future__ import annotations

import logging
from datetime import timedelta

from embed_gate.db.time import Clock, utcnow
from embed_gate.repositories.base import BanRecord, GateRepository, StoreError
from embed_gate.services.bans import BanRegistry
from embed_gate.services.retention import RetentionManager

logger = logging.getLogger(__name__)


class DuplicateDetector:
    """Counts identical recent messages per address and punishes bursts.

    The count and the later insert are two separate store calls, so
    concurrent requests from one address can each see the same prior count.
    A burst slipping through under heavy concurrency is accepted; the next
    request after the race still trips the threshold.
    """

    def __init__(
        self,
        repository: GateRepository,
        bans: BanRegistry,
        retention: RetentionManager,
        *,
        window: timedelta = timedelta(seconds=60),
        threshold: int = 3,
        purge_batch_size: int = 5,
        clock: Clock = utcnow,
    ) -> None:
        self.repository = repository
        self.bans = bans
        self.retention = retention
        self.window = window
        self.threshold = threshold
        self.purge_batch_size = purge_batch_size
        self.clock = clock

    def count_recent(self, source_address: str, fingerprint: str) -> int:
        """Count stored messages matching ``fingerprint`` within the window."""
        now = self.clock()
        return self.repository.count_matching(source_address, fingerprint, now - self.window, now)

    def is_burst(self, prior_count: int) -> bool:
        """Return True when ``prior_count`` earlier copies warrant a ban.

        ``prior_count`` excludes the message being evaluated, so with a
        threshold of 3 the fourth identical message is the one rejected.
        """
        return prior_count >= self.threshold

    def escalate(self, source_address: str) -> BanRecord:
        """Ban the address and purge its most recent messages.

        A failed ban propagates; a failed purge is logged and ignored because
        the ban is already in place.
        """
        record = self.bans.ban(source_address)
        try:
            purged = self.retention.purge_recent(source_address, self.purge_batch_size)
        except StoreError:
            logger.exception("Purge after ban failed for %s", source_address)
        else:
            logger.debug("Purged %d recent messages for %s", purged, source_address)
        return record
