"""Per-address caps and age-based eviction of message fingerprints."""

from __future__ import annotations

import logging
from datetime import timedelta

from embed_gate.db.time import Clock, utcnow
from embed_gate.repositories.base import GateRepository

logger = logging.getLogger(__name__)


class RetentionManager:
    """Keeps the message table bounded per address and in time."""

    def __init__(
        self,
        repository: GateRepository,
        *,
        cap: int = 100,
        max_age: timedelta = timedelta(days=7),
        clock: Clock = utcnow,
    ) -> None:
        self.repository = repository
        self.cap = cap
        self.max_age = max_age
        self.clock = clock

    def enforce_cap(self, source_address: str, cap: int | None = None) -> int:
        """Trim an address down to its ``cap`` most recent messages.

        Returns the number of deleted rows; zero once the address is at or
        under the cap.
        """
        limit = self.cap if cap is None else cap
        message_ids = self.repository.list_message_ids(source_address)
        excess = len(message_ids) - limit
        if excess <= 0:
            return 0
        deleted = self.repository.delete_messages(message_ids[:excess])
        logger.debug("Evicted %d oldest messages for %s", deleted, source_address)
        return deleted

    def sweep_expired(self, max_age: timedelta | None = None) -> int:
        """Delete messages older than ``max_age`` across every address."""
        cutoff = self.clock() - (self.max_age if max_age is None else max_age)
        deleted = self.repository.delete_messages_before(cutoff)
        if deleted:
            logger.info("Swept %d messages older than %s", deleted, cutoff.isoformat())
        return deleted

    def purge_recent(self, source_address: str, limit: int) -> int:
        """Delete the ``limit`` most recent messages of an address."""
        if limit <= 0:
            return 0
        message_ids = self.repository.list_message_ids(
            source_address,
            newest_first=True,
            limit=limit,
        )
        return self.repository.delete_messages(message_ids)
