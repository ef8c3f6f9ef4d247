"""Temporary address bans."""

from __future__ import annotations

import logging
from datetime import timedelta

from embed_gate.db.time import Clock, utcnow
from embed_gate.repositories.base import BanRecord, GateRepository

logger = logging.getLogger(__name__)


class BanRegistry:
    """Answers whether an address is banned and records new bans.

    A ban is active while ``now < banned_until``; there is no separate flag and
    expired rows are left in the store.
    """

    def __init__(
        self,
        repository: GateRepository,
        *,
        ban_duration: timedelta = timedelta(days=3),
        clock: Clock = utcnow,
    ) -> None:
        self.repository = repository
        self.ban_duration = ban_duration
        self.clock = clock

    def get_ban(self, source_address: str) -> BanRecord | None:
        """Return the stored ban row, active or not."""
        return self.repository.get_ban(source_address)

    def is_banned(self, source_address: str) -> bool:
        """Return True if the address has an unexpired ban.

        Store failures propagate as `StoreError`; they never read as "not banned".
        """
        return self.is_active(self.repository.get_ban(source_address))

    def is_active(self, ban: BanRecord | None) -> bool:
        """Return True if ``ban`` exists and has not expired yet."""
        return ban is not None and self.clock() < ban.banned_until

    def ban(self, source_address: str, duration: timedelta | None = None) -> BanRecord:
        """Ban an address for ``duration`` (the configured length by default)."""
        banned_until = self.clock() + (duration if duration is not None else self.ban_duration)
        record = self.repository.upsert_ban(source_address, banned_until)
        logger.info("Banned %s until %s", source_address, record.banned_until.isoformat())
        return record
