"""Storage contract consumed by the abuse-detection engine.

The engine never touches a session or a driver directly; everything it needs
from the store is expressed here as point reads, inserts, deletes, an upsert
keyed by address and range queries over message timestamps.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

__all__ = ["BanRecord", "GateRepository", "StoreError"]


class StoreError(RuntimeError):
    """Raised when the backing store fails to read or write.

    Callers must treat this as an infrastructure failure, never as an
    empty result.
    """


@dataclass(frozen=True)
class BanRecord:
    """Snapshot of a ban row."""

    source_address: str
    banned_until: datetime


class GateRepository(Protocol):
    """Operations the gatekeeper performs against the message and ban store."""

    def get_ban(self, source_address: str) -> BanRecord | None:
        """Return the ban row for an address, or None if it was never banned."""
        ...

    def upsert_ban(self, source_address: str, banned_until: datetime) -> BanRecord:
        """Create or extend the ban for an address and return the stored row."""
        ...

    def delete_ban(self, source_address: str) -> bool:
        """Remove the ban row for an address; return True if one existed."""
        ...

    def insert_message(
        self, source_address: str, fingerprint: str, created_at: datetime
    ) -> int:
        """Store a message fingerprint and return its identifier."""
        ...

    def count_matching(
        self,
        source_address: str,
        fingerprint: str,
        start: datetime,
        end: datetime,
    ) -> int:
        """Count messages for an address and fingerprint with start <= created_at <= end."""
        ...

    def count_messages(self, source_address: str) -> int:
        """Count every stored message for an address."""
        ...

    def list_message_ids(
        self,
        source_address: str,
        *,
        newest_first: bool = False,
        limit: int | None = None,
    ) -> list[int]:
        """Return message identifiers for an address ordered by creation time."""
        ...

    def delete_messages(self, message_ids: Sequence[int]) -> int:
        """Delete messages by identifier and return the number removed."""
        ...

    def delete_messages_before(self, cutoff: datetime) -> int:
        """Delete messages created strictly before ``cutoff`` across all addresses."""
        ...
