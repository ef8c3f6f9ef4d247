"""SQLAlchemy implementation of the gate repository."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import NoReturn

from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from embed_gate.db.time import ensure_utc
from embed_gate.models import Ban, MessageRecord

from .base import BanRecord, StoreError

__all__ = ["SqlGateRepository"]

logger = logging.getLogger(__name__)

# Dialects with native INSERT ... ON CONFLICT DO UPDATE support.
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SqlGateRepository:
    """Thin wrapper around a SQLAlchemy session for message and ban rows.

    Every write commits immediately so that a ban or an insert is durable on
    its own, independent of the rest of the request.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def _fail(self, action: str, exc: SQLAlchemyError) -> NoReturn:
        try:
            self.session.rollback()
        except SQLAlchemyError:  # pragma: no cover - connection already gone
            logger.warning("Rollback after failed %s also failed", action)
        raise StoreError(f"Store failed to {action}") from exc

    # --- bans ---------------------------------------------------------------------
    def get_ban(self, source_address: str) -> BanRecord | None:
        try:
            row = self.session.execute(
                select(Ban.source_address, Ban.banned_until).where(
                    Ban.source_address == source_address
                )
            ).first()
        except SQLAlchemyError as exc:
            self._fail("read ban", exc)
        if row is None:
            return None
        return BanRecord(source_address=row.source_address, banned_until=ensure_utc(row.banned_until))

    def upsert_ban(self, source_address: str, banned_until: datetime) -> BanRecord:
        """Write ``banned_until`` unless a later expiry is already stored."""
        existing = self.get_ban(source_address)
        if existing is not None and existing.banned_until >= banned_until:
            return existing

        try:
            dialect = self.session.get_bind().dialect.name
            insert = _UPSERT_INSERTS.get(dialect)
            if insert is not None:
                stmt = insert(Ban).values(
                    source_address=source_address,
                    banned_until=banned_until,
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=[Ban.source_address],
                    set_={"banned_until": stmt.excluded.banned_until},
                )
                self.session.execute(stmt)
            else:
                self.session.merge(Ban(source_address=source_address, banned_until=banned_until))
            self.session.commit()
        except SQLAlchemyError as exc:
            self._fail("write ban", exc)
        return BanRecord(source_address=source_address, banned_until=banned_until)

    def delete_ban(self, source_address: str) -> bool:
        try:
            result = self.session.execute(
                delete(Ban)
                .where(Ban.source_address == source_address)
                .execution_options(synchronize_session=False)
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            self._fail("delete ban", exc)
        return bool(result.rowcount)

    # --- messages -----------------------------------------------------------------
    def insert_message(self, source_address: str, fingerprint: str, created_at: datetime) -> int:
        record = MessageRecord(
            source_address=source_address,
            fingerprint=fingerprint,
            created_at=created_at,
        )
        try:
            self.session.add(record)
            self.session.commit()
        except SQLAlchemyError as exc:
            self._fail("insert message", exc)
        return record.id

    def count_matching(
        self,
        source_address: str,
        fingerprint: str,
        start: datetime,
        end: datetime,
    ) -> int:
        try:
            total = self.session.execute(
                select(func.count())
                .select_from(MessageRecord)
                .where(
                    MessageRecord.source_address == source_address,
                    MessageRecord.fingerprint == fingerprint,
                    MessageRecord.created_at >= start,
                    MessageRecord.created_at <= end,
                )
            ).scalar()
        except SQLAlchemyError as exc:
            self._fail("count recent messages", exc)
        return int(total or 0)

    def count_messages(self, source_address: str) -> int:
        try:
            total = self.session.execute(
                select(func.count())
                .select_from(MessageRecord)
                .where(MessageRecord.source_address == source_address)
            ).scalar()
        except SQLAlchemyError as exc:
            self._fail("count messages", exc)
        return int(total or 0)

    def list_message_ids(
        self,
        source_address: str,
        *,
        newest_first: bool = False,
        limit: int | None = None,
    ) -> list[int]:
        # id breaks ties between rows written within the same clock tick.
        if newest_first:
            ordering = (MessageRecord.created_at.desc(), MessageRecord.id.desc())
        else:
            ordering = (MessageRecord.created_at.asc(), MessageRecord.id.asc())
        stmt = (
            select(MessageRecord.id)
            .where(MessageRecord.source_address == source_address)
            .order_by(*ordering)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            return list(self.session.execute(stmt).scalars())
        except SQLAlchemyError as exc:
            self._fail("list messages", exc)

    def delete_messages(self, message_ids: Sequence[int]) -> int:
        if not message_ids:
            return 0
        try:
            result = self.session.execute(
                delete(MessageRecord)
                .where(MessageRecord.id.in_(list(message_ids)))
                .execution_options(synchronize_session=False)
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            self._fail("delete messages", exc)
        return int(result.rowcount or 0)

    def delete_messages_before(self, cutoff: datetime) -> int:
        try:
            result = self.session.execute(
                delete(MessageRecord)
                .where(MessageRecord.created_at < cutoff)
                .execution_options(synchronize_session=False)
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            self._fail("delete expired messages", exc)
        return int(result.rowcount or 0)
