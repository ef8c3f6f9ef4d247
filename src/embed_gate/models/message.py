"""Models describing admitted messages kept for duplicate detection."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from embed_gate.db.session import Base
from embed_gate.db.time import utcnow


class MessageRecord(Base):
    """Fingerprint of an accepted message; the content itself is never stored."""

    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_address_fingerprint_created", "source_address", "fingerprint", "created_at"),
    )

    # SQLite only autoincrements INTEGER primary keys.
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    source_address: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    # Lowercase hex SHA-256 of the normalized embed.
    fingerprint: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )
