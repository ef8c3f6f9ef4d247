"""Temporary bans keyed by source address."""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from embed_gate.db.session import Base


class Ban(Base):
    """One row per address; the ban is active while ``banned_until`` is in the future.

    Expired rows are left in place and simply overwritten by the next ban.
    """

    __tablename__ = "bans"

    source_address: Mapped[str] = mapped_column(String(255), primary_key=True)
    banned_until: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
