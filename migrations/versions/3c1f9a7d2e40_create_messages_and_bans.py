"""create messages and bans

Revision ID: 3c1f9a7d2e40
Revises:
Create Date: 2026-10-19 09:12:44.301215

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1f9a7d2e40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the message fingerprint and ban tables."""
    op.create_table(
        "messages",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            autoincrement=True,
            nullable=False,
        ),
        sa.Column("source_address", sa.String(length=255), nullable=False),
        sa.Column("fingerprint", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_messages_source_address", "messages", ["source_address"])
    op.create_index("ix_messages_created_at", "messages", ["created_at"])
    op.create_index(
        "ix_messages_address_fingerprint_created",
        "messages",
        ["source_address", "fingerprint", "created_at"],
    )

    op.create_table(
        "bans",
        sa.Column("source_address", sa.String(length=255), nullable=False),
        sa.Column("banned_until", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("source_address"),
    )


def downgrade() -> None:
    """Drop the message fingerprint and ban tables."""
    op.drop_table("bans")
    op.drop_index("ix_messages_address_fingerprint_created", table_name="messages")
    op.drop_index("ix_messages_created_at", table_name="messages")
    op.drop_index("ix_messages_source_address", table_name="messages")
    op.drop_table("messages")
