"""SQLAlchemy models for the Embed Gate application."""

from .ban import Ban
from .message import MessageRecord

__all__ = ["Ban", "MessageRecord"]
