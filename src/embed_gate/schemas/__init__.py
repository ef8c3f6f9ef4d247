"""
Pydantic schemas for inbound webhook payloads.

These schemas define the structure of an embed before any abuse checks run.
"""

from .embed import Embed, EmbedField

__all__ = ["Embed", "EmbedField"]
