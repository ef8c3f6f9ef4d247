"""Persistence adapters for messages and bans."""

from .base import BanRecord, GateRepository, StoreError
from .sql_repo import SqlGateRepository

__all__ = ["BanRecord", "GateRepository", "SqlGateRepository", "StoreError"]
