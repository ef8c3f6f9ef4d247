"""Immutable abuse policy handed to the gatekeeper."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from embed_gate.core.settings import (
    DEFAULT_ALLOWED_FIELD_NAMES,
    DEFAULT_BLACKLIST,
    Settings,
    settings,
)


@dataclass(frozen=True)
class GatePolicy:
    """Thresholds, durations and allow-lists for one gatekeeper instance."""

    duplicate_window: timedelta = timedelta(seconds=60)
    # Number of prior identical messages inside the window that triggers a ban.
    duplicate_threshold: int = 3
    ban_duration: timedelta = timedelta(days=3)
    ban_purge_batch_size: int = 5
    message_cap: int = 100
    retention: timedelta = timedelta(days=7)
    sweep_on_request: bool = True
    min_embed_fields: int = 5
    allowed_colors: frozenset[int] = frozenset({6591981, 16711680})
    allowed_field_names: frozenset[str] = frozenset(DEFAULT_ALLOWED_FIELD_NAMES)
    blacklist: tuple[str, ...] = tuple(DEFAULT_BLACKLIST)


def load_gate_policy(source: Settings | None = None) -> GatePolicy:
    """Build the policy object from application settings."""
    cfg = source or settings
    return GatePolicy(
        duplicate_window=timedelta(seconds=cfg.duplicate_window_seconds),
        duplicate_threshold=cfg.duplicate_threshold,
        ban_duration=timedelta(seconds=cfg.ban_duration_seconds),
        ban_purge_batch_size=cfg.ban_purge_batch_size,
        message_cap=cfg.message_cap_per_address,
        retention=timedelta(seconds=cfg.retention_seconds),
        sweep_on_request=cfg.sweep_on_request,
        min_embed_fields=cfg.min_embed_fields,
        allowed_colors=frozenset(cfg.allowed_colors),
        allowed_field_names=frozenset(cfg.allowed_field_names),
        blacklist=tuple(word.lower() for word in cfg.blacklist if word),
    )
