"""Builders for payloads and test doubles shared across the suite."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

from embed_gate.services.delivery import DeliveryResult

ALLOWED_COLOR = 6591981

VALID_FIELDS: list[dict[str, Any]] = [
    {"name": "🪙 Name:", "value": "Golden Dragon", "inline": True},
    {"name": "📈 Generation:", "value": "12M/s", "inline": True},
    {"name": "👥 Players:", "value": "5/8", "inline": True},
    {"name": "🔗 Server Link:", "value": "https://example.com/server/1", "inline": False},
    {"name": "📱 Job-ID (Mobile):", "value": "abc-123"},
]


def build_embed(**overrides: Any) -> dict[str, Any]:
    """Return a valid embed dict, with any top-level key overridden."""
    embed: dict[str, Any] = {
        "title": "New server found",
        "description": "A rare pet just spawned",
        "color": ALLOWED_COLOR,
        "fields": copy.deepcopy(VALID_FIELDS),
    }
    embed.update(overrides)
    return embed


def build_payload(**overrides: Any) -> dict[str, Any]:
    """Return a valid webhook body wrapping `build_embed`."""
    return {"embeds": [build_embed(**overrides)]}


class FakeClock:
    """Controllable clock for time-dependent tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class RecordingDelivery:
    """Delivery double that records payloads and returns a fixed result."""

    def __init__(self, result: DeliveryResult | None = None) -> None:
        self.result = result or DeliveryResult(ok=True, status_code=204)
        self.payloads: list[Mapping[str, Any]] = []
        self.enabled = True

    async def deliver(self, payload: Mapping[str, Any]) -> DeliveryResult:
        self.payloads.append(payload)
        return self.result
