"""Tests for webhook delivery."""

from __future__ import annotations

import json

import httpx
import pytest

from embed_gate.services.delivery import (
    WebhookConfig,
    WebhookDelivery,
    get_webhook_delivery,
)

WEBHOOK_URL = "https://discord.test/api/webhooks/1/token"


def _delivery(handler) -> WebhookDelivery:
    return WebhookDelivery(
        WebhookConfig(url=WEBHOOK_URL, timeout_seconds=5.0),
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_deliver_posts_json_payload() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    delivery = _delivery(handler)
    payload = {"embeds": [{"title": "New server found", "fields": []}]}

    result = await delivery.deliver(payload)
    await delivery.close()

    assert result.ok is True
    assert result.status_code == 204
    assert len(seen) == 1
    assert seen[0].method == "POST"
    assert str(seen[0].url) == WEBHOOK_URL
    assert json.loads(seen[0].content) == payload


@pytest.mark.asyncio
async def test_deliver_reports_http_errors() -> None:
    delivery = _delivery(lambda request: httpx.Response(500, text="upstream exploded"))

    result = await delivery.deliver({"embeds": []})
    await delivery.close()

    assert result.ok is False
    assert result.status_code == 500
    assert result.error == "http_status"


@pytest.mark.asyncio
async def test_deliver_reports_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    delivery = _delivery(handler)

    result = await delivery.deliver({"embeds": []})
    await delivery.close()

    assert result.ok is False
    assert result.status_code is None
    assert result.error == "ConnectError"


@pytest.mark.asyncio
async def test_deliver_without_url_is_disabled() -> None:
    delivery = WebhookDelivery(WebhookConfig(url=None, timeout_seconds=5.0))

    assert delivery.enabled is False
    result = await delivery.deliver({"embeds": []})

    assert result.ok is False
    assert result.error == "disabled"


@pytest.mark.asyncio
async def test_client_is_reused_until_closed() -> None:
    delivery = _delivery(lambda request: httpx.Response(200))

    first = await delivery._ensure_client()
    second = await delivery._ensure_client()
    assert first is second

    await delivery.close()
    assert delivery._client is None


def test_get_webhook_delivery_is_singleton() -> None:
    assert get_webhook_delivery() is get_webhook_delivery()
