"""Delivery of accepted embeds to the downstream webhook.

The gatekeeper only needs a yes/no answer from delivery, so network errors
and non-2xx responses are folded into a failed `DeliveryResult` here. The
response body from the channel is logged, never returned to callers.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from embed_gate.core.settings import settings

logger = logging.getLogger(__name__)

# Enough of the downstream error body to diagnose, without flooding the log.
_ERROR_BODY_LIMIT = 500


class DeliveryError(RuntimeError):
    """Base exception raised for delivery-related failures."""


class DeliveryDisabledError(DeliveryError):
    """Raised when delivery is attempted without a configured webhook URL."""


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of one delivery attempt."""

    ok: bool
    status_code: int | None = None
    error: str | None = None


class Deliverer(Protocol):
    """Anything able to forward a payload to the notification channel."""

    async def deliver(self, payload: Mapping[str, Any]) -> DeliveryResult: ...


@dataclass(frozen=True)
class WebhookConfig:
    """Immutable configuration for webhook delivery."""

    url: str | None
    timeout_seconds: float


def load_webhook_config() -> WebhookConfig:
    """Build configuration object from global settings."""
    return WebhookConfig(
        url=settings.webhook_url,
        timeout_seconds=float(settings.webhook_timeout_seconds),
    )


class WebhookDelivery:
    """HTTP client wrapper posting embeds to a single webhook URL.

    One synchronous attempt per call; there is no retry.
    """

    def __init__(
        self,
        config: WebhookConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_webhook_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return bool(self.config.url)

    async def _ensure_client(self) -> httpx.AsyncClient:
        if not self.enabled:
            raise DeliveryDisabledError("Webhook URL is not configured")

        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    async def deliver(self, payload: Mapping[str, Any]) -> DeliveryResult:
        """POST ``payload`` as JSON to the webhook and report success."""
        try:
            client = await self._ensure_client()
            response = await client.post(self.config.url or "", json=dict(payload))
        except DeliveryDisabledError as exc:
            logger.error("Delivery skipped: %s", exc)
            return DeliveryResult(ok=False, error="disabled")
        except httpx.HTTPError as exc:
            logger.error("Webhook request failed: %s", exc)
            return DeliveryResult(ok=False, error=type(exc).__name__)

        if not response.is_success:
            logger.error(
                "Webhook responded with %d: %s",
                response.status_code,
                response.text[:_ERROR_BODY_LIMIT],
            )
            return DeliveryResult(ok=False, status_code=response.status_code, error="http_status")

        return DeliveryResult(ok=True, status_code=response.status_code)

    async def close(self) -> None:
        """Clean up underlying HTTP client resources."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


class _WebhookDeliverySingleton:
    """Singleton wrapper for WebhookDelivery."""

    _instance: WebhookDelivery | None = None

    @classmethod
    def get_instance(cls) -> WebhookDelivery:
        """Get or create the singleton WebhookDelivery instance."""
        if cls._instance is None:
            cls._instance = WebhookDelivery()
        return cls._instance


def get_webhook_delivery() -> WebhookDelivery:
    """Return a singleton webhook delivery instance."""
    return _WebhookDeliverySingleton.get_instance()
