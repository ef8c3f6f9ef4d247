"""Business logic services for the Embed Gate application."""

from .bans import BanRegistry
from .delivery import DeliveryResult, WebhookDelivery
from .duplicates import DuplicateDetector
from .gatekeeper import GateDecision, GateKeeper, GateOutcome, InboundRequest
from .retention import RetentionManager

__all__ = [
    "BanRegistry",
    "DeliveryResult", "WebhookDelivery",
    "DuplicateDetector",
    "GateDecision", "GateKeeper", "GateOutcome", "InboundRequest",
    "RetentionManager",
]
