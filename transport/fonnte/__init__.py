"""Fonnte (WhatsApp gateway) Transport Layer - Module Exports"""

from .schemas import (
    DeliveryResult,
    DeviceStatus,
    FonnteResponse,
    FonnteWebhookPayload,
    OutboundMessage,
)
from .sender import DeliveryError, FonnteSender

__all__ = [
    # Schemas
    "FonnteWebhookPayload",
    "OutboundMessage",
    "FonnteResponse",
    "DeliveryResult",
    "DeviceStatus",
    # Sender
    "FonnteSender",
    "DeliveryError",
]
