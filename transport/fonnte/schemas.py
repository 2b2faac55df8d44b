"""
Fonnte Transport Layer - Pydantic Schemas

PURE DATA MODELS - NO LOGIC
Only defines the contract between Fonnte and the relay.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


# ============================================================================
# FONNTE WEBHOOK PAYLOAD (INPUT)
# ============================================================================

class FonnteWebhookPayload(BaseModel):
    """
    Inbound chat message forwarded by Fonnte.

    ref: https://docs.fonnte.com/webhook-reply-message/
    """

    device: str = Field(..., description="Device number that received the message")
    sender: str = Field(..., description="Sender WhatsApp number")
    message: str = Field("", description="Message text")
    name: Optional[str] = None
    member: Optional[str] = None
    location: Optional[str] = None
    file: Optional[str] = None
    filename: Optional[str] = None

    class Config:
        frozen = True
        extra = "allow"  # Fonnte may add fields


# ============================================================================
# OUTBOUND MESSAGE (THE CONTRACT)
# ============================================================================

class OutboundMessage(BaseModel):
    """A message about to be delivered. Ephemeral, never persisted."""

    recipient: str
    kind: Literal["text", "image"] = "text"
    text: Optional[str] = None
    image_url: Optional[str] = None
    caption: Optional[str] = None

    class Config:
        frozen = True

    @property
    def display_text(self) -> str:
        """Text shown to the user, whichever kind this is."""
        if self.kind == "image":
            return self.caption or ""
        return self.text or ""


# ============================================================================
# FONNTE API RESPONSES (OUTPUT)
# ============================================================================

class FonnteResponse(BaseModel):
    """Response from POST /send."""

    status: bool = False
    message: Optional[str] = None
    detail: Optional[str] = None
    id: Any = None  # str, int or a list of either
    reason: Optional[str] = None

    class Config:
        extra = "allow"


class DeliveryResult(BaseModel):
    """Outcome of one send operation."""

    delivered: bool
    gateway_message_id: Optional[str] = None
    reason: Optional[str] = None

    class Config:
        frozen = True


class DeviceStatus(BaseModel):
    """Response from POST /device."""

    device_status: Optional[str] = None
    device_id: Optional[str] = Field(None, alias="device")
    webhook: Optional[str] = None
    expired: Optional[str] = None

    class Config:
        populate_by_name = True
        extra = "allow"
