"""
Chat auto-replies.

Keyword classification of inbound WhatsApp messages and delivery of the
reply through Fonnte. Payment keywords win over every other match so a
message like "hi, mau bayar" always starts a payment.
"""

import logging
from enum import Enum

from transport.fonnte.schemas import FonnteWebhookPayload, OutboundMessage
from transport.fonnte.sender import DeliveryError, FonnteSender

from . import templates
from .intent import PaymentIntentHandler

logger = logging.getLogger(__name__)


class Intent(str, Enum):
    PAYMENT = "payment"
    GREETING = "greeting"
    HELP = "help"
    PRODUCTS = "products"
    OTHER = "other"


# Checked in order; first hit wins.
INTENT_KEYWORDS: list[tuple[Intent, tuple[str, ...]]] = [
    (Intent.PAYMENT, ("bayar", "payment")),
    (Intent.GREETING, ("halo", "hi")),
    (Intent.HELP, ("help", "bantuan")),
    (Intent.PRODUCTS, ("produk",)),
]


def classify_intent(message: str) -> Intent:
    """Case-insensitive substring match against INTENT_KEYWORDS."""
    text = (message or "").lower()
    for intent, keywords in INTENT_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return intent
    return Intent.OTHER


class ChatResponder:
    """Build and deliver the reply to one inbound chat message."""

    def __init__(self, sender: FonnteSender, payments: PaymentIntentHandler):
        self.sender = sender
        self.payments = payments

    async def build_reply(self, payload: FonnteWebhookPayload) -> OutboundMessage:
        intent = classify_intent(payload.message)
        logger.debug(f"Classified message from {payload.sender} as {intent.value}")

        if intent is Intent.PAYMENT:
            return await self.payments.handle_intent(payload.sender)

        if intent is Intent.GREETING:
            text = templates.greeting(payload.name or payload.sender)
        elif intent is Intent.HELP:
            text = templates.help_menu()
        elif intent is Intent.PRODUCTS:
            text = templates.product_list()
        else:
            text = templates.fallback(payload.message)

        return OutboundMessage(recipient=payload.sender, text=text)

    async def reply(self, payload: FonnteWebhookPayload) -> str:
        """
        Reply to `payload` and return the reply text.

        Delivery failures are logged, never raised: the reply text is
        still returned for the webhook response.
        """
        message = await self.build_reply(payload)
        await self.deliver(message)
        return message.display_text

    async def deliver(self, message: OutboundMessage) -> bool:
        """Send `message`; an image that cannot be delivered degrades to its caption as text."""
        if message.kind == "image" and message.image_url:
            try:
                result = await self.sender.send_image(
                    message.recipient, message.image_url, message.caption
                )
                if result.delivered:
                    logger.info(f"Reply sent successfully to: {message.recipient}")
                    return True
                logger.warning(f"Image reply refused: {result.reason}; sending text only")
            except DeliveryError as e:
                logger.error(f"Failed to send image reply: {e}; sending text only")

        try:
            result = await self.sender.send_text(message.recipient, message.display_text)
        except DeliveryError as e:
            logger.error(f"Failed to send reply: {e}")
            return False

        if result.delivered:
            logger.info(f"Reply sent successfully to: {message.recipient}")
        return result.delivered
