"""
Payment intent handler.

Creates a Tokopay order for the configured amount and channel and builds
the reply that carries the pay link and QR code. Gateway failures become
an apology message; nothing is stored either way.
"""

import logging
import time
from typing import Callable, Optional

from transport.fonnte.schemas import OutboundMessage
from transport.tokopay.client import PaymentGatewayError, TokopayClient
from transport.tokopay.reference import encode_reference

from . import templates

logger = logging.getLogger(__name__)


def _now_millis() -> int:
    return int(time.time() * 1000)


class PaymentIntentHandler:
    """Handle a user's request to pay."""

    def __init__(
        self,
        gateway: TokopayClient,
        amount: int,
        channel: str,
        default_pay_url: str = "Link pembayaran belum tersedia",
        default_qr_note: str = "QR code tidak tersedia, silakan gunakan link pembayaran",
        clock: Callable[[], int] = _now_millis,
    ):
        self.gateway = gateway
        self.amount = amount
        self.channel = channel
        self.default_pay_url = default_pay_url
        self.default_qr_note = default_qr_note
        self._clock = clock

    async def handle_intent(self, sender: str) -> OutboundMessage:
        """
        Create an order for `sender` and return the message to send back.

        Returns an image message (QR + caption) when the gateway supplied a
        QR link, a text message otherwise, and an apology text on failure.
        """
        try:
            reference_id = encode_reference(sender, self._clock())
        except ValueError as e:
            logger.error(f"Cannot build reference id for sender {sender!r}: {e}")
            return OutboundMessage(recipient=sender, text=templates.payment_unavailable())

        try:
            order = await self.gateway.create_order(reference_id, self.amount, self.channel)
        except PaymentGatewayError as e:
            logger.error(
                f"Payment order creation failed: {e}",
                extra={"reference_id": reference_id},
            )
            return OutboundMessage(recipient=sender, text=templates.payment_unavailable())

        body = templates.payment_link(order, self.default_pay_url, self.default_qr_note)

        if order.qr_link:
            return OutboundMessage(
                recipient=sender,
                kind="image",
                image_url=order.qr_link,
                caption=body,
            )
        return OutboundMessage(recipient=sender, text=body)
