"""
Chat Reply Tests

Keyword classification and reply delivery (with image → text degrade).
"""

from unittest.mock import AsyncMock

import pytest

from payments.replies import ChatResponder, Intent, classify_intent
from transport.fonnte.schemas import DeliveryResult, FonnteWebhookPayload, OutboundMessage
from transport.fonnte.sender import DeliveryError

SENDER = "628123456789"


def payload(message: str, name=None) -> FonnteWebhookPayload:
    return FonnteWebhookPayload(device="628111111111", sender=SENDER, message=message, name=name)


def make_responder(outbound: OutboundMessage = None):
    sender = AsyncMock()
    sender.send_text.return_value = DeliveryResult(delivered=True)
    sender.send_image.return_value = DeliveryResult(delivered=True)
    payments = AsyncMock()
    payments.handle_intent.return_value = outbound or OutboundMessage(recipient=SENDER, text="Tagihan")
    return ChatResponder(sender, payments), sender, payments


class TestClassifyIntent:
    @pytest.mark.parametrize(
        "message",
        ["bayar", "BAYAR", "Mau Bayar dong", "hi, saya mau bayar", "pembayaran", "payment please", "help bayar"],
    )
    def test_payment_keyword_wins(self, message):
        assert classify_intent(message) is Intent.PAYMENT

    @pytest.mark.parametrize(
        "message, intent",
        [
            ("Halo kak", Intent.GREETING),
            ("hi", Intent.GREETING),
            ("butuh bantuan", Intent.HELP),
            ("HELP", Intent.HELP),
            ("lihat produk", Intent.PRODUCTS),
            ("apa kabar?", Intent.OTHER),
            ("", Intent.OTHER),
        ],
    )
    def test_other_intents(self, message, intent):
        assert classify_intent(message) is intent


class TestReply:
    @pytest.mark.asyncio
    async def test_payment_message_triggers_one_intent(self):
        responder, sender, payments = make_responder()

        reply = await responder.reply(payload("Kak, aku mau BAYAR sekarang"))

        payments.handle_intent.assert_awaited_once_with(SENDER)
        sender.send_text.assert_awaited_once_with(SENDER, "Tagihan")
        assert reply == "Tagihan"

    @pytest.mark.asyncio
    async def test_greeting_uses_name(self):
        responder, sender, payments = make_responder()

        reply = await responder.reply(payload("halo", name="Budi"))

        payments.handle_intent.assert_not_awaited()
        assert "Halo Budi!" in reply

    @pytest.mark.asyncio
    async def test_greeting_falls_back_to_sender(self):
        responder, _, _ = make_responder()

        reply = await responder.reply(payload("hi"))

        assert f"Halo {SENDER}!" in reply

    @pytest.mark.asyncio
    async def test_fallback_echoes_message(self):
        responder, _, _ = make_responder()

        reply = await responder.reply(payload("apa kabar?"))

        assert '"apa kabar?"' in reply

    @pytest.mark.asyncio
    async def test_send_failure_still_returns_reply(self):
        responder, sender, _ = make_responder()
        sender.send_text.side_effect = DeliveryError("gateway down")

        reply = await responder.reply(payload("produk"))

        assert "Produk kami" in reply


class TestImageDelivery:
    QR = OutboundMessage(recipient=SENDER, kind="image", image_url="https://pay/qr.png", caption="Scan ya")

    @pytest.mark.asyncio
    async def test_image_reply_sent_as_image(self):
        responder, sender, _ = make_responder(self.QR)

        reply = await responder.reply(payload("bayar"))

        sender.send_image.assert_awaited_once_with(SENDER, "https://pay/qr.png", "Scan ya")
        sender.send_text.assert_not_awaited()
        assert reply == "Scan ya"

    @pytest.mark.asyncio
    async def test_image_failure_degrades_to_text(self):
        responder, sender, _ = make_responder(self.QR)
        sender.send_image.side_effect = DeliveryError("Failed to send image")

        delivered = await responder.deliver(self.QR)

        sender.send_text.assert_awaited_once_with(SENDER, "Scan ya")
        assert delivered is True

    @pytest.mark.asyncio
    async def test_image_refused_degrades_to_text(self):
        responder, sender, _ = make_responder(self.QR)
        sender.send_image.return_value = DeliveryResult(delivered=False, reason="invalid url")

        await responder.deliver(self.QR)

        sender.send_text.assert_awaited_once_with(SENDER, "Scan ya")
