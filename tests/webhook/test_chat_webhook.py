"""
Fonnte Chat Webhook Endpoint Tests

HTTP contract of POST /api/webhook, including the "bayar" payment path
end to end against MockTransport gateways.
"""

import json
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient

from infra.bootstrap import RelayBootstrap
from main import app
from transport.fonnte.sender import DeliveryError

SENDER = "628123456789"


class FakeGateways:
    def __init__(self, order_body=None, fonnte_ok=True):
        self.order_requests: list[httpx.Request] = []
        self.fonnte_requests: list[httpx.Request] = []
        self.order_body = order_body or {
            "status": "Success",
            "data": {
                "pay_url": "https://pay.tokopay.id/abc",
                "qr_link": "https://pay.tokopay.id/qr/abc.png",
                "total_bayar": 10000,
            },
        }
        self.fonnte_ok = fonnte_ok

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.tokopay.id":
            self.order_requests.append(request)
            return httpx.Response(200, json=self.order_body)
        self.fonnte_requests.append(request)
        if request.url.path == "/device":
            return httpx.Response(200, json={"device": "628111111111", "device_status": "connect"})
        return httpx.Response(200, json={"status": self.fonnte_ok, "id": ["1"]})


def make_client(relay_config, gateways):
    http = httpx.AsyncClient(transport=httpx.MockTransport(gateways))
    relay = RelayBootstrap(relay_config, http_client=http)
    return patch("webhook.chat.get_relay", return_value=relay)


def chat_payload(message: str, **extra) -> dict:
    return {"device": "628111111111", "sender": SENDER, "message": message, **extra}


class TestChatWebhook:
    def test_greeting_reply(self, relay_config):
        gateways = FakeGateways()
        with make_client(relay_config, gateways):
            response = TestClient(app).post("/api/webhook", json=chat_payload("halo", name="Budi"))

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Webhook received successfully"
        assert "Halo Budi!" in body["response"]
        assert len(gateways.fonnte_requests) == 1
        assert gateways.order_requests == []

    @pytest.mark.parametrize("message", ["bayar", "Mau BAYAR dong kak", "halo, bayar ya"])
    def test_payment_keyword_creates_exactly_one_order(self, relay_config, message):
        gateways = FakeGateways()
        with make_client(relay_config, gateways):
            response = TestClient(app).post("/api/webhook", json=chat_payload(message))

        assert response.status_code == 200
        assert len(gateways.order_requests) == 1
        params = gateways.order_requests[0].url.params
        assert params["nominal"] == "10000"
        assert params["metode"] == "QRIS"
        assert params["ref_id"].startswith(f"payment_{SENDER}_")
        assert "https://pay.tokopay.id/abc" in response.json()["response"]

        # QR goes out as an image (JSON strategy accepted)
        sent = json.loads(gateways.fonnte_requests[0].content)
        assert sent["file"] == "https://pay.tokopay.id/qr/abc.png"

    def test_gateway_failure_returns_apology_not_500(self, relay_config):
        gateways = FakeGateways(order_body={"status": "Failed", "error_msg": "Merchant not active"})
        with make_client(relay_config, gateways):
            response = TestClient(app).post("/api/webhook", json=chat_payload("bayar"))

        assert response.status_code == 200
        assert "Maaf" in response.json()["response"]

    def test_refused_image_falls_back_then_degrades_to_text(self, relay_config):
        gateways = FakeGateways(fonnte_ok=False)
        with make_client(relay_config, gateways):
            response = TestClient(app).post("/api/webhook", json=chat_payload("bayar"))

        assert response.status_code == 200
        # JSON image, multipart image, then plain text
        assert len(gateways.fonnte_requests) == 3
        assert gateways.fonnte_requests[1].headers["content-type"].startswith("multipart/form-data")

    def test_invalid_payload_returns_500(self, relay_config):
        with make_client(relay_config, FakeGateways()):
            response = TestClient(app).post("/api/webhook", json={"message": "halo"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed to process webhook"}

    def test_non_utf8_body_returns_contract_error(self, relay_config):
        with make_client(relay_config, FakeGateways()):
            response = TestClient(app).post(
                "/api/webhook",
                content=b'{"sender": "\xff"}',
                headers={"Content-Type": "application/json"},
            )

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed to process webhook"}

    def test_ready_probe(self):
        response = TestClient(app).get("/api/webhook")

        assert response.status_code == 200
        assert response.json()["status"] == "active"


class TestDeviceStatus:
    def test_device_status(self, relay_config):
        with make_client(relay_config, FakeGateways()):
            response = TestClient(app).get("/api/webhook/device")

        assert response.status_code == 200
        assert response.json()["device_status"] == "connect"

    def test_device_status_gateway_error(self, relay_config):
        relay = RelayBootstrap(relay_config)
        with patch("webhook.chat.get_relay", return_value=relay), patch.object(
            relay.sender, "get_device_status", side_effect=DeliveryError("down")
        ):
            response = TestClient(app).get("/api/webhook/device")

        assert response.status_code == 502


class TestHealth:
    def test_live(self):
        assert TestClient(app).get("/health/live").json() == {"status": "alive"}

    def test_root_lists_endpoints(self):
        body = TestClient(app).get("/").json()
        assert body["endpoints"]["payment_webhook"] == "POST /api/tokopay-webhook"
