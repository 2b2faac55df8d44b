"""
Tokopay Webhook Endpoint Tests

HTTP contract of POST /api/tokopay-webhook, wired to a real relay whose
gateways are MockTransports.
"""

import json
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import callback_payload
from infra.bootstrap import RelayBootstrap
from main import app
from payments.scheduler import AsyncioScheduler


class FakeGateways:
    """Records Fonnte sends and answers Tokopay status lookups."""

    def __init__(self):
        self.fonnte_sends: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.fonnte.com":
            self.fonnte_sends.append(json.loads(request.content))
            return httpx.Response(200, json={"status": True, "id": ["1"]})
        if request.url.path == "/v1/payment/status":
            return httpx.Response(200, json={"status": "Success", "data": {"status": "Paid"}})
        return httpx.Response(404, json={})


@pytest.fixture
def gateways():
    return FakeGateways()


@pytest.fixture
def relay(relay_config, gateways, virtual_clock):
    http = httpx.AsyncClient(transport=httpx.MockTransport(gateways))
    return RelayBootstrap(
        relay_config,
        http_client=http,
        scheduler=AsyncioScheduler(sleep=virtual_clock.sleep),
    )


@pytest.fixture
def client(relay):
    with patch("webhook.payment.get_relay", return_value=relay):
        with TestClient(app) as test_client:
            yield test_client


class TestTokopayWebhook:
    def test_success_acknowledged_and_sequence_completes(self, client, relay, gateways):
        response = client.post("/api/tokopay-webhook", json=callback_payload(status="SUCCESS"))

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Webhook processed successfully"}

        client.portal.call(relay.scheduler.drain)

        assert len(gateways.fonnte_sends) == 3
        assert {send["target"] for send in gateways.fonnte_sends} == {"628123456789"}

    @pytest.mark.parametrize("status", ["FAILED", "PENDING"])
    def test_single_message_statuses(self, client, gateways, status):
        response = client.post("/api/tokopay-webhook", json=callback_payload(status=status))

        assert response.status_code == 200
        assert len(gateways.fonnte_sends) == 1

    def test_invalid_signature_returns_401_and_sends_nothing(self, client, relay, gateways):
        payload = callback_payload(status="SUCCESS")
        payload["amount"] = 1  # tampered after signing

        response = client.post("/api/tokopay-webhook", json=payload)
        client.portal.call(relay.scheduler.drain)

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Invalid signature"}
        assert gateways.fonnte_sends == []

    def test_unresolvable_reference_acknowledged_without_send(self, client, gateways):
        response = client.post(
            "/api/tokopay-webhook", json=callback_payload(reference_id="payment_abc_123")
        )

        assert response.status_code == 200
        assert gateways.fonnte_sends == []

    def test_malformed_json_returns_500(self, client):
        response = client.post(
            "/api/tokopay-webhook",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed to process webhook"}

    def test_string_amount_returns_500_without_send(self, client, gateways):
        payload = callback_payload()
        payload["amount"] = "010000"

        response = client.post("/api/tokopay-webhook", json=payload)

        assert response.status_code == 500
        assert gateways.fonnte_sends == []

    def test_non_utf8_body_returns_contract_error(self, client):
        response = client.post(
            "/api/tokopay-webhook",
            content=b'{"sender": "\xff"}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed to process webhook"}

    def test_missing_fields_returns_500(self, client, gateways):
        response = client.post("/api/tokopay-webhook", json={"reference_id": "payment_1_1"})

        assert response.status_code == 500
        assert gateways.fonnte_sends == []

    def test_unexpected_error_returns_500(self, relay):
        with patch("webhook.payment.get_relay", side_effect=RuntimeError("boom")):
            with TestClient(app) as test_client:
                response = test_client.post("/api/tokopay-webhook", json=callback_payload())

        assert response.status_code == 500
        assert response.json()["success"] is False

    def test_ready_probe(self, client):
        response = client.get("/api/tokopay-webhook")

        assert response.status_code == 200
        assert response.json()["status"] == "active"


class TestPaymentStatusLookup:
    def test_status_passthrough(self, client):
        response = client.get("/api/payments/payment_628123456789_1700000000000/status")

        assert response.status_code == 200
        assert response.json() == {
            "reference_id": "payment_628123456789_1700000000000",
            "success": True,
            "payment_status": "Paid",
        }
