"""Pytest configuration and fixtures."""

import hashlib
import hmac
import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from infra.config import RelayConfig  # noqa: E402

MERCHANT_ID = "M230101ABC"
SECRET_KEY = "test_secret_key"
FONNTE_TOKEN = "fonnte_test_token"


def tokopay_signature(merchant_id: str, reference_id: str, amount, status: str, secret: str = SECRET_KEY) -> str:
    """What Tokopay puts in the callback `signature` field."""
    return hmac.new(
        key=secret.encode(),
        msg=f"{merchant_id}:{reference_id}:{amount}:{status}".encode(),
        digestmod=hashlib.sha256,
    ).hexdigest()


def callback_payload(
    reference_id: str = "payment_628123456789_1700000000000",
    status: str = "SUCCESS",
    amount: int = 10000,
    **overrides,
) -> dict:
    """A correctly signed Tokopay callback body."""
    payload = {
        "reference_id": reference_id,
        "merchant_id": MERCHANT_ID,
        "amount": amount,
        "fee": 150,
        "status": status,
        "paid_at": "2023-11-14 22:13:20",
        "signature": tokopay_signature(MERCHANT_ID, reference_id, amount, status),
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def relay_config() -> RelayConfig:
    return RelayConfig(
        fonnte_token=FONNTE_TOKEN,
        fonnte_device=None,
        fonnte_base_url="https://api.fonnte.com",
        country_code="62",
        tokopay_merchant_id=MERCHANT_ID,
        tokopay_secret_key=SECRET_KEY,
        tokopay_base_url="https://api.tokopay.id",
        payment_amount=10000,
        payment_channel="QRIS",
        default_pay_url="Link pembayaran belum tersedia",
        default_qr_note="QR code tidak tersedia",
        first_delay_seconds=3.0,
        second_delay_seconds=5.0,
        dedup_enabled=False,
        dedup_ttl_seconds=3600.0,
        http_timeout_seconds=5.0,
    )


class VirtualClock:
    """Sleep replacement that advances a fake clock instead of waiting."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def virtual_clock() -> VirtualClock:
    return VirtualClock()
