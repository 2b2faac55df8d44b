"""
Infrastructure configuration system.

Environment-based gateway credentials and relay tuning with sensible defaults.
Built once at process start and handed to each component's constructor;
business logic never reads the environment itself.
"""

import os
from typing import Optional
from dataclasses import dataclass


class ConfigurationError(Exception):
    """Required configuration is missing or malformed."""
    pass


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class RelayConfig:
    """Relay configuration from environment."""

    # Fonnte (WhatsApp gateway)
    fonnte_token: str
    fonnte_device: Optional[str]
    fonnte_base_url: str
    country_code: str

    # Tokopay (payment gateway)
    tokopay_merchant_id: str
    tokopay_secret_key: str
    tokopay_base_url: str

    # Payment intent
    payment_amount: int
    payment_channel: str
    default_pay_url: str
    default_qr_note: str

    # Notification sequence
    first_delay_seconds: float
    second_delay_seconds: float
    dedup_enabled: bool
    dedup_ttl_seconds: float

    # Outbound HTTP
    http_timeout_seconds: float

    @classmethod
    def from_env(cls) -> "RelayConfig":
        """
        Load configuration from environment variables.

        Raises:
            ConfigurationError: Numeric settings cannot be parsed
        """
        try:
            return cls(
                fonnte_token=os.getenv("FONNTE_TOKEN", ""),
                fonnte_device=os.getenv("FONNTE_DEVICE") or None,
                fonnte_base_url=os.getenv("FONNTE_BASE_URL", "https://api.fonnte.com"),
                country_code=os.getenv("FONNTE_COUNTRY_CODE", "62"),

                tokopay_merchant_id=os.getenv("TOKOPAY_MERCHANT_ID", ""),
                tokopay_secret_key=os.getenv("TOKOPAY_SECRET_KEY", ""),
                tokopay_base_url=os.getenv("TOKOPAY_BASE_URL", "https://api.tokopay.id"),

                payment_amount=int(os.getenv("PAYMENT_AMOUNT", "10000")),
                payment_channel=os.getenv("PAYMENT_CHANNEL", "QRIS"),
                default_pay_url=os.getenv("PAYMENT_DEFAULT_PAY_URL", "Link pembayaran belum tersedia"),
                default_qr_note=os.getenv(
                    "PAYMENT_DEFAULT_QR_NOTE", "QR code tidak tersedia, silakan gunakan link pembayaran"
                ),

                first_delay_seconds=float(os.getenv("PAYMENT_FIRST_DELAY_SECONDS", "3")),
                second_delay_seconds=float(os.getenv("PAYMENT_SECOND_DELAY_SECONDS", "5")),
                dedup_enabled=_env_bool("PAYMENT_DEDUP_ENABLED", "false"),
                dedup_ttl_seconds=float(os.getenv("PAYMENT_DEDUP_TTL_SECONDS", "3600")),

                http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "10")),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

    def validate(self) -> None:
        """
        Check that required credentials are present.

        Raises:
            ConfigurationError: With the names of the missing variables
        """
        missing = []
        if not self.fonnte_token:
            missing.append("FONNTE_TOKEN")
        if not self.tokopay_merchant_id:
            missing.append("TOKOPAY_MERCHANT_ID")
        if not self.tokopay_secret_key:
            missing.append("TOKOPAY_SECRET_KEY")
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        if self.payment_amount <= 0:
            raise ConfigurationError("PAYMENT_AMOUNT must be positive")


def get_config() -> RelayConfig:
    """Get relay configuration from the environment."""
    return RelayConfig.from_env()
