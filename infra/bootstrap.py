"""
Infrastructure initialization and bootstrap.

Singleton pattern for creating the gateway clients and payment handlers
from configuration.
"""

from typing import Optional

import httpx

from payments import (
    AsyncioScheduler,
    ChatResponder,
    NotificationSequencer,
    PaymentIntentHandler,
    ProcessedReferenceStore,
    Scheduler,
)
from transport.fonnte import FonnteSender
from transport.tokopay import SignatureCodec, TokopayClient

from .config import RelayConfig, get_config


class RelayBootstrap:
    """
    Bootstrap the relay based on configuration.

    Singleton pattern - single instance per process.
    """

    _instance: Optional["RelayBootstrap"] = None

    def __init__(
        self,
        config: Optional[RelayConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        """
        Initialize bootstrap with configuration.

        Raises:
            ConfigurationError: Required credentials are missing
        """
        self.config = config or get_config()
        self.config.validate()

        self.sender = FonnteSender(
            token=self.config.fonnte_token,
            device=self.config.fonnte_device,
            base_url=self.config.fonnte_base_url,
            country_code=self.config.country_code,
            timeout=self.config.http_timeout_seconds,
            client=http_client,
        )
        self.tokopay = TokopayClient(
            merchant_id=self.config.tokopay_merchant_id,
            secret_key=self.config.tokopay_secret_key,
            base_url=self.config.tokopay_base_url,
            timeout=self.config.http_timeout_seconds,
            client=http_client,
        )
        self.codec = SignatureCodec(
            self.config.tokopay_merchant_id, self.config.tokopay_secret_key
        )
        self.scheduler = scheduler or AsyncioScheduler()

        self.payments = PaymentIntentHandler(
            gateway=self.tokopay,
            amount=self.config.payment_amount,
            channel=self.config.payment_channel,
            default_pay_url=self.config.default_pay_url,
            default_qr_note=self.config.default_qr_note,
        )
        self.responder = ChatResponder(self.sender, self.payments)
        self.sequencer = NotificationSequencer(
            codec=self.codec,
            sender=self.sender,
            scheduler=self.scheduler,
            first_delay=self.config.first_delay_seconds,
            second_delay=self.config.second_delay_seconds,
            dedup=(
                ProcessedReferenceStore(ttl_seconds=self.config.dedup_ttl_seconds)
                if self.config.dedup_enabled
                else None
            ),
        )

    @classmethod
    def get_instance(cls, config: Optional[RelayConfig] = None) -> "RelayBootstrap":
        """
        Get singleton instance.

        Args:
            config: Optional custom configuration (only used first time)

        Returns:
            Singleton RelayBootstrap instance
        """
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset singleton (for testing)."""
        cls._instance = None

    def __repr__(self) -> str:
        return (
            f"RelayBootstrap(merchant={self.config.tokopay_merchant_id}, "
            f"device={self.config.fonnte_device or 'default'}, "
            f"amount={self.config.payment_amount}, channel={self.config.payment_channel}, "
            f"dedup={'on' if self.config.dedup_enabled else 'off'})"
        )


def get_relay() -> RelayBootstrap:
    """Get the process-wide relay."""
    return RelayBootstrap.get_instance()
