"""
Configuration management for the WhatsApp payment relay.

Loads environment variables from .env file and provides typed access to
process-level settings (port, environment, log level). Gateway credentials
live in infra.config.RelayConfig, which components receive explicitly.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


class Config:
    """Process-level configuration."""

    # HTTP server
    APP_PORT = int(os.getenv("APP_PORT", "8000"))

    # Environment
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Gateway credentials (checked for readiness only)
    FONNTE_TOKEN = os.getenv("FONNTE_TOKEN", "")
    TOKOPAY_MERCHANT_ID = os.getenv("TOKOPAY_MERCHANT_ID", "")
    TOKOPAY_SECRET_KEY = os.getenv("TOKOPAY_SECRET_KEY", "")

    @classmethod
    def missing(cls) -> list[str]:
        """Names of required variables that are not set."""
        required = ["FONNTE_TOKEN", "TOKOPAY_MERCHANT_ID", "TOKOPAY_SECRET_KEY"]
        return [key for key in required if not getattr(cls, key)]

    @classmethod
    def validate(cls) -> bool:
        """Validate that required configuration is set."""
        return not cls.missing()
