"""
Infrastructure module exports.

Configuration and bootstrap for the gateway clients and payment handlers.
"""

from .config import ConfigurationError, RelayConfig, get_config
from .bootstrap import RelayBootstrap, get_relay

__all__ = [
    "ConfigurationError",
    "RelayConfig",
    "get_config",
    "RelayBootstrap",
    "get_relay",
]
