"""
Webhook module - FastAPI route handlers for the two gateways.

Includes:
- chat.py: Fonnte inbound chat messages
- payment.py: Tokopay payment-status callbacks
- diagnostics.py: egress IP check
"""

from webhook.chat import router as chat_router
from webhook.payment import router as payment_router
from webhook.diagnostics import router as diagnostics_router

__all__ = ["chat_router", "payment_router", "diagnostics_router"]
