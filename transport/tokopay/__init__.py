"""Tokopay Transport Layer - Module Exports"""

from .client import PaymentGatewayError, TokopayClient
from .reference import decode_reference, encode_reference
from .schemas import OrderResponse, OrderStatus, PaymentCallback, PaymentOrder
from .security import SignatureCodec

__all__ = [
    # Schemas
    "PaymentCallback",
    "PaymentOrder",
    "OrderResponse",
    "OrderStatus",
    # Security
    "SignatureCodec",
    # Correlation
    "encode_reference",
    "decode_reference",
    # Client
    "TokopayClient",
    "PaymentGatewayError",
]
