"""
Tokopay Transport Layer - Pydantic Schemas

PURE DATA MODELS - defaulting rules for gateway schema drift live here,
applied once at the boundary.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, StrictInt, model_validator


# ============================================================================
# PAYMENT CALLBACK (INPUT)
# ============================================================================

class PaymentCallback(BaseModel):
    """
    Payment-status notification posted by Tokopay.

    Untrusted until SignatureCodec.verify() accepts it.
    `status` is kept verbatim so unknown values reach the sequencer.
    """

    reference_id: str
    merchant_id: str
    amount: StrictInt  # no coercion: "010000" must not verify as 10000
    fee: int = 0
    status: str = Field(..., description="SUCCESS, FAILED or PENDING")
    paid_at: str = ""
    signature: str = ""
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None

    class Config:
        frozen = True
        extra = "allow"  # Tokopay may add fields


# ============================================================================
# ORDER CREATION (OUTPUT)
# ============================================================================

class OrderResponse(BaseModel):
    """
    Response of GET /v1/order.

    Observed gateway versions disagree on the success flag (`true` vs
    `"Success"`) and on whether fields sit under `data`; both are folded
    into this flat shape.
    """

    success: bool = False
    error_msg: Optional[str] = None
    pay_url: Optional[str] = None
    qr_link: Optional[str] = None
    total_bayar: Optional[int] = None
    total_diterima: Optional[int] = None
    trx_id: Optional[str] = None

    class Config:
        frozen = True

    @model_validator(mode="before")
    @classmethod
    def _flatten(cls, raw: Any) -> Any:
        if not isinstance(raw, dict):
            return raw

        data = raw.get("data") if isinstance(raw.get("data"), dict) else {}
        merged = {**raw, **data}

        status = raw.get("status")
        if isinstance(status, bool):
            success = status
        elif isinstance(status, str):
            success = status.strip().lower() in ("success", "true", "ok")
        else:
            success = False

        return {
            "success": success,
            "error_msg": merged.get("error_msg") or merged.get("message") or merged.get("error"),
            "pay_url": merged.get("pay_url") or merged.get("redirect_url") or None,
            "qr_link": merged.get("qr_link") or None,
            "total_bayar": merged.get("total_bayar"),
            "total_diterima": merged.get("total_diterima"),
            "trx_id": merged.get("trx_id") or merged.get("reference_id") or None,
        }


class PaymentOrder(BaseModel):
    """A created order. Never persisted; the gateway is the system of record."""

    reference_id: str
    amount: int = Field(..., gt=0)
    channel: str
    pay_url: Optional[str] = None
    qr_link: Optional[str] = None
    received_amount: Optional[int] = None

    class Config:
        frozen = True


class OrderStatus(BaseModel):
    """Response of POST /v1/payment/status."""

    reference_id: str
    success: bool = False
    payment_status: Optional[str] = None
    raw: dict[str, Any] = Field(default_factory=dict)

    class Config:
        frozen = True
