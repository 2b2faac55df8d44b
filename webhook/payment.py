"""
Tokopay Payment Webhook Handler

Receives payment-status callbacks, authenticates them and hands them to
the notification sequencer.

Security:
  - HMAC-SHA256 signature over merchant_id:reference_id:amount:status
  - Rejected with 401 before any message is sent

Update Flow:
  webhook → parse → verify → decode reference → notify user
"""

import json
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from infra.bootstrap import get_relay
from payments.sequencer import RejectReason
from transport.tokopay.client import PaymentGatewayError
from transport.tokopay.schemas import PaymentCallback

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Tokopay Webhook"])


@router.post("/tokopay-webhook")
async def tokopay_webhook(request: Request):
    """
    Receive a Tokopay payment notification.

    Returns:
        200 {"success": true, "message": ...} once processed (follow-up
            messages for SUCCESS keep going in the background)
        401 {"success": false, "error": "Invalid signature"}
        500 {"success": false, "error": ...} on unreadable payloads
    """
    try:
        body = await request.body()
        callback = PaymentCallback.model_validate(json.loads(body))
    except (ValueError, ValidationError) as e:
        logger.error(f"Invalid Tokopay webhook payload: {e}", exc_info=True)
        return _failure()

    logger.info(
        "Tokopay webhook received",
        extra={
            "reference_id": callback.reference_id,
            "status": callback.status,
            "amount": callback.amount,
        },
    )

    try:
        outcome = await get_relay().sequencer.process(callback)
    except Exception as e:
        logger.error(f"Error processing Tokopay webhook: {e}", exc_info=True)
        return _failure()

    if outcome.reason is RejectReason.BAD_SIGNATURE:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"success": False, "error": "Invalid signature"},
        )

    # Unresolvable references are acknowledged: a redelivery cannot fix them.
    return {"success": True, "message": "Webhook processed successfully"}


@router.get("/tokopay-webhook")
async def tokopay_webhook_ready():
    """Readiness probe for the Tokopay callback URL."""
    return {
        "message": "Tokopay Webhook Endpoint Ready! 🚀",
        "status": "active",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/payments/{reference_id}/status")
async def payment_status(reference_id: str):
    """Ask Tokopay for the current status of an order."""
    try:
        result = await get_relay().tokopay.check_order_status(reference_id)
    except PaymentGatewayError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except Exception as e:
        logger.error(f"Payment status lookup failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Payment status lookup failed",
        )

    return {
        "reference_id": result.reference_id,
        "success": result.success,
        "payment_status": result.payment_status,
    }


def _failure() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Failed to process webhook"},
    )
