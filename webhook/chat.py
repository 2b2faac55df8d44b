"""
Fonnte Chat Webhook Handler

Receives inbound WhatsApp messages from Fonnte and replies through the
chat responder.

Update Flow:
  webhook → parse payload → classify intent → (payment order) → send reply
"""

import json
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from infra.bootstrap import get_relay
from transport.fonnte.schemas import FonnteWebhookPayload
from transport.fonnte.sender import DeliveryError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Fonnte Webhook"])


@router.post("/webhook")
async def fonnte_webhook(request: Request):
    """
    Receive an inbound chat message.

    Expected payload:
    {
        "device": "628111111111",
        "sender": "628123456789",
        "message": "bayar",
        "name": "Budi"
    }

    Returns:
        {"success": true, "message": ..., "response": <reply text>}
        {"success": false, "error": ...} with 500 if the payload is unusable
    """
    try:
        body = await request.body()
        payload = FonnteWebhookPayload.model_validate(json.loads(body))
    except (ValueError, ValidationError) as e:
        logger.error(f"Invalid Fonnte webhook payload: {e}", exc_info=True)
        return _failure()

    logger.info(
        f"Webhook received from Fonnte: {payload.sender}",
        extra={"device": payload.device, "sender": payload.sender, "sender_name": payload.name},
    )

    try:
        reply = await get_relay().responder.reply(payload)
    except Exception as e:
        logger.error(f"Error processing webhook: {e}", exc_info=True)
        return _failure()

    return {
        "success": True,
        "message": "Webhook received successfully",
        "response": reply,
    }


@router.get("/webhook")
async def fonnte_webhook_ready():
    """Readiness probe for the Fonnte webhook URL."""
    return {
        "message": "WhatsApp Bot Webhook Endpoint Ready! 🚀",
        "status": "active",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/webhook/device")
async def fonnte_device_status():
    """Connection status of the bound Fonnte device."""
    try:
        device = await get_relay().sender.get_device_status()
    except DeliveryError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except Exception as e:
        logger.error(f"Device status check failed: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Device status check failed")
    return device.model_dump(exclude_none=True)


def _failure() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Failed to process webhook"},
    )
