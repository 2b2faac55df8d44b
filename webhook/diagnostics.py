"""
Network diagnostics.

Reports the forwarding headers and the egress IP as seen by public
lookup services, for whitelisting the server at the payment gateway.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import APIRouter, Request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Diagnostics"])

IPIFY_URL = "https://api.ipify.org?format=json"
IPAPI_URL = "https://ipapi.co/ip/"


def _first_hop(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    return header.split(",")[0].strip() or None


@router.get("/check-ip")
async def check_ip(request: Request):
    """Collect candidate egress IPs."""
    headers = request.headers
    forwarded = headers.get("x-forwarded-for")
    real_ip = headers.get("x-real-ip")
    vercel_forwarded = headers.get("x-vercel-forwarded-for")
    cf_connecting_ip = headers.get("cf-connecting-ip")

    external_ip = None
    ipify_error = None
    ipapi_ip = None

    async with httpx.AsyncClient(timeout=5.0) as client:
        try:
            response = await client.get(IPIFY_URL)
            if response.is_success:
                external_ip = response.json().get("ip")
        except (httpx.HTTPError, ValueError) as e:
            ipify_error = str(e) or type(e).__name__

        try:
            response = await client.get(IPAPI_URL)
            if response.is_success:
                ipapi_ip = response.text.strip() or None
        except httpx.HTTPError as e:
            logger.debug(f"ipapi lookup failed: {e}")

    candidates = [
        external_ip,
        ipapi_ip,
        _first_hop(forwarded),
        real_ip,
        _first_hop(vercel_forwarded),
        cf_connecting_ip,
    ]

    logger.info(
        "IP check requested",
        extra={"external_ip": external_ip, "forwarded": forwarded},
    )

    return {
        "status": "success",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "forwarding_headers": {
            "x-forwarded-for": forwarded,
            "x-real-ip": real_ip,
            "x-vercel-forwarded-for": vercel_forwarded,
            "cf-connecting-ip": cf_connecting_ip,
        },
        "external_ip_services": {
            "ipify": external_ip,
            "ipapi": ipapi_ip,
            "ipify_error": ipify_error,
        },
        "user_agent": headers.get("user-agent"),
        "recommended_whitelist_ips": list(dict.fromkeys(ip for ip in candidates if ip)),
        "note": "Egress IPs may be dynamic; signature verification is the real guard.",
    }
