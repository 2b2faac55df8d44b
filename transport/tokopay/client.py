"""
Tokopay Payment Gateway Client

Order creation and status lookup.
Single-shot requests with an explicit timeout. No retries.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from .schemas import OrderResponse, OrderStatus, PaymentOrder
from .security import SignatureCodec

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """Tokopay request failed or reported failure."""
    pass


class TokopayClient:
    """
    Thin async wrapper around the Tokopay merchant API.

    Pass `client` to share a connection pool (or a MockTransport in tests);
    otherwise a short-lived AsyncClient is opened per call.
    """

    def __init__(
        self,
        merchant_id: str,
        secret_key: str,
        base_url: str = "https://api.tokopay.id",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.merchant_id = merchant_id
        self._secret_key = secret_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self.codec = SignatureCodec(merchant_id, secret_key)

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        if self._client is not None:
            return await self._client.request(method, url, timeout=self.timeout, **kwargs)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.request(method, url, **kwargs)

    async def create_order(
        self,
        reference_id: str,
        amount: int,
        channel: str,
    ) -> PaymentOrder:
        """
        Create a payment order.

        Raises:
            PaymentGatewayError: network failure, non-JSON body, or the
                gateway reported an unsuccessful status
        """
        params = {
            "merchant": self.merchant_id,
            "secret": self._secret_key,
            "ref_id": reference_id,
            "nominal": amount,
            "metode": channel,
        }

        logger.info(
            "Creating Tokopay order",
            extra={"reference_id": reference_id, "amount": amount, "channel": channel},
        )

        try:
            response = await self._request("GET", "/v1/order", params=params)
            body = response.json()
        except httpx.RequestError as e:
            logger.error(f"Tokopay order request failed: {e}", exc_info=True)
            raise PaymentGatewayError(f"HTTP request failed: {e}") from e
        except ValueError as e:
            logger.error(f"Tokopay returned non-JSON body: {e}")
            raise PaymentGatewayError("Invalid JSON response") from e

        try:
            result = OrderResponse.model_validate(body)
        except ValidationError as e:
            logger.error(f"Unexpected Tokopay order response: {e}")
            raise PaymentGatewayError("Unexpected order response") from e

        if response.is_error or not result.success:
            reason = result.error_msg or f"HTTP {response.status_code}"
            logger.warning(
                f"Tokopay rejected order: {reason}",
                extra={"reference_id": reference_id, "status_code": response.status_code},
            )
            raise PaymentGatewayError(f"Order rejected: {reason}")

        logger.info(
            "Tokopay order created",
            extra={"reference_id": reference_id, "trx_id": result.trx_id},
        )

        try:
            return PaymentOrder(
                reference_id=reference_id,
                amount=result.total_bayar or amount,
                channel=channel,
                pay_url=result.pay_url,
                qr_link=result.qr_link,
                received_amount=result.total_diterima,
            )
        except ValidationError as e:
            logger.error(
                f"Tokopay order has an unusable total: {result.total_bayar}",
                extra={"reference_id": reference_id},
            )
            raise PaymentGatewayError("Unexpected order response") from e

    async def check_order_status(self, reference_id: str) -> OrderStatus:
        """
        Look up an order's payment status.

        Raises:
            PaymentGatewayError: network failure or non-JSON body
        """
        signature = self.codec.sign_request(reference_id)

        try:
            response = await self._request(
                "POST",
                "/v1/payment/status",
                json={"merchant_id": self.merchant_id, "ref_id": reference_id},
                headers={"Authorization": f"Bearer {signature}"},
            )
            body = response.json()
        except httpx.RequestError as e:
            logger.error(f"Tokopay status request failed: {e}", exc_info=True)
            raise PaymentGatewayError(f"HTTP request failed: {e}") from e
        except ValueError as e:
            raise PaymentGatewayError("Invalid JSON response") from e

        if not isinstance(body, dict):
            raise PaymentGatewayError("Unexpected status response")

        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        status = body.get("status")
        success = status is True or (
            isinstance(status, str) and status.strip().lower() == "success"
        )

        return OrderStatus(
            reference_id=reference_id,
            success=success and not response.is_error,
            payment_status=data.get("status") or body.get("payment_status"),
            raw=body,
        )
