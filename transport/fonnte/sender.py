"""
Fonnte Message Sender

Delivers text and image messages through the Fonnte WhatsApp gateway.
Images go out as JSON first, then once as multipart form data if the
gateway refuses. No other retries.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from .schemas import DeliveryResult, DeviceStatus, FonnteResponse

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_CAPTION = "Image"


class DeliveryError(Exception):
    """Failed to deliver a message through Fonnte."""
    pass


def _to_result(response: FonnteResponse) -> DeliveryResult:
    message_id = response.id
    if isinstance(message_id, list):
        message_id = message_id[0] if message_id else None

    return DeliveryResult(
        delivered=response.status,
        gateway_message_id=str(message_id) if message_id is not None else None,
        reason=None if response.status else (response.reason or response.detail or response.message),
    )


class FonnteSender:
    """
    Fonnte API client.

    Pass `client` to share a connection pool (or a MockTransport in tests);
    otherwise a short-lived AsyncClient is opened per call.
    """

    def __init__(
        self,
        token: str,
        device: Optional[str] = None,
        base_url: str = "https://api.fonnte.com",
        country_code: str = "62",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not token:
            raise ValueError("Fonnte token is required")
        self._token = token
        self.device = device
        self.base_url = base_url.rstrip("/")
        self.country_code = country_code
        self.timeout = timeout
        self._client = client

    async def _post(self, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        headers = {"Authorization": self._token}
        if self._client is not None:
            return await self._client.post(url, headers=headers, timeout=self.timeout, **kwargs)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, headers=headers, **kwargs)

    def _with_device(self, fields: dict[str, Any]) -> dict[str, Any]:
        if self.device:
            fields["device"] = self.device
        return fields

    async def send_text(self, recipient: str, body: str) -> DeliveryResult:
        """
        Send a text message.

        Returns:
            DeliveryResult; delivered=False when Fonnte reports status false

        Raises:
            DeliveryError: network failure, non-JSON body or non-2xx status
        """
        payload = self._with_device(
            {
                "target": recipient,
                "message": body,
                "countryCode": self.country_code,
            }
        )

        logger.info(
            f"Sending message to {recipient}: {body[:50]}...",
            extra={"recipient": recipient},
        )

        try:
            response = await self._post("/send", json=payload)
            result = response.json()
        except httpx.RequestError as e:
            logger.error(f"HTTP request failed: {e}", exc_info=True, extra={"recipient": recipient})
            raise DeliveryError(f"HTTP request failed: {e}") from e
        except ValueError as e:
            raise DeliveryError("Fonnte returned a non-JSON body") from e

        if response.is_error:
            reason = result.get("reason") if isinstance(result, dict) else None
            logger.error(
                f"Fonnte API error: {response.status_code} - {reason or 'Unknown error'}",
                extra={"recipient": recipient, "status_code": response.status_code},
            )
            raise DeliveryError(f"Fonnte API Error: {reason or 'Unknown error'}")

        try:
            delivery = _to_result(self._parse(result))
        except ValueError as e:
            raise DeliveryError(str(e)) from e

        if delivery.delivered:
            logger.info(f"Message sent to {recipient}", extra={"message_id": delivery.gateway_message_id})
        else:
            logger.warning(f"Fonnte did not accept message to {recipient}: {delivery.reason}")
        return delivery

    async def send_image(
        self,
        recipient: str,
        url: str,
        caption: Optional[str] = None,
    ) -> DeliveryResult:
        """
        Send an image by URL.

        Tries a JSON payload first; if Fonnte answers status false or the
        attempt raises, makes exactly one multipart form attempt and returns
        its result.

        Raises:
            DeliveryError: the multipart fallback also raised
        """
        message = caption or DEFAULT_IMAGE_CAPTION
        payload = self._with_device(
            {
                "target": recipient,
                "message": message,
                "file": url,
                "url": url,  # older gateway builds read `url`
                "countryCode": self.country_code,
            }
        )

        logger.info(f"Sending image to {recipient} (JSON)", extra={"recipient": recipient, "file": url})

        try:
            response = await self._post("/send", json=payload)
            result = self._parse(response.json())
            if response.is_error:
                raise DeliveryError(f"Fonnte API returned {response.status_code}")
            if result.status:
                return _to_result(result)
            first_failure: str = result.detail or result.reason or result.message or "status false"
            logger.info(f"JSON image send refused ({first_failure}), trying form data")
        except (httpx.RequestError, ValueError, DeliveryError) as e:
            first_failure = str(e)
            logger.warning(f"JSON image send failed, trying form data: {e}")

        try:
            return await self.send_image_form_data(recipient, url, caption)
        except DeliveryError as fallback_error:
            logger.error(f"Fallback method also failed: {fallback_error}")
            raise DeliveryError(f"Failed to send image: {first_failure}") from fallback_error

    async def send_image_form_data(
        self,
        recipient: str,
        url: str,
        caption: Optional[str] = None,
    ) -> DeliveryResult:
        """
        Send an image as multipart form data.

        Raises:
            DeliveryError: network failure, non-JSON body or non-2xx status
        """
        fields = self._with_device(
            {
                "target": recipient,
                "message": caption or DEFAULT_IMAGE_CAPTION,
                "file": url,
                "countryCode": self.country_code,
            }
        )
        # (None, value) tuples force multipart/form-data without file uploads
        multipart = {name: (None, value) for name, value in fields.items()}

        logger.info(f"Sending image to {recipient} (form data)", extra={"recipient": recipient})

        try:
            response = await self._post("/send", files=multipart)
            result = self._parse(response.json())
        except (httpx.RequestError, ValueError) as e:
            logger.error(f"Error with Form-Data method: {e}", exc_info=True)
            raise DeliveryError(f"Form-Data method failed: {e}") from e

        if response.is_error:
            raise DeliveryError(f"Form-Data method failed: HTTP {response.status_code}")

        return _to_result(result)

    async def get_device_status(self) -> DeviceStatus:
        """
        Query the bound device's connection status.

        Raises:
            DeliveryError: network failure or non-JSON body
        """
        try:
            response = await self._post("/device")
            return DeviceStatus.model_validate(response.json())
        except (httpx.RequestError, ValueError) as e:
            logger.error(f"Failed to get device status: {e}", exc_info=True)
            raise DeliveryError(f"Failed to get device status: {e}") from e

    @staticmethod
    def _parse(body: Any) -> FonnteResponse:
        if not isinstance(body, dict):
            raise ValueError("Fonnte response is not an object")
        try:
            return FonnteResponse.model_validate(body)
        except ValidationError as e:
            raise ValueError(f"Unexpected Fonnte response: {e}") from e
