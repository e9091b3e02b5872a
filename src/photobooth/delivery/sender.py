"""
Image Sender
============

Hands finished images to the external messaging gateway.

The gateway owns delivery, sessions and retries. This module only
builds the request and reports the gateway's answer.

Gateway Contract (multipart/form-data POST):
    file     - encoded image
    to       - one field per recipient
    caption  - message caption

    Response: {"success": true, "messageIds": [...]}
              {"success": false, "message": "..."}
"""

import asyncio
import logging
from typing import Optional, Protocol

import requests

from photobooth.delivery.phone import build_caption, normalize_recipients
from photobooth.errors import DeliveryFailed
from photobooth.models.delivery import SendRequest, SendResult


logger = logging.getLogger(__name__)


class ImageSender(Protocol):
    """Protocol for image sinks."""

    async def send(self, request: SendRequest) -> SendResult:
        ...


class HttpImageSender:
    """
    Messaging gateway client over HTTP.

    Attributes:
        gateway_url: Send endpoint
        timeout_seconds: Request timeout
        default_message: Appended to every caption
        sent_count: Successful sends
        failed_count: Failed sends
    """

    def __init__(
        self,
        gateway_url: str,
        timeout_seconds: float = 30.0,
        default_message: str = "",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.gateway_url = gateway_url
        self.timeout_seconds = timeout_seconds
        self.default_message = default_message
        self._session = session or requests.Session()

        self.sent_count: int = 0
        self.failed_count: int = 0

        logger.info(f"HttpImageSender initialized: gateway={gateway_url}")

    async def send(self, request: SendRequest) -> SendResult:
        """
        Post the image to the gateway.

        Returns:
            SendResult as reported by the gateway

        Raises:
            ValueError: If any recipient number is invalid
            DeliveryFailed: On transport errors or unreadable responses
        """
        recipients = normalize_recipients(request.recipients)
        caption = build_caption(request.caption, self.default_message)

        result = await asyncio.to_thread(self._post, request, recipients, caption)

        if result.success:
            self.sent_count += 1
            logger.info(f"Image sent to {len(recipients)} recipient(s)")
        else:
            self.failed_count += 1
            logger.warning(f"Gateway rejected image: {result.error}")
        return result

    def _post(self, request: SendRequest, recipients: list, caption: str) -> SendResult:
        extension = request.mime_type.split("/")[-1].replace("jpeg", "jpg")
        files = {"file": (f"photobooth.{extension}", request.image_bytes, request.mime_type)}
        data = [("to", r) for r in recipients] + [("caption", caption)]

        try:
            response = self._session.post(
                self.gateway_url,
                files=files,
                data=data,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            self.failed_count += 1
            raise DeliveryFailed(f"Gateway request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            self.failed_count += 1
            raise DeliveryFailed(
                f"Gateway returned non-JSON response (HTTP {response.status_code})"
            ) from e

        if not payload.get("success"):
            return SendResult(
                success=False,
                error=payload.get("message") or f"HTTP {response.status_code}",
            )

        return SendResult(
            success=True,
            message_ids=[str(m) for m in payload.get("messageIds", [])],
        )
