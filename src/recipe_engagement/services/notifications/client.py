"""Notification delivery transports.

``NotificationClient`` posts ``{recipient, subject, body}`` to an HTTP
notification service. ``LoggingDeliveryClient`` is used when no service URL
is configured and only logs what would have been sent.
"""

from __future__ import annotations

from typing import Protocol

import httpx
import orjson

from recipe_engagement.observability.logging import get_logger
from recipe_engagement.services.notifications.exceptions import (
    DeliveryError,
    DeliveryRejectedError,
    DeliveryUnavailableError,
)


logger = get_logger(__name__)

EMAIL_PATH = "/notifications/email"


class DeliveryClient(Protocol):
    """Anything that can deliver one message to one address."""

    async def initialize(self) -> None: ...

    async def shutdown(self) -> None: ...

    async def deliver(self, recipient: str, subject: str, body: str) -> None: ...


class NotificationClient:
    """HTTP client for the notification service.

    Example:
        ```python
        client = NotificationClient(base_url="http://notifications:8080")
        await client.initialize()
        await client.deliver("cook@example.com", "Subject", "Body")
        await client.shutdown()
        ```
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        token: str | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._token = token
        self._http_client: httpx.AsyncClient | None = None

    async def initialize(self) -> None:
        """Initialize HTTP client."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        self._http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            headers=headers,
        )
        logger.info("NotificationClient initialized", base_url=self.base_url)

    async def shutdown(self) -> None:
        """Release resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("NotificationClient shutdown")

    async def deliver(self, recipient: str, subject: str, body: str) -> None:
        """Send one e-mail notification.

        Raises:
            DeliveryUnavailableError: If the service is unreachable or times out.
            DeliveryRejectedError: If the service answers with a non-2xx status.
            DeliveryError: If the client was not initialized.
        """
        if not self._http_client:
            msg = "Client not initialized. Call initialize() first."
            raise DeliveryError(recipient, msg)

        payload = orjson.dumps(
            {"recipient": recipient, "subject": subject, "body": body}
        )

        try:
            response = await self._http_client.post(
                f"{self.base_url}{EMAIL_PATH}", content=payload
            )
        except httpx.TimeoutException as e:
            logger.warning("Notification request timed out", recipient=recipient)
            msg = "Notification service timed out"
            raise DeliveryUnavailableError(recipient, msg) from e
        except httpx.RequestError as e:
            logger.warning(
                "Failed to connect to notification service", error=str(e)
            )
            msg = f"Failed to connect to notification service: {e}"
            raise DeliveryUnavailableError(recipient, msg) from e

        if response.is_error:
            logger.warning(
                "Notification service returned error",
                status_code=response.status_code,
                recipient=recipient,
            )
            msg = f"Notification service returned HTTP {response.status_code}"
            raise DeliveryRejectedError(recipient, response.status_code, msg)

        logger.debug("Notification delivered", recipient=recipient)


class LoggingDeliveryClient:
    """Stand-in transport that logs each message instead of sending it."""

    async def initialize(self) -> None:
        logger.info("Notification service URL not configured; logging messages")

    async def shutdown(self) -> None:
        return None

    async def deliver(self, recipient: str, subject: str, body: str) -> None:
        logger.info(
            "Notification (not sent)",
            recipient=recipient,
            subject=subject,
            body=body,
        )
