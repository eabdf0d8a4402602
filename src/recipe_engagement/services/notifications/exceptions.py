"""Notification delivery exceptions.

Delivery is a best-effort side effect of a committed change; the notifier
catches ``DeliveryError`` and logs it, so these never reach an HTTP response.
"""

from __future__ import annotations


class NotificationError(Exception):
    """Base exception for notification errors."""


class DeliveryError(NotificationError):
    """Raised when a message could not be handed to the delivery transport."""

    def __init__(self, recipient: str, message: str) -> None:
        self.recipient = recipient
        super().__init__(message)


class DeliveryUnavailableError(DeliveryError):
    """Raised when the notification service cannot be reached or times out."""


class DeliveryRejectedError(DeliveryError):
    """Raised when the notification service answers with an error status."""

    def __init__(self, recipient: str, status_code: int, message: str) -> None:
        self.status_code = status_code
        super().__init__(recipient, message)
