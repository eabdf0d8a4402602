"""Favorite change notifications."""

from recipe_engagement.services.notifications.client import (
    DeliveryClient,
    LoggingDeliveryClient,
    NotificationClient,
)
from recipe_engagement.services.notifications.exceptions import DeliveryError
from recipe_engagement.services.notifications.notifier import (
    FavoriteNotifier,
    NotificationReport,
)


__all__ = [
    "DeliveryClient",
    "DeliveryError",
    "FavoriteNotifier",
    "LoggingDeliveryClient",
    "NotificationClient",
    "NotificationReport",
]
