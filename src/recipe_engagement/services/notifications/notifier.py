"""Favorite notifier.

Tells every user who favorited a recipe that it changed. Runs as a
background task after the change has been committed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from recipe_engagement.observability.logging import get_logger
from recipe_engagement.observability.metrics import notification_deliveries_total
from recipe_engagement.services.notifications.exceptions import DeliveryError


if TYPE_CHECKING:
    from recipe_engagement.database.repositories import FavoriteRepository
    from recipe_engagement.services.notifications.client import DeliveryClient

logger = get_logger(__name__)


@dataclass
class NotificationReport:
    """Outcome of one fan-out."""

    recipe_id: int
    delivered: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.delivered) + len(self.failed)


def unique_in_order(addresses: list[str]) -> list[str]:
    """Drop repeated addresses, keeping the first occurrence's position."""
    return list(dict.fromkeys(addresses))


class FavoriteNotifier:
    """Deliver one message per distinct favoriting address."""

    def __init__(self, favorites: FavoriteRepository, client: DeliveryClient) -> None:
        self._favorites = favorites
        self._client = client

    async def notify_favoriters(
        self, recipe_id: int, subject: str, body: str
    ) -> NotificationReport:
        """Send ``subject``/``body`` to everyone who favorited ``recipe_id``.

        A failed delivery is logged and recorded in the report; the remaining
        addresses are still attempted. Store errors while resolving the
        addresses propagate to the caller.
        """
        addresses = unique_in_order(
            await self._favorites.find_favoriter_emails(recipe_id)
        )
        report = NotificationReport(recipe_id=recipe_id)

        for address in addresses:
            try:
                await self._client.deliver(address, subject, body)
            except DeliveryError as e:
                logger.warning(
                    "Favorite notification failed",
                    recipe_id=recipe_id,
                    recipient=address,
                    error=str(e),
                )
                notification_deliveries_total.labels(outcome="failed").inc()
                report.failed.append(address)
            else:
                notification_deliveries_total.labels(outcome="delivered").inc()
                report.delivered.append(address)

        logger.info(
            "Favoriters notified",
            recipe_id=recipe_id,
            delivered=len(report.delivered),
            failed=len(report.failed),
        )
        return report
