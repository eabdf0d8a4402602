"""Loguru logging with per-request context, and Prometheus metrics."""

from recipe_engagement.observability.logging import (
    bind_context,
    clear_context,
    get_logger,
    setup_logging,
)
from recipe_engagement.observability.metrics import (
    discovery_requests_total,
    notification_deliveries_total,
    setup_metrics,
    votes_total,
)


__all__ = [
    "bind_context",
    "clear_context",
    "discovery_requests_total",
    "get_logger",
    "notification_deliveries_total",
    "setup_logging",
    "setup_metrics",
    "votes_total",
]
