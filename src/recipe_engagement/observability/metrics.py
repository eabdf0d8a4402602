"""Prometheus metrics.

HTTP request metrics come from prometheus-fastapi-instrumentator; the
counters below are incremented by the engagement services. Everything is
served from ``{api.v1_prefix}/metrics`` unless metrics are disabled.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator, metrics

from recipe_engagement.core.config import get_settings
from recipe_engagement.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import FastAPI

    from recipe_engagement.core.config import Settings

logger = get_logger(__name__)

METRIC_NAMESPACE = "recipe_engagement"

votes_total = Counter(
    "votes_total",
    "Total number of recipe votes applied",
    ["direction"],
    namespace=METRIC_NAMESPACE,
)

discovery_requests_total = Counter(
    "discovery_requests_total",
    "Total number of discovery requests by selected strategy",
    ["strategy"],
    namespace=METRIC_NAMESPACE,
)

notification_deliveries_total = Counter(
    "notification_deliveries_total",
    "Total number of favorite notification deliveries by outcome",
    ["outcome"],
    namespace=METRIC_NAMESPACE,
)


def setup_metrics(app: FastAPI, settings: Settings | None = None) -> Instrumentator:
    """Instrument ``app`` and mount the scrape endpoint.

    Health and scrape routes are not instrumented. With metrics disabled the
    returned instrumentator is unattached.
    """
    settings = settings or get_settings()
    if not settings.observability.metrics.enabled:
        logger.info("Metrics collection disabled")
        return Instrumentator()

    scrape_path = f"{settings.api.v1_prefix}/metrics"
    health_paths = [f"{settings.api.v1_prefix}/{name}" for name in ("health", "ready")]

    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=[*health_paths, scrape_path],
        inprogress_name="http_requests_inprogress",
        inprogress_labels=True,
    )
    instrumentator.add(
        metrics.default(metric_namespace=METRIC_NAMESPACE, metric_subsystem="http")
    )
    instrumentator.instrument(app).expose(
        app, endpoint=scrape_path, include_in_schema=False, tags=["Monitoring"]
    )
    logger.info("Prometheus metrics configured", endpoint=scrape_path)
    return instrumentator


__all__ = [
    "discovery_requests_total",
    "notification_deliveries_total",
    "setup_metrics",
    "votes_total",
]
