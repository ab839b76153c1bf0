# backend/pkasla/routes/prometheus.py
"""
Prometheus metrics endpoint.

Public, like any Prometheus scrape target. It exposes request and
service-operation metrics only, no business data.
"""

import logging

from fastapi import APIRouter, Request, Response
from prometheus_client import Counter

from ..monitoring.prometheus_metrics import REGISTRY, prometheus_metrics

logger = logging.getLogger(__name__)

router = APIRouter()

_scrape_counter = Counter(
    "pkasla_prometheus_scrapes_total",
    "Total number of Prometheus metrics scrapes",
    registry=REGISTRY,
)


@router.get(
    "/metrics/prometheus", include_in_schema=False, response_class=Response, response_model=None
)
async def get_prometheus_metrics(request: Request) -> Response:
    """Expose metrics in the Prometheus text format; ``?refresh=1`` skips the render cache."""
    if request.query_params.get("refresh", "").lower() in {"1", "true", "yes"}:
        prometheus_metrics._invalidate_cache()
    _scrape_counter.inc()
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
        headers={
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
            "Expires": "0",
        },
    )
