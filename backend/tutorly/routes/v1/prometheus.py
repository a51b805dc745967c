"""
Prometheus metrics endpoint for monitoring infrastructure.

This is a PUBLIC endpoint (no authentication required) following
standard Prometheus practices. It exposes metrics collected from
the @measure_operation decorators and the domain counters.
"""

from fastapi import APIRouter, Request, Response
from prometheus_client import Counter

from ...monitoring.prometheus_metrics import REGISTRY, prometheus_metrics

router = APIRouter(tags=["monitoring"])

_scrape_counter = Counter(
    "tutorly_prometheus_scrapes_total",
    "Total number of Prometheus metrics scrapes",
    registry=REGISTRY,
)


@router.get("", include_in_schema=False, response_class=Response, response_model=None)
async def get_prometheus_metrics(request: Request) -> Response:
    """
    Expose Prometheus metrics for scraping.

    ``?refresh=1`` bypasses the one-second exposition cache.
    """
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
