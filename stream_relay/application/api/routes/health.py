"""
Health and Metrics Routes
=========================

Shared by the ingestion and writer services.

LIVENESS:
---------
``GET /health`` answers ``200 OK`` with a plain-text body as long as the
process serves HTTP. It deliberately checks nothing else: the stream
reader and the queue consumer recover from upstream/queue outages on
their own, so restarting the container would not help.

PROMETHEUS:
-----------
``GET /metrics`` exposes the counters of ``MetricsCollector`` in the
Prometheus text format. Scrape config:

    scrape_configs:
      - job_name: 'stream-relay'
        static_configs:
          - targets: ['localhost:8080']
        metrics_path: '/metrics'
"""

from fastapi import APIRouter, Response
from fastapi.responses import PlainTextResponse

from stream_relay.infrastructure.monitoring.metrics_collector import get_metrics_collector

router = APIRouter(tags=["Health"])


@router.get("/health", response_class=PlainTextResponse)
async def health_check() -> PlainTextResponse:
    """Liveness probe."""
    return PlainTextResponse("OK")


@router.get("/metrics")
async def get_prometheus_metrics() -> Response:
    """
    Expose metrics in Prometheus text format for scraping.

    We use the Response class to return raw text instead of JSON
    and to set the Prometheus Content-Type.
    """
    metrics_collector = get_metrics_collector()

    return Response(
        content=metrics_collector.get_prometheus_metrics(),
        media_type=metrics_collector.get_content_type(),
    )
