#!/usr/bin/env python3
"""
Metrics Collector with Prometheus Integration

This module provides metrics collection for both services:
- Stream deserialization errors by classification
- Reconnection attempts
- Filtered / accepted events
- Queue publish success and failure
- Consumer processed / undecodable messages and restarts

Architectural Decision: prometheus-client for industry-standard metrics
- Counters are append-only and safe for concurrent increment
- Scraped through GET /metrics
"""


from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Info,
    generate_latest,
)

from stream_relay.core.config.constants import Stage
from stream_relay.core.config.settings import get_settings
from stream_relay.core.logging.logger import get_logger

logger = get_logger(__name__)


# ============================================================================
# Metric Definitions
# ============================================================================

# Stream metrics
DESERIALIZATION_ERRORS = Counter(
    'wikipedia_deserialization_errors_total',
    'Stream lines that could not be decoded',
    ['error_type']  # malformed_json, schema_mismatch
)

RECONNECTION_ATTEMPTS = Counter(
    'wikipedia_reconnection_attempts_total',
    'Stream reconnection attempts'
)

EVENTS_FILTERED = Counter(
    'wikipedia_events_filtered_total',
    'Decoded events dropped before publishing',
    ['reason']  # canary, foreign_origin
)

EVENTS_ACCEPTED = Counter(
    'wikipedia_events_accepted_total',
    'Decoded events handed to the queue publisher'
)

# Queue producer metrics
QUEUE_PUBLISH_SUCCESS = Counter(
    'queue_publish_success_total',
    'Events successfully sent to the queue'
)

QUEUE_PUBLISH_FAILURES = Counter(
    'queue_publish_failures_total',
    'Events dropped after exhausting publish retries'
)

# Queue consumer metrics
QUEUE_MESSAGES_PROCESSED = Counter(
    'queue_messages_processed_total',
    'Queue messages decoded and logged'
)

QUEUE_MESSAGES_FAILED = Counter(
    'queue_messages_failed_total',
    'Queue messages left undeleted because they could not be decoded'
)

QUEUE_CONSUMER_RESTARTS = Counter(
    'queue_consumer_restarts_total',
    'Consumer loop restarts after receive/delete failures'
)

# App info
APP_INFO = Info(
    'stream_relay_app',
    'Application information'
)


class MetricsCollector:
    """
    Centralized metrics collector.

    STAGE-M: Metrics collection

    Usage:
        metrics = MetricsCollector()

        metrics.record_deserialization_error("malformed_json")
        metrics.record_publish_failure()

        output = metrics.get_prometheus_metrics()
    """

    def __init__(self):
        """Initialize metrics collector."""
        self.settings = get_settings()

        # Set app info
        APP_INFO.info({
            'version': self.settings.app.APP_VERSION,
            'environment': self.settings.app.ENVIRONMENT,
            'app_name': self.settings.app.APP_NAME
        })

        logger.info("Metrics collector initialized", stage=Stage.APP_STARTUP)

    # =========================================================================
    # Stream Metrics
    # =========================================================================

    def record_deserialization_error(self, error_type: str) -> None:
        """Record an undecodable stream line."""
        DESERIALIZATION_ERRORS.labels(error_type=error_type).inc()

    def record_reconnection_attempt(self) -> None:
        """Record a stream reconnection attempt."""
        RECONNECTION_ATTEMPTS.inc()

    def record_event_filtered(self, reason: str) -> None:
        """Record an event dropped by a filter."""
        EVENTS_FILTERED.labels(reason=reason).inc()

    def record_event_accepted(self) -> None:
        """Record an event handed to the publisher."""
        EVENTS_ACCEPTED.inc()

    # =========================================================================
    # Queue Metrics
    # =========================================================================

    def record_publish_success(self) -> None:
        """Record a successful queue send."""
        QUEUE_PUBLISH_SUCCESS.inc()

    def record_publish_failure(self) -> None:
        """Record an event dropped after publish retries."""
        QUEUE_PUBLISH_FAILURES.inc()

    def record_message_processed(self) -> None:
        """Record a consumed and logged message."""
        QUEUE_MESSAGES_PROCESSED.inc()

    def record_message_failed(self) -> None:
        """Record an undecodable consumed message."""
        QUEUE_MESSAGES_FAILED.inc()

    def record_consumer_restart(self) -> None:
        """Record a consumer loop restart."""
        QUEUE_CONSUMER_RESTARTS.inc()

    # =========================================================================
    # Export
    # =========================================================================

    def get_prometheus_metrics(self) -> bytes:
        """
        Get Prometheus metrics output.

        Returns:
            bytes: Prometheus text format metrics
        """
        return generate_latest(REGISTRY)

    def get_content_type(self) -> str:
        """Get Prometheus content type."""
        return CONTENT_TYPE_LATEST


# Global metrics collector
_metrics: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Get global metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
