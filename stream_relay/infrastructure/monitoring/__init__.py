"""
Monitoring Module

Provides Prometheus metrics collection.
"""

from .metrics_collector import (
    MetricsCollector,
    get_metrics_collector,
)

__all__ = [
    "MetricsCollector",
    "get_metrics_collector",
]
