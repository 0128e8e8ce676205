"""
Resilience Module

Retry policies for the long-lived upstream connection:

- LinearBackoff: capped linear wait strategy (tenacity ``wait`` callable)
- ReconnectionScheduler: reconnects forever, one counter increment per retry

Queue publish retries live next to the publisher in
``stream_relay.ingestion.queue_publisher``.
"""

from .reconnection import LinearBackoff, ReconnectionScheduler

__all__ = [
    "LinearBackoff",
    "ReconnectionScheduler",
]
