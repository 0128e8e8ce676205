"""
Writer Service Components

- QueueConsumer: receive, decode, log and delete canonical events
"""

from .queue_consumer import QueueConsumer

__all__ = ["QueueConsumer"]
