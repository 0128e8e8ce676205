"""
Ingestion Service Components

- StreamSchemaValidator: startup check of the configured stream name
- StreamReader: upstream connection, decode, filter, convert
- QueuePublisher: queue send with bounded retries
"""

from .queue_publisher import QueuePublisher
from .stream_reader import StreamReader, classify_decode_error
from .stream_validator import StreamSchemaValidator

__all__ = [
    "QueuePublisher",
    "StreamReader",
    "StreamSchemaValidator",
    "classify_decode_error",
]
