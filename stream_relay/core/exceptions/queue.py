"""
Message Queue Exceptions

Raised by the Redis Streams and SQS backends in place of their client
library errors (RedisError, botocore ClientError, ...), so callers only
handle one type. ``endpoint`` is the stream key or queue URL.
"""

from stream_relay.core.exceptions.base import RelayError


class QueueError(RelayError):
    """A queue call failed: send, receive, delete or group setup."""
