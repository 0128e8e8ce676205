"""
Message Queue Factory

Selects the queue backend from the configured queue reference:

    redis://host:6379/0/wiki-events      -> RedisStreamQueue (stream "wiki-events", db 0)
    rediss://host:6380/wiki-events       -> RedisStreamQueue over TLS (db 0)
    https://sqs.<region>.amazonaws.com/… -> SqsQueue
    arn:aws:sqs:<region>:<account>:<q>   -> SqsQueue
"""

from urllib.parse import urlsplit, urlunsplit

from stream_relay.core.config.settings import Settings, get_settings
from stream_relay.core.exceptions import ConfigurationError
from stream_relay.core.interfaces.message_queue import MessageQueue
from stream_relay.infrastructure.message_queue.redis_queue import RedisStreamQueue
from stream_relay.infrastructure.message_queue.sqs_queue import SqsQueue

REDIS_SCHEMES = ("redis", "rediss")


def split_redis_url(queue_url: str) -> tuple[str, str]:
    """
    Split a queue URL into ``(connection_url, stream_name)``.

    The last path segment is the stream key; an optional numeric segment
    before it selects the database.

    Raises:
        ConfigurationError: If no stream key is present
    """
    parts = urlsplit(queue_url)
    segments = [segment for segment in parts.path.split("/") if segment]
    if not segments or (len(segments) == 1 and segments[0].isdigit()):
        raise ConfigurationError(
            "Redis queue URL has no stream name",
            endpoint=queue_url,
            hint="Use redis://host:port/<db>/<stream-name>",
        )
    if len(segments) > 2 or (len(segments) == 2 and not segments[0].isdigit()):
        raise ConfigurationError(
            "Redis queue URL path must be /<db>/<stream-name> or /<stream-name>",
            endpoint=queue_url,
        )

    stream_name = segments[-1]
    db = segments[0] if len(segments) == 2 else "0"
    connection_url = urlunsplit((parts.scheme, parts.netloc, f"/{db}", parts.query, ""))
    return connection_url, stream_name


class MessageQueueFactory:
    """
    Factory for creating message queue instances.

    Supports:
    - Redis Streams (RedisStreamQueue)
    - Amazon SQS (SqsQueue)
    """

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or get_settings()

    def get_available(self) -> list[str]:
        """
        Get list of available queue backends.

        Returns:
            list[str]: Supported backend names
        """
        return ["redis", "sqs"]

    def create(self, queue_url: str) -> MessageQueue:
        """
        Build (but do not initialize) the backend for ``queue_url``.

        Raises:
            ConfigurationError: If the reference matches no backend
        """
        if queue_url.startswith("arn:aws:sqs:"):
            return SqsQueue(queue_url, region_name=self._settings.AWS_REGION)

        scheme = urlsplit(queue_url).scheme.lower()
        if scheme in REDIS_SCHEMES:
            connection_url, stream_name = split_redis_url(queue_url)
            return RedisStreamQueue(
                connection_url,
                stream_name=stream_name,
                group_name=self._settings.QUEUE_CONSUMER_GROUP,
                consumer_name=self._settings.QUEUE_CONSUMER_NAME,
            )

        if scheme == "https" and urlsplit(queue_url).hostname and urlsplit(queue_url).hostname.startswith("sqs."):
            return SqsQueue(queue_url, region_name=self._settings.AWS_REGION)

        raise ConfigurationError(
            f"Unsupported queue URL: {queue_url}",
            endpoint=queue_url,
            hint="Use redis://host:port/<db>/<stream>, an SQS queue URL or an SQS ARN",
            available=self.get_available(),
        )

    @classmethod
    def from_url(cls, queue_url: str, settings: Settings | None = None) -> MessageQueue:
        """Shortcut for ``MessageQueueFactory(settings).create(queue_url)``."""
        return cls(settings).create(queue_url)
