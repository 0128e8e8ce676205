"""
Redis Streams Message Queue

Architecture:
    RedisStreamQueue (MessageQueue implementation)
        ├── XADD        send one message (``body`` field, approximate MAXLEN trim)
        ├── XGROUP      consumer group, created idempotently at initialize()
        ├── XREADGROUP  receive new entries for this consumer (">"), COUNT/BLOCK
        └── XACK + XDEL batch delete in a single pipeline

Why Redis Streams?
    - Persistent, ordered log of events
    - Consumer groups for load balancing across writer replicas
    - Entries that are never acknowledged stay in the pending list,
      inspectable with XPENDING (the poison-message trail)
    - Built-in blocking reads double as long polling
"""

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError

from stream_relay.core.config.constants import QUEUE_MAX_BATCH_SIZE, QUEUE_STREAM_MAX_LEN, Stage
from stream_relay.core.exceptions import QueueError
from stream_relay.core.interfaces.message_queue import MessageQueue, QueueMessage
from stream_relay.core.logging.logger import get_logger

logger = get_logger(__name__)

BODY_FIELD = "body"


class RedisStreamQueue(MessageQueue):
    """
    Redis Streams backed queue.

    Usage:
        queue = RedisStreamQueue(
            "redis://localhost:6379/0", stream_name="wiki-events",
            group_name="writer", consumer_name="writer-1",
        )
        await queue.initialize()
        await queue.send(event.to_json())
        batch = await queue.receive(max_messages=10, wait_seconds=20)
        await queue.delete_batch(batch)
    """

    def __init__(
        self,
        redis_url: str,
        stream_name: str,
        group_name: str,
        consumer_name: str,
        client: redis.Redis | None = None,
        max_len: int = QUEUE_STREAM_MAX_LEN,
    ):
        """
        Args:
            redis_url: Connection URL without the stream key
            stream_name: Redis stream key
            group_name: Consumer group shared by all writer replicas
            consumer_name: Unique consumer within the group
            client: Pre-built client (tests); created from ``redis_url`` otherwise
            max_len: Approximate trim length applied on every XADD
        """
        self._redis_url = redis_url
        self._stream_name = stream_name
        self._group_name = group_name
        self._consumer_name = consumer_name
        self._client = client
        self._max_len = max_len
        self._initialized = False

    @property
    def stream_name(self) -> str:
        return self._stream_name

    async def initialize(self) -> None:
        """
        Connect and create the consumer group.

        STAGE-QUEUE.INIT

        - XGROUP CREATE ... $ MKSTREAM: creates the stream if missing and
          delivers only entries added after the group exists
        - BUSYGROUP: group already exists (expected on restart)

        Raises:
            QueueError: If Redis is unreachable or the group cannot be created
        """
        if self._initialized:
            return

        if self._client is None:
            pool = ConnectionPool.from_url(
                self._redis_url,
                decode_responses=True,  # Return strings instead of bytes
                retry_on_timeout=True,
            )
            self._client = redis.Redis(connection_pool=pool)

        try:
            await self._client.ping()
            await self._client.xgroup_create(
                self._stream_name,
                self._group_name,
                id="$",
                mkstream=True,
            )
            logger.info("Consumer group created", stage=Stage.QUEUE_INIT, group=self._group_name)
        except RedisError as e:
            if "BUSYGROUP" in str(e):
                logger.info(
                    "Consumer group already exists (OK)",
                    stage=Stage.QUEUE_INIT,
                    group=self._group_name,
                )
            else:
                logger.error(
                    "Failed to initialize Redis queue",
                    stage=Stage.QUEUE_ERR,
                    endpoint=self._stream_name,
                    error=str(e),
                )
                raise QueueError.caused_by(
                    e,
                    f"Failed to initialize Redis stream '{self._stream_name}'",
                    endpoint=self._stream_name,
                ) from e

        self._initialized = True
        logger.info(
            "Redis stream queue ready",
            stage=Stage.QUEUE_INIT,
            stream=self._stream_name,
            group=self._group_name,
            consumer=self._consumer_name,
        )

    def _require_client(self) -> redis.Redis:
        if self._client is None:
            raise QueueError("Redis queue used before initialize()", endpoint=self._stream_name)
        return self._client

    async def send(self, body: str) -> str:
        """XADD a single entry; returns the entry ID (e.g. ``1700000000000-0``)."""
        client = self._require_client()
        try:
            message_id = await client.xadd(
                self._stream_name,
                {BODY_FIELD: body},
                maxlen=self._max_len,
                approximate=True,
            )
        except RedisError as e:
            raise QueueError.caused_by(e, endpoint=self._stream_name) from e

        logger.debug("Message produced", stage=Stage.QUEUE_PUBLISH, id=message_id)
        return message_id

    async def receive(self, max_messages: int = 10, wait_seconds: int = 20) -> list[QueueMessage]:
        """
        XREADGROUP ``>`` for this consumer.

        ``wait_seconds=0`` is a non-blocking read (BLOCK 0 would wait forever).
        """
        client = self._require_client()
        count = max(1, min(max_messages, QUEUE_MAX_BATCH_SIZE))
        block_ms = wait_seconds * 1000 if wait_seconds > 0 else None

        try:
            response = await client.xreadgroup(
                self._group_name,
                self._consumer_name,
                {self._stream_name: ">"},
                count=count,
                block=block_ms,
            )
        except RedisError as e:
            raise QueueError.caused_by(e, endpoint=self._stream_name) from e

        messages = []
        # response format: [[stream_name, [[id, {data}]]]]
        for _stream, entries in response or []:
            for entry_id, fields in entries:
                messages.append(
                    QueueMessage(
                        id=entry_id,
                        body=(fields or {}).get(BODY_FIELD),
                        receipt_handle=entry_id,
                    )
                )
        return messages

    async def delete_batch(self, messages: list[QueueMessage]) -> None:
        """XACK then XDEL every entry of the batch in one round trip."""
        if not messages:
            return

        client = self._require_client()
        entry_ids = [m.receipt_handle for m in messages]
        try:
            async with client.pipeline(transaction=True) as pipe:
                pipe.xack(self._stream_name, self._group_name, *entry_ids)
                pipe.xdel(self._stream_name, *entry_ids)
                await pipe.execute()
        except RedisError as e:
            raise QueueError.caused_by(e, endpoint=self._stream_name, count=len(entry_ids)) from e

    async def close(self) -> None:
        """Close the connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        self._initialized = False
