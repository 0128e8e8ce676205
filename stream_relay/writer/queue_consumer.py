"""
Queue Consumer

Long-polls the queue, decodes each message as a ``CanonicalEvent`` and logs
it. Only messages that decoded are deleted; the rest stay in the queue
(redelivered after the SQS visibility timeout, left pending in Redis).

Loop:
    receive (<=10, long poll) -> process_batch -> delete_batch(successes)
        ^                                                  |
        +--------------------------------------------------+
    any error from receive/process/delete -> log, count, wait 5s, restart
"""

import asyncio
from collections.abc import Awaitable, Callable

from pydantic import ValidationError
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_never, wait_fixed

from stream_relay.core.config.constants import (
    CONSUMER_RESTART_DELAY,
    LOG_EXCERPT_LENGTH,
    QUEUE_MAX_BATCH_SIZE,
    Stage,
)
from stream_relay.core.config.settings import get_settings
from stream_relay.core.interfaces.message_queue import MessageQueue, QueueMessage
from stream_relay.core.logging.logger import bind_session, get_logger
from stream_relay.infrastructure.monitoring.metrics_collector import (
    MetricsCollector,
    get_metrics_collector,
)
from stream_relay.models.canonical_event import CanonicalEvent

logger = get_logger(__name__)


class QueueConsumer:
    """
    Drains the queue into the log.

    Usage:
        consumer = QueueConsumer(queue)
        task = asyncio.create_task(consumer.consume())
    """

    def __init__(
        self,
        queue: MessageQueue,
        metrics: MetricsCollector | None = None,
        wait_seconds: int | None = None,
        restart_delay: float = CONSUMER_RESTART_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._queue = queue
        self._metrics = metrics or get_metrics_collector()
        self._wait_seconds = (
            wait_seconds if wait_seconds is not None else get_settings().QUEUE_RECEIVE_WAIT_SECONDS
        )
        self._restart_delay = restart_delay
        self._sleep = sleep

    def _handle(self, message: QueueMessage) -> bool:
        if message.body is None:
            logger.warning("Message has no body", stage=Stage.CONSUMER_DECODE_ERR, message_id=message.id)
            self._metrics.record_message_failed()
            return False

        try:
            event = CanonicalEvent.from_json(message.body)
        except ValidationError as e:
            logger.warning(
                "Failed to decode message",
                stage=Stage.CONSUMER_DECODE_ERR,
                message_id=message.id,
                error_count=e.error_count(),
                body=message.body[:LOG_EXCERPT_LENGTH],
            )
            self._metrics.record_message_failed()
            return False

        logger.info(
            f"[{event.source.value}] title={event.title} user={event.user} "
            f"bot={event.is_bot} wiki={event.wiki} ts={event.timestamp}",
            stage=Stage.CONSUMER_MESSAGE,
            message_id=message.id,
        )
        self._metrics.record_message_processed()
        return True

    def process_batch(self, messages: list[QueueMessage]) -> list[QueueMessage]:
        """Decode and log every message; return the ones that succeeded."""
        return [message for message in messages if self._handle(message)]

    async def poll_once(self) -> int:
        """
        One receive/process/delete cycle.

        Returns:
            int: Number of messages deleted

        Raises:
            QueueError: If receive or delete fails
        """
        messages = await self._queue.receive(
            max_messages=QUEUE_MAX_BATCH_SIZE, wait_seconds=self._wait_seconds
        )
        if not messages:
            return 0

        succeeded = self.process_batch(messages)
        if succeeded:
            await self._queue.delete_batch(succeeded)
            logger.debug(
                "Deleted processed messages",
                stage=Stage.CONSUMER_DELETE,
                deleted=len(succeeded),
                received=len(messages),
            )
        return len(succeeded)

    async def _run_loop(self) -> None:
        bind_session()
        logger.info("Consumer loop started", stage=Stage.CONSUMER_LOOP, wait_seconds=self._wait_seconds)
        while True:
            await self.poll_once()

    def _before_restart(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.error(
            f"Consumer failed, restarting in {self._restart_delay}s",
            stage=Stage.CONSUMER_RESTART,
            attempt=retry_state.attempt_number,
            error=str(error),
            error_type=type(error).__name__,
        )
        self._metrics.record_consumer_restart()

    async def consume(self) -> None:
        """
        Run until cancelled. Any failure restarts the loop after a fixed
        delay; cancellation ends it.
        """
        retrying = AsyncRetrying(
            wait=wait_fixed(self._restart_delay),
            stop=stop_never,
            retry=retry_if_exception_type(Exception),
            before_sleep=self._before_restart,
            sleep=self._sleep,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                await self._run_loop()
