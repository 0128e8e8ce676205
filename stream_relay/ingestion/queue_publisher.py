"""
Queue Publisher

Sends one canonical event per queue message. Transient queue failures are
retried with exponential backoff (100ms, 200ms, 400ms); once retries are
exhausted the event is dropped, counted and logged. Any other failure is
dropped the same way without a retry. ``publish`` never raises, so a slow or
broken queue cannot stall the stream.
"""

import asyncio
from collections.abc import Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from stream_relay.core.config.constants import (
    PUBLISH_MAX_RETRIES,
    PUBLISH_RETRY_BASE_DELAY,
    Stage,
)
from stream_relay.core.exceptions import QueueError
from stream_relay.core.interfaces.message_queue import MessageQueue
from stream_relay.core.logging.logger import get_logger
from stream_relay.infrastructure.monitoring.metrics_collector import (
    MetricsCollector,
    get_metrics_collector,
)
from stream_relay.models.canonical_event import CanonicalEvent

logger = get_logger(__name__)


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Queue send failed, retrying",
        stage=Stage.QUEUE_RETRY,
        attempt=retry_state.attempt_number,
        delay_ms=round(retry_state.next_action.sleep * 1000) if retry_state.next_action else None,
        error=str(error),
    )


class QueuePublisher:
    """
    Publishes canonical events to the configured queue.

    Usage:
        publisher = QueuePublisher(queue)
        await publisher.publish(event)
    """

    def __init__(
        self,
        queue: MessageQueue,
        metrics: MetricsCollector | None = None,
        max_retries: int = PUBLISH_MAX_RETRIES,
        base_delay: float = PUBLISH_RETRY_BASE_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._queue = queue
        self._metrics = metrics or get_metrics_collector()
        self._max_retries = max_retries
        self._base_delay = base_delay
        self._sleep = sleep

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self._max_retries + 1),
            wait=wait_exponential(multiplier=self._base_delay, exp_base=2),
            retry=retry_if_exception_type(QueueError),
            before_sleep=_log_retry,
            sleep=self._sleep,
        )

    def _drop(self, event: CanonicalEvent, error: BaseException | None, message: str) -> None:
        self._metrics.record_publish_failure()
        fields = error.log_fields() if isinstance(error, QueueError) else {
            "error": str(error),
            "error_type": type(error).__name__,
        }
        logger.error(message, stage=Stage.QUEUE_ERR, title=event.title, **fields)

    async def publish(self, event: CanonicalEvent) -> None:
        """Serialize and send ``event``; never raises for a failed send."""
        try:
            body = event.to_json()
            async for attempt in self._retrying():
                with attempt:
                    message_id = await self._queue.send(body)
        except RetryError as e:
            self._drop(
                event,
                e.last_attempt.exception(),
                f"Failed to publish event after {self._max_retries} retries",
            )
            return
        except Exception as e:
            self._drop(event, e, "Failed to publish event")
            return

        self._metrics.record_publish_success()
        logger.debug("Event published", stage=Stage.QUEUE_PUBLISH, message_id=message_id)
