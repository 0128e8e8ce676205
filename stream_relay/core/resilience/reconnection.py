"""
Reconnection Scheduler

Unbounded retry policy for the long-lived upstream stream connection.

Policy:
    delay(n) = min(start + n * increment, max)      n = 0, 1, 2, ...

With start=1s, increment=1s, max=30s the waits before successive
reconnects are 1s, 2s, 3s, ... 30s, 30s, ...

The policy never gives up: the ingestion service is a daemon, the only
way out of ``ReconnectionScheduler.run`` is task cancellation.

Backoff state lives in the tenacity retry state of a single ``run`` call,
so every new reader starts again at ``start``.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import NoReturn

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_never
from tenacity.wait import wait_base

from stream_relay.core.config.constants import Stage
from stream_relay.core.config.settings import StreamConfig
from stream_relay.core.exceptions import StreamDisconnectedError
from stream_relay.core.logging.logger import get_logger
from stream_relay.infrastructure.monitoring.metrics_collector import (
    MetricsCollector,
    get_metrics_collector,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class LinearBackoff(wait_base):
    """
    Linearly increasing, capped wait strategy (tenacity ``wait`` callable).

    Attributes:
        start: First delay in seconds
        increment: Added per further retry, in seconds
        maximum: Upper bound in seconds
    """

    start: float
    increment: float
    maximum: float

    def __post_init__(self):
        if min(self.start, self.increment, self.maximum) < 0:
            raise ValueError("Backoff parameters must be non-negative")
        if self.start > self.maximum:
            raise ValueError(f"Backoff start ({self.start}) exceeds maximum ({self.maximum})")

    @classmethod
    def from_config(cls, config: StreamConfig) -> "LinearBackoff":
        return cls(
            start=config.backoff_start_seconds,
            increment=config.backoff_increment_seconds,
            maximum=config.backoff_max_seconds,
        )

    def delay(self, retry_number: int) -> float:
        """Delay in seconds before the ``retry_number``-th retry (0-based)."""
        return min(self.start + retry_number * self.increment, self.maximum)

    def __call__(self, retry_state: RetryCallState) -> float:
        return self.delay(retry_state.attempt_number - 1)


class ReconnectionScheduler:
    """
    Runs "connect once and drain until failure" forever.

    Usage:
        scheduler = ReconnectionScheduler(LinearBackoff.from_config(config))
        await scheduler.run(reader.consume_once)

    Every retry increments the reconnection counter and logs the computed
    delay before waiting. ``sleep`` is injectable so tests never wait.
    """

    def __init__(
        self,
        backoff: LinearBackoff,
        metrics: MetricsCollector | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._backoff = backoff
        self._metrics = metrics or get_metrics_collector()
        self._sleep = sleep

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0

        logger.error(
            "Stream connection lost",
            stage=Stage.STREAM_LOST,
            attempt=retry_state.attempt_number,
            error=str(error),
            error_type=type(error).__name__,
        )
        self._metrics.record_reconnection_attempt()
        logger.warning(
            f"Reconnecting after {round(delay * 1000)}ms",
            stage=Stage.STREAM_RECONNECT,
            delay_ms=round(delay * 1000),
            attempt=retry_state.attempt_number,
        )

    async def run(self, attempt: Callable[[], Awaitable[None]]) -> NoReturn:
        """
        Call ``attempt`` until the surrounding task is cancelled.

        An attempt that returns instead of raising is treated as a
        disconnect, the upstream stream is not supposed to end.
        """
        retrying = AsyncRetrying(
            wait=self._backoff,
            stop=stop_never,
            retry=retry_if_exception_type(Exception),
            before_sleep=self._before_sleep,
            sleep=self._sleep,
            reraise=True,
        )

        async for attempt_state in retrying:
            with attempt_state:
                await attempt()
                raise StreamDisconnectedError("Stream attempt ended without error")

        # stop_never: unreachable unless tenacity is misconfigured
        raise RuntimeError("Reconnection loop exited")
