"""
Stream Reader

Consumes the Wikimedia EventStreams endpoint forever:

    connect -> split body into lines -> decode -> filter -> convert -> publish
       ^                                                                  |
       +---------- ReconnectionScheduler (linear backoff) <---- error/EOF -+

Per line:
    1. Decode as ``RawStreamEvent``; on failure classify, log, count, skip
    2. Drop canary events (``meta.domain == "canary"``)
    3. Drop events from other wikis (``server_name`` != expected origin)
    4. Convert to ``CanonicalEvent``, log a summary, publish

Lines are processed strictly in arrival order; publishing is awaited
before the next line is read.
"""

import httpx
from pydantic import ValidationError

from stream_relay.core.config.constants import (
    HEADER_ACCEPT,
    HEADER_USER_AGENT,
    LOG_EXCERPT_LENGTH,
    DecodeErrorType,
    FilterReason,
    Stage,
)
from stream_relay.core.config.settings import StreamConfig, get_settings
from stream_relay.core.exceptions import QueueError, StreamConnectionError, StreamDisconnectedError
from stream_relay.core.logging.logger import bind_session, get_logger
from stream_relay.core.resilience.reconnection import LinearBackoff, ReconnectionScheduler
from stream_relay.infrastructure.monitoring.metrics_collector import (
    MetricsCollector,
    get_metrics_collector,
)
from stream_relay.ingestion.queue_publisher import QueuePublisher
from stream_relay.models.canonical_event import IngestionSource
from stream_relay.models.raw_event import RawStreamEvent

logger = get_logger(__name__)


def classify_decode_error(line: str) -> DecodeErrorType:
    """A line that opens a JSON object failed on shape, anything else on syntax."""
    if line.strip().startswith("{"):
        return DecodeErrorType.SCHEMA_MISMATCH
    return DecodeErrorType.MALFORMED_JSON


class StreamReader:
    """
    Long-lived consumer of the upstream event stream.

    Usage:
        reader = StreamReader(config, http_client, publisher)
        task = asyncio.create_task(reader.consume())
        ...
        task.cancel()
    """

    def __init__(
        self,
        config: StreamConfig,
        http_client: httpx.AsyncClient,
        publisher: QueuePublisher,
        scheduler: ReconnectionScheduler | None = None,
        metrics: MetricsCollector | None = None,
        source: IngestionSource = IngestionSource.WIKIPEDIA,
    ):
        settings = get_settings()

        self._config = config
        self._client = http_client
        self._publisher = publisher
        self._metrics = metrics or get_metrics_collector()
        self._scheduler = scheduler or ReconnectionScheduler(
            LinearBackoff.from_config(config), metrics=self._metrics
        )
        self._source = source
        self._expected_server = config.expected_server_name
        self._headers = {
            HEADER_USER_AGENT: settings.HTTP_USER_AGENT,
            HEADER_ACCEPT: "application/json",
        }
        # A silent socket longer than the read timeout counts as a dropped connection
        self._timeout = httpx.Timeout(
            None,
            connect=settings.HTTP_CONNECT_TIMEOUT,
            read=settings.STREAM_READ_TIMEOUT_SECONDS,
        )

    async def consume(self) -> None:
        """
        Run until cancelled.

        STAGE-STREAM: Entry point of the ingestion background task
        """
        logger.info(
            f"Starting stream consumer for {self._config.stream_url}",
            stage=Stage.STREAM_CONNECT,
            server=self._expected_server,
            lang=self._config.WIKI_LANG,
            stream=self._config.WIKI_STREAM,
        )
        await self._scheduler.run(self.consume_once)

    async def consume_once(self) -> None:
        """
        One connection attempt: open the stream and drain it.

        Raises:
            StreamConnectionError: Transport failure, non-2xx status or a read
                stalled past the read timeout
            StreamDisconnectedError: The body ended
        """
        session_id = bind_session()

        url = self._config.stream_url
        logger.info(f"Connecting to {url}", stage=Stage.STREAM_CONNECT)

        try:
            async with self._client.stream(
                "GET", url, headers=self._headers, timeout=self._timeout
            ) as response:
                response.raise_for_status()
                async for line in response.aiter_lines():
                    if not line:
                        continue
                    await self.process_line(line)
        except httpx.HTTPError as e:
            raise StreamConnectionError.caused_by(e, endpoint=url, session_id=session_id) from e

        raise StreamDisconnectedError("Upstream closed the stream", endpoint=url, session_id=session_id)

    async def process_line(self, line: str) -> None:
        """Decode, filter and publish a single non-empty line."""
        try:
            event = RawStreamEvent.model_validate_json(line)
        except ValidationError as e:
            error_type = classify_decode_error(line)
            logger.warning(
                f"Deserialization error: {e.error_count()} error(s)",
                stage=Stage.STREAM_DECODE_ERR,
                error_type=error_type.value,
                error=e.errors(include_url=False)[0]["msg"],
                line=line[:LOG_EXCERPT_LENGTH],
            )
            self._metrics.record_deserialization_error(error_type.value)
            return

        if event.is_canary():
            self._metrics.record_event_filtered(FilterReason.CANARY.value)
            return

        if not event.matches_server(self._expected_server):
            self._metrics.record_event_filtered(FilterReason.FOREIGN_ORIGIN.value)
            return

        self._metrics.record_event_accepted()
        logger.info(event.summary(), stage=Stage.STREAM_EVENT)

        try:
            await self._publisher.publish(event.to_canonical_event(self._source))
        except QueueError as e:
            logger.error("Publish failed", stage=Stage.QUEUE_ERR, **e.log_fields())
        except Exception:
            logger.exception("Failed to hand event to publisher", stage=Stage.QUEUE_ERR, title=event.title)
