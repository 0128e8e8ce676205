"""
Unit Tests for Queue Publisher

Tests serialization, retry schedule and failure absorption.
"""

import json
from unittest.mock import AsyncMock

import pytest

from stream_relay.core.interfaces.message_queue import MessageQueue
from stream_relay.ingestion.queue_publisher import QueuePublisher
from tests.test_fixtures.event_factory import CanonicalEventFactory
from tests.test_fixtures.in_memory_queue import InMemoryQueue


@pytest.mark.unit
class TestQueuePublisher:
    """Test publish() against an in-memory queue."""

    @pytest.mark.asyncio
    async def test_publishes_one_message(self, in_memory_queue, mock_metrics, recorded_sleeps):
        sleep, delays = recorded_sleeps
        publisher = QueuePublisher(in_memory_queue, metrics=mock_metrics, sleep=sleep)
        event = CanonicalEventFactory.basic()

        await publisher.publish(event)

        assert len(in_memory_queue.pending) == 1
        assert json.loads(in_memory_queue.pending[0].body)["title"] == "Foo"
        assert delays == []
        mock_metrics.record_publish_success.assert_called_once()
        mock_metrics.record_publish_failure.assert_not_called()

    @pytest.mark.asyncio
    async def test_transient_failures_retried(self, mock_metrics, recorded_sleeps):
        sleep, delays = recorded_sleeps
        queue = InMemoryQueue(fail_sends=2)
        publisher = QueuePublisher(queue, metrics=mock_metrics, sleep=sleep)

        await publisher.publish(CanonicalEventFactory.basic())

        assert queue.send_calls == 3
        assert len(queue.pending) == 1
        assert delays == pytest.approx([0.1, 0.2])
        mock_metrics.record_publish_success.assert_called_once()

    @pytest.mark.asyncio
    async def test_exhausted_retries_absorbed(self, mock_metrics, recorded_sleeps):
        sleep, delays = recorded_sleeps
        queue = InMemoryQueue(fail_sends=100)
        publisher = QueuePublisher(queue, metrics=mock_metrics, sleep=sleep)

        await publisher.publish(CanonicalEventFactory.basic())  # does not raise

        assert queue.send_calls == 4  # 1 attempt + 3 retries
        assert queue.pending == []
        assert delays == pytest.approx([0.1, 0.2, 0.4])
        mock_metrics.record_publish_failure.assert_called_once()
        mock_metrics.record_publish_success.assert_not_called()

    @pytest.mark.asyncio
    async def test_custom_retry_budget(self, mock_metrics, recorded_sleeps):
        sleep, delays = recorded_sleeps
        queue = InMemoryQueue(fail_sends=100)
        publisher = QueuePublisher(queue, metrics=mock_metrics, max_retries=1, base_delay=0.5, sleep=sleep)

        await publisher.publish(CanonicalEventFactory.basic())

        assert queue.send_calls == 2
        assert delays == pytest.approx([0.5])

    @pytest.mark.asyncio
    async def test_unexpected_error_absorbed_without_retry(self, mock_metrics, recorded_sleeps):
        sleep, delays = recorded_sleeps

        class BrokenQueue(InMemoryQueue):
            async def send(self, body: str) -> str:
                self.send_calls += 1
                raise KeyError("MessageId")

        queue = BrokenQueue()
        publisher = QueuePublisher(queue, metrics=mock_metrics, sleep=sleep)

        await publisher.publish(CanonicalEventFactory.basic())  # does not raise

        assert queue.send_calls == 1
        assert delays == []
        mock_metrics.record_publish_failure.assert_called_once()
        mock_metrics.record_publish_success.assert_not_called()

    @pytest.mark.asyncio
    async def test_publisher_keeps_working_after_unexpected_error(self, mock_metrics, recorded_sleeps):
        sleep, _ = recorded_sleeps
        queue = AsyncMock(spec=MessageQueue)
        queue.send.side_effect = [KeyError("MessageId"), "1-0"]
        publisher = QueuePublisher(queue, metrics=mock_metrics, sleep=sleep)

        await publisher.publish(CanonicalEventFactory.basic(title="First"))
        await publisher.publish(CanonicalEventFactory.basic(title="Second"))

        assert queue.send.await_count == 2
        mock_metrics.record_publish_failure.assert_called_once()
        mock_metrics.record_publish_success.assert_called_once()
