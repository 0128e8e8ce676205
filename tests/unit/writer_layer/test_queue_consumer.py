"""
Unit Tests for Queue Consumer

Tests batch processing, selective deletion and the restart loop.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from stream_relay.core.exceptions import QueueError
from stream_relay.core.interfaces.message_queue import MessageQueue, QueueMessage
from stream_relay.writer.queue_consumer import QueueConsumer
from tests.test_fixtures.event_factory import CanonicalEventFactory


def good_message(message_id: str = "m-1") -> QueueMessage:
    return QueueMessage(id=message_id, body=CanonicalEventFactory.basic().to_json(), receipt_handle=f"rh-{message_id}")


def bad_message(message_id: str = "m-2", body: str | None = "{not json") -> QueueMessage:
    return QueueMessage(id=message_id, body=body, receipt_handle=f"rh-{message_id}")


@pytest.mark.unit
class TestProcessBatch:
    """Test decode + log of a received batch."""

    def test_returns_only_decodable_messages(self, in_memory_queue, mock_metrics):
        consumer = QueueConsumer(in_memory_queue, metrics=mock_metrics, wait_seconds=0)
        good, bad = good_message(), bad_message()

        assert consumer.process_batch([good, bad]) == [good]
        mock_metrics.record_message_processed.assert_called_once()
        mock_metrics.record_message_failed.assert_called_once()

    def test_message_without_body_is_skipped(self, in_memory_queue, mock_metrics):
        consumer = QueueConsumer(in_memory_queue, metrics=mock_metrics, wait_seconds=0)

        assert consumer.process_batch([bad_message(body=None)]) == []

    def test_valid_json_with_wrong_shape_is_skipped(self, in_memory_queue, mock_metrics):
        consumer = QueueConsumer(in_memory_queue, metrics=mock_metrics, wait_seconds=0)

        assert consumer.process_batch([bad_message(body='{"title": "no source"}')]) == []

    def test_empty_batch(self, in_memory_queue, mock_metrics):
        consumer = QueueConsumer(in_memory_queue, metrics=mock_metrics, wait_seconds=0)

        assert consumer.process_batch([]) == []


@pytest.mark.unit
class TestPollOnce:
    """Test one receive/process/delete cycle."""

    @pytest.mark.asyncio
    async def test_deletes_only_successes(self, in_memory_queue, mock_metrics):
        await in_memory_queue.send(CanonicalEventFactory.basic().to_json())
        bad = in_memory_queue.put_raw("{not json")
        consumer = QueueConsumer(in_memory_queue, metrics=mock_metrics, wait_seconds=0)

        deleted = await consumer.poll_once()

        assert deleted == 1
        assert len(in_memory_queue.deleted) == 1
        assert in_memory_queue.pending == [bad]

    @pytest.mark.asyncio
    async def test_single_delete_call_per_batch(self, mock_metrics):
        queue = AsyncMock(spec=MessageQueue)
        messages = [good_message("a"), good_message("b"), bad_message("c")]
        queue.receive.return_value = messages
        consumer = QueueConsumer(queue, metrics=mock_metrics, wait_seconds=7)

        await consumer.poll_once()

        queue.receive.assert_awaited_once_with(max_messages=10, wait_seconds=7)
        queue.delete_batch.assert_awaited_once_with(messages[:2])

    @pytest.mark.asyncio
    async def test_no_delete_when_nothing_succeeded(self, mock_metrics):
        queue = AsyncMock(spec=MessageQueue)
        queue.receive.return_value = [bad_message("x"), bad_message("y", body=None)]
        consumer = QueueConsumer(queue, metrics=mock_metrics, wait_seconds=0)

        assert await consumer.poll_once() == 0
        queue.delete_batch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_receive(self, mock_metrics):
        queue = AsyncMock(spec=MessageQueue)
        queue.receive.return_value = []
        consumer = QueueConsumer(queue, metrics=mock_metrics, wait_seconds=0)

        assert await consumer.poll_once() == 0
        queue.delete_batch.assert_not_awaited()


@pytest.mark.unit
class TestConsumeLoop:
    """Test restart behaviour of consume()."""

    @pytest.mark.asyncio
    async def test_queue_error_restarts_after_fixed_delay(self, mock_metrics, recorded_sleeps):
        sleep, delays = recorded_sleeps
        queue = AsyncMock(spec=MessageQueue)
        queue.receive.side_effect = [
            QueueError("receive failed"),
            [good_message()],
            QueueError("receive failed again"),
            asyncio.CancelledError(),
        ]
        consumer = QueueConsumer(queue, metrics=mock_metrics, wait_seconds=0, sleep=sleep)

        with pytest.raises(asyncio.CancelledError):
            await consumer.consume()

        assert delays == [5.0, 5.0]
        assert mock_metrics.record_consumer_restart.call_count == 2
        queue.delete_batch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_failure_restarts(self, mock_metrics, recorded_sleeps):
        sleep, delays = recorded_sleeps
        queue = AsyncMock(spec=MessageQueue)
        queue.receive.side_effect = [[good_message()], asyncio.CancelledError()]
        queue.delete_batch.side_effect = QueueError("delete rejected")
        consumer = QueueConsumer(queue, metrics=mock_metrics, wait_seconds=0, sleep=sleep)

        with pytest.raises(asyncio.CancelledError):
            await consumer.consume()

        assert delays == [5.0]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [KeyError("ReceiptHandle"), RuntimeError("bug"), OSError("reset")])
    async def test_any_error_restarts_after_fixed_delay(self, mock_metrics, recorded_sleeps, error):
        sleep, delays = recorded_sleeps
        queue = AsyncMock(spec=MessageQueue)
        queue.receive.side_effect = [error, [good_message()], asyncio.CancelledError()]
        consumer = QueueConsumer(queue, metrics=mock_metrics, wait_seconds=0, sleep=sleep)

        with pytest.raises(asyncio.CancelledError):
            await consumer.consume()

        assert delays == [5.0]
        assert queue.receive.await_count == 3
        mock_metrics.record_consumer_restart.assert_called_once()
        queue.delete_batch.assert_awaited_once()
