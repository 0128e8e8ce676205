"""
Amazon SQS Message Queue

boto3 is synchronous; every call is pushed to a worker thread with
``asyncio.to_thread`` so the event loop keeps draining the upstream stream
while a send or a long poll is in flight.
"""

import asyncio

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from stream_relay.core.config.constants import QUEUE_MAX_BATCH_SIZE, Stage
from stream_relay.core.exceptions import ConfigurationError, QueueError
from stream_relay.core.interfaces.message_queue import MessageQueue, QueueMessage
from stream_relay.core.logging.logger import get_logger

logger = get_logger(__name__)

_AWS_ERRORS = (BotoCoreError, ClientError)


def parse_sqs_arn(arn: str) -> tuple[str, str, str]:
    """
    Split ``arn:aws:sqs:<region>:<account>:<name>``.

    Raises:
        ConfigurationError: If the ARN is not an SQS queue ARN
    """
    parts = arn.split(":")
    if len(parts) != 6 or parts[0] != "arn" or parts[2] != "sqs" or not all(parts[3:]):
        raise ConfigurationError(f"Not an SQS queue ARN: {arn}")
    _, _, _, region, account, name = parts
    return region, account, name


def region_from_queue_url(queue_url: str) -> str | None:
    """``https://sqs.eu-west-1.amazonaws.com/123/q`` -> ``eu-west-1``."""
    host = queue_url.split("://", 1)[-1].split("/", 1)[0]
    labels = host.split(".")
    if len(labels) >= 3 and labels[0] == "sqs":
        return labels[1]
    return None


class SqsQueue(MessageQueue):
    """
    SQS backed queue.

    Accepts a queue URL or a queue ARN; an ARN is resolved to its URL with
    ``GetQueueUrl`` during ``initialize()``.
    """

    def __init__(self, queue_ref: str, region_name: str | None = None, client=None):
        self._queue_ref = queue_ref
        self._client = client
        self._queue_url: str | None = None
        self._arn: tuple[str, str, str] | None = None

        if queue_ref.startswith("arn:"):
            self._arn = parse_sqs_arn(queue_ref)
            self._region = region_name or self._arn[0]
        else:
            self._queue_url = queue_ref
            self._region = region_name or region_from_queue_url(queue_ref)

    @property
    def queue_url(self) -> str | None:
        return self._queue_url

    async def initialize(self) -> None:
        """
        Build the boto3 client and resolve the queue URL.

        Raises:
            QueueError: If the ARN cannot be resolved
        """
        if self._client is None:
            self._client = await asyncio.to_thread(boto3.client, "sqs", region_name=self._region)

        if self._queue_url is None and self._arn is not None:
            _, account, name = self._arn
            try:
                response = await asyncio.to_thread(
                    self._client.get_queue_url,
                    QueueName=name,
                    QueueOwnerAWSAccountId=account,
                )
            except _AWS_ERRORS as e:
                raise QueueError.caused_by(
                    e, f"Failed to resolve queue URL for {self._queue_ref}", endpoint=self._queue_ref
                ) from e
            self._queue_url = response["QueueUrl"]

        logger.info(
            "SQS queue ready",
            stage=Stage.QUEUE_INIT,
            queue_url=self._queue_url,
            region=self._region,
        )

    def _require_ready(self):
        if self._client is None or self._queue_url is None:
            raise QueueError("SQS queue used before initialize()", endpoint=self._queue_ref)
        return self._client

    async def send(self, body: str) -> str:
        client = self._require_ready()
        try:
            response = await asyncio.to_thread(
                client.send_message,
                QueueUrl=self._queue_url,
                MessageBody=body,
            )
        except _AWS_ERRORS as e:
            raise QueueError.caused_by(e, endpoint=self._queue_url) from e

        logger.debug("Message produced", stage=Stage.QUEUE_PUBLISH, id=response["MessageId"])
        return response["MessageId"]

    async def receive(self, max_messages: int = 10, wait_seconds: int = 20) -> list[QueueMessage]:
        client = self._require_ready()
        try:
            response = await asyncio.to_thread(
                client.receive_message,
                QueueUrl=self._queue_url,
                MaxNumberOfMessages=max(1, min(max_messages, QUEUE_MAX_BATCH_SIZE)),
                WaitTimeSeconds=wait_seconds,
            )
        except _AWS_ERRORS as e:
            raise QueueError.caused_by(e, endpoint=self._queue_url) from e

        return [
            QueueMessage(
                id=message["MessageId"],
                body=message.get("Body"),
                receipt_handle=message["ReceiptHandle"],
            )
            for message in response.get("Messages", [])
        ]

    async def delete_batch(self, messages: list[QueueMessage]) -> None:
        """
        DeleteMessageBatch with entries keyed by position.

        Per-entry failures are logged; the messages become visible again
        after the visibility timeout.
        """
        if not messages:
            return

        client = self._require_ready()
        entries = [
            {"Id": str(index), "ReceiptHandle": message.receipt_handle}
            for index, message in enumerate(messages)
        ]
        try:
            response = await asyncio.to_thread(
                client.delete_message_batch,
                QueueUrl=self._queue_url,
                Entries=entries,
            )
        except _AWS_ERRORS as e:
            raise QueueError.caused_by(e, endpoint=self._queue_url, count=len(entries)) from e

        for failure in response.get("Failed", []):
            message = messages[int(failure["Id"])]
            logger.warning(
                "Failed to delete message",
                stage=Stage.CONSUMER_DELETE,
                message_id=message.id,
                code=failure.get("Code"),
                reason=failure.get("Message"),
            )

    async def close(self) -> None:
        if self._client is not None:
            await asyncio.to_thread(self._client.close)
            self._client = None
