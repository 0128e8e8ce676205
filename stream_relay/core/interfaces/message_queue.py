from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class QueueMessage:
    """
    Represents a message received from the queue.

    Attributes:
        id: Backend message ID (SQS MessageId / Redis stream entry ID)
        body: Raw message body, ``None`` when the backend delivered none
        receipt_handle: Token needed to delete the message
    """
    id: str
    body: str | None
    receipt_handle: str


class MessageQueue(ABC):
    """
    Abstract base class for message queue implementations.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize connection to the queue."""
        pass

    @abstractmethod
    async def send(self, body: str) -> str:
        """
        Send a single message to the queue.

        Args:
            body: Serialized message body.

        Returns:
            str: Message ID.

        Raises:
            QueueError: On transport or service failure.
        """
        pass

    @abstractmethod
    async def receive(self, max_messages: int = 10, wait_seconds: int = 20) -> list[QueueMessage]:
        """
        Receive a batch of messages.

        Args:
            max_messages: Upper bound of the batch (at most 10).
            wait_seconds: Long-poll wait when the queue is empty.

        Returns:
            list[QueueMessage]: Possibly empty batch.

        Raises:
            QueueError: On transport or service failure.
        """
        pass

    @abstractmethod
    async def delete_batch(self, messages: list[QueueMessage]) -> None:
        """
        Acknowledge and remove processed messages in one call.

        Raises:
            QueueError: On transport or service failure.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection."""
        pass
