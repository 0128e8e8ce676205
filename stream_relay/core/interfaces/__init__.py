"""
Core Interfaces Module

Abstract interfaces for core components, enabling dependency injection,
testability, and loose coupling.

Components:
-----------
- **message_queue.py**: MessageQueue interface for queue backends

Usage:
------
```python
from stream_relay.core.interfaces import MessageQueue

async def relay(queue: MessageQueue, body: str):
    # Works with any backend (Redis Streams, SQS, test doubles)
    await queue.send(body)
```
"""

from stream_relay.core.interfaces.message_queue import MessageQueue, QueueMessage

__all__ = [
    "MessageQueue",
    "QueueMessage",
]
