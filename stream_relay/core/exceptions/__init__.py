"""
Exception Module

Structured exception hierarchy for the stream relay services.
All exceptions are organized by theme for better maintainability and debuggability.

Module Structure:
-----------------
- **base.py**: RelayError base class + ConfigurationError
- **stream.py**: Upstream stream connection exceptions
- **validation.py**: Capability document / stream validation exceptions
- **queue.py**: Message queue exceptions

Usage:
------
```python
# Import specific exceptions
from stream_relay.core.exceptions import QueueError, UnknownStreamError

# Or import by category
from stream_relay.core.exceptions.stream import StreamError, StreamConnectionError
```
"""

# Base exception
from stream_relay.core.exceptions.base import ConfigurationError, RelayError

# Queue exceptions
from stream_relay.core.exceptions.queue import QueueError

# Stream exceptions
from stream_relay.core.exceptions.stream import (
    StreamConnectionError,
    StreamDisconnectedError,
    StreamError,
)

# Validation exceptions
from stream_relay.core.exceptions.validation import (
    SchemaFetchError,
    StreamValidationError,
    UnknownStreamError,
)

__all__ = [
    # Base
    "RelayError",
    "ConfigurationError",
    # Queue
    "QueueError",
    # Stream
    "StreamError",
    "StreamConnectionError",
    "StreamDisconnectedError",
    # Validation
    "StreamValidationError",
    "SchemaFetchError",
    "UnknownStreamError",
]
