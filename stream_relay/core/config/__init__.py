"""
Configuration Module

This module provides centralized, type-safe configuration management
for the ingestion and writer services.

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: System-wide constants, enums, and magic numbers

Usage:
------
```python
from stream_relay.core.config import StreamConfig, get_settings

settings = get_settings()
stream_config = StreamConfig.from_env()  # raises ConfigurationError when incomplete

stream_config.expected_server_name  # "en.wikipedia.org"
stream_config.stream_url            # "https://stream.wikimedia.org/v2/stream/recentchange"
```

Environment Variables:
---------------------
```bash
# Ingestion (required)
WIKI_LANG=en
WIKI_STREAM=recentchange
WIKI_BACKOFF_START_MS=1000
WIKI_BACKOFF_INCREMENT_MS=1000
WIKI_BACKOFF_MAX_MS=30000

# Ingestion and writer (required)
SQS_QUEUE_URL=https://sqs.us-east-1.amazonaws.com/123456789012/wiki-events

# Optional
LOG_LEVEL=INFO
LOG_FORMAT=json
```
"""

from stream_relay.core.config.settings import (
    QueueConfig,
    Settings,
    StreamConfig,
    get_settings,
    reload_settings,
)

__all__ = [
    "QueueConfig",
    "Settings",
    "StreamConfig",
    "get_settings",
    "reload_settings",
]
