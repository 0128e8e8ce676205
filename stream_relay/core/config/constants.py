"""
System Constants and Enumerations

This module defines system-wide constants and enumerations used across
the ingestion and writer services.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for magic numbers
- Type-safe enums for stage tagging and error classification
- Easy to update and track changes
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Pipeline stages used as the ``stage=`` field of log records.

    Format: {PREFIX}.{STEP}
    - PREFIX: component (STREAM, VALIDATE, QUEUE, CONSUMER, APP)
    - STEP: short uppercase description

    Examples:
        logger.info("Connecting", stage=Stage.STREAM_CONNECT)
        # -> {"event": "Connecting", "stage": "STREAM.CONNECT", ...}
    """

    # Process lifecycle
    APP_STARTUP = "APP.STARTUP"
    APP_SHUTDOWN = "APP.SHUTDOWN"

    # Capability document validation
    VALIDATE_FETCH = "VALIDATE.FETCH"
    VALIDATE_OK = "VALIDATE.OK"
    VALIDATE_ERR = "VALIDATE.ERR"

    # Upstream stream
    STREAM_CONNECT = "STREAM.CONNECT"
    STREAM_EVENT = "STREAM.EVENT"
    STREAM_DECODE_ERR = "STREAM.DECODE_ERR"
    STREAM_FILTER = "STREAM.FILTER"
    STREAM_LOST = "STREAM.LOST"
    STREAM_RECONNECT = "STREAM.RECONNECT"

    # Queue (producer side)
    QUEUE_INIT = "QUEUE.INIT"
    QUEUE_PUBLISH = "QUEUE.PUBLISH"
    QUEUE_RETRY = "QUEUE.RETRY"
    QUEUE_ERR = "QUEUE.ERR"

    # Queue (consumer side)
    CONSUMER_LOOP = "CONSUMER.LOOP"
    CONSUMER_MESSAGE = "CONSUMER.MESSAGE"
    CONSUMER_DECODE_ERR = "CONSUMER.DECODE_ERR"
    CONSUMER_DELETE = "CONSUMER.DELETE"
    CONSUMER_RESTART = "CONSUMER.RESTART"

    def __str__(self) -> str:
        return self.value


# ============================================================================
# Deserialization Error Classification
# ============================================================================


class DecodeErrorType(str, Enum):
    """
    Classification of a stream line that could not be decoded.

    MALFORMED_JSON: the line does not open a JSON object
    SCHEMA_MISMATCH: the line opens a JSON object but does not fit the schema
    """

    MALFORMED_JSON = "malformed_json"
    SCHEMA_MISMATCH = "schema_mismatch"


class FilterReason(str, Enum):
    """Reasons an upstream event is dropped before publishing."""

    CANARY = "canary"
    FOREIGN_ORIGIN = "foreign_origin"


# ============================================================================
# Upstream (Wikimedia EventStreams)
# ============================================================================

WIKIMEDIA_STREAM_BASE_URL = "https://stream.wikimedia.org/v2/stream"
WIKIMEDIA_SPEC_URL = "https://stream.wikimedia.org/?spec"
WIKIMEDIA_STREAM_PATH_TEMPLATE = "/v2/stream/{streams}"
WIKIMEDIA_STREAMS_PARAMETER = "streams"

CANARY_DOMAIN = "canary"

DEFAULT_USER_AGENT = "stream-relay/1.0 (Wikimedia EventStreams ingestion)"

# Max characters of an offending line/body echoed into logs
LOG_EXCERPT_LENGTH = 200

# ============================================================================
# Queue Settings
# ============================================================================

QUEUE_MAX_BATCH_SIZE = 10  # Hard limit of a single receive/delete batch
QUEUE_STREAM_MAX_LEN = 100_000  # Approximate trim length for Redis streams
QUEUE_DEFAULT_GROUP = "writer"

# Publish retry (exponential): 100ms, 200ms, 400ms
PUBLISH_MAX_RETRIES = 3
PUBLISH_RETRY_BASE_DELAY = 0.1

# Consumer restart after a receive/delete failure (flat interval)
CONSUMER_RESTART_DELAY = 5.0

# ============================================================================
# HTTP Headers
# ============================================================================

HEADER_USER_AGENT = "User-Agent"
HEADER_ACCEPT = "Accept"
