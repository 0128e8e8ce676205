"""
Stream Exceptions

All exceptions related to the upstream event stream connection.
"""

from stream_relay.core.exceptions.base import RelayError


class StreamError(RelayError):
    """Base exception for upstream stream errors."""
    pass


class StreamConnectionError(StreamError):
    """
    Raised when the stream cannot be opened or a read fails mid-stream.

    Common causes:
    - DNS/TCP/TLS failure
    - Non-2xx status from the stream endpoint
    - Network error while reading the body
    """
    pass


class StreamDisconnectedError(StreamError):
    """
    Raised when the upstream closes the response body.

    The stream is meant to be endless, so a clean close is treated
    the same as a dropped connection and triggers a reconnect.
    """
    pass
