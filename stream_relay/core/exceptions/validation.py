"""
Validation Exceptions

All exceptions related to validating the configured stream against
the upstream capability document. These are fatal at startup.
"""

from typing import Any

from stream_relay.core.exceptions.base import RelayError


class StreamValidationError(RelayError):
    """
    Raised when the configured stream cannot be confirmed upstream.

    This is the base class for all validation-related errors.
    """
    pass


class SchemaFetchError(StreamValidationError):
    """
    Raised when the capability document cannot be used.

    Common causes:
    - Network failure or non-2xx status fetching the document
    - Body is not valid JSON
    - Document has no enumerated streams for the stream path template
    """
    pass


class UnknownStreamError(StreamValidationError):
    """
    Raised when the configured stream is not offered upstream.

    Carries the list of valid stream names so operators can fix the
    configuration.

    Example:
        raise UnknownStreamError(
            "Stream 'recentchanges' not found",
            available_streams=["page-create", "recentchange"],
        )
    """

    def __init__(self, message: str, available_streams: list[str] | None = None, **kwargs: Any):
        self.available_streams = list(available_streams or [])
        super().__init__(message, available_streams=self.available_streams, **kwargs)
