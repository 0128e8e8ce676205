"""
Relay Error Base

Every failure the relay raises on purpose is a ``RelayError``. An error names
the endpoint it concerns (stream URL, capability document URL, queue) and,
when one is active, the stream or consumer session it happened in, so a
single log line is enough to place it.
"""

from typing import Any


class RelayError(Exception):
    """
    Base exception for stream relay errors.

    Attributes:
        message: Error message
        endpoint: Stream URL, capability document URL or queue reference
        session_id: Stream connection / consumer session, if known
        hint: How an operator can fix it, when there is an obvious fix
        context: Remaining structured fields (status code, entry count, ...)

    Example:
        raise StreamConnectionError(
            "Upstream returned 503",
            endpoint="https://stream.wikimedia.org/v2/stream/recentchange",
            session_id="abc-123",
            status_code=503,
        )
    """

    def __init__(
        self,
        message: str,
        *,
        endpoint: str | None = None,
        session_id: str | None = None,
        hint: str | None = None,
        **context: Any,
    ):
        super().__init__(message)
        self.message = message
        self.endpoint = endpoint
        self.session_id = session_id
        self.hint = hint
        self.context = context

    @classmethod
    def caused_by(
        cls,
        exc: BaseException,
        message: str | None = None,
        *,
        endpoint: str | None = None,
        session_id: str | None = None,
        **context: Any,
    ) -> "RelayError":
        """
        Wrap an httpx / redis / botocore error.

        The wrapped class name lands in ``context["cause"]``; chain with
        ``raise ... from exc`` to keep the traceback.
        """
        return cls(
            message or str(exc) or type(exc).__name__,
            endpoint=endpoint,
            session_id=session_id,
            cause=type(exc).__name__,
            **context,
        )

    def log_fields(self) -> dict[str, Any]:
        """Flat fields for a structlog call, with unset attributes left out."""
        fields = {
            "error": self.message,
            "error_type": type(self).__name__,
            "endpoint": self.endpoint,
            "session_id": self.session_id,
            "hint": self.hint,
            **self.context,
        }
        return {key: value for key, value in fields.items() if value is not None}


class ConfigurationError(RelayError):
    """Raised when required configuration is missing or invalid. Fatal at startup."""
