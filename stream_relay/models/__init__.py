"""
Domain Models

- raw_event: upstream EventStreams line (decode only)
- canonical_event: queue wire format shared by both services
- streams_spec: capability document used for startup validation
"""

from stream_relay.models.canonical_event import CanonicalEvent, ExtraField, IngestionSource
from stream_relay.models.raw_event import EventMeta, LengthChange, RawStreamEvent, RevisionChange
from stream_relay.models.streams_spec import StreamsSpec

__all__ = [
    "CanonicalEvent",
    "EventMeta",
    "ExtraField",
    "IngestionSource",
    "LengthChange",
    "RawStreamEvent",
    "RevisionChange",
    "StreamsSpec",
]
