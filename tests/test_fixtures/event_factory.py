"""
Event Factory for Test Data

Upstream stream lines and canonical events for the common scenarios.
"""

import json

from stream_relay.models.canonical_event import CanonicalEvent, ExtraField, IngestionSource


class StreamLineFactory:
    """Builds raw EventStreams lines (JSON text)."""

    @staticmethod
    def edit(**overrides) -> str:
        """A complete English Wikipedia edit event."""
        event = {
            "$schema": "/mediawiki/recentchange/1.0.0",
            "meta": {
                "uri": "https://en.wikipedia.org/wiki/Foo",
                "id": "c0ffee",
                "domain": "en.wikipedia.org",
                "stream": "mediawiki.recentchange",
                "dt": "2024-05-01T12:00:00Z",
            },
            "id": 1,
            "type": "edit",
            "namespace": 0,
            "title": "Foo",
            "title_url": "https://en.wikipedia.org/wiki/Foo",
            "comment": "typo",
            "timestamp": 1714564800,
            "user": "Bar",
            "bot": False,
            "minor": True,
            "length": {"old": 100, "new": 120},
            "revision": {"old": 7, "new": 8},
            "server_url": "https://en.wikipedia.org",
            "server_name": "en.wikipedia.org",
            "wiki": "enwiki",
        }
        event.update(overrides)
        return json.dumps(event)

    @staticmethod
    def minimal_camel_case() -> str:
        """Sparse event using camelCase keys."""
        return json.dumps({
            "meta": {"domain": "en.wikipedia.org"},
            "title": "Foo",
            "serverName": "en.wikipedia.org",
        })

    @staticmethod
    def canary() -> str:
        return json.dumps({
            "meta": {"domain": "canary"},
            "title": "Canary",
            "server_name": "en.wikipedia.org",
        })

    @staticmethod
    def foreign(server_name: str = "de.wikipedia.org") -> str:
        return json.dumps({
            "meta": {"domain": server_name},
            "title": "Baz",
            "server_name": server_name,
        })


class CanonicalEventFactory:
    """Builds CanonicalEvent instances."""

    @staticmethod
    def basic(**overrides) -> CanonicalEvent:
        fields = {
            "source": IngestionSource.WIKIPEDIA,
            "timestamp": "2024-05-01T12:00:00Z",
            "title": "Foo",
            "user": "Bar",
            "is_bot": False,
            "event_type": "edit",
            "page_url": "https://en.wikipedia.org/wiki/Foo",
            "wiki": "enwiki",
            "extras": [ExtraField(key="namespace", value="0")],
        }
        fields.update(overrides)
        return CanonicalEvent(**fields)
