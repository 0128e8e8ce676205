"""
Upstream event schema (Wikimedia EventStreams ``recentchange`` family).

Every field is optional except ``meta``. Keys are accepted in the
upstream snake_case spelling as well as camelCase (``server_name`` or
``serverName``); unknown keys are ignored.
"""

from pydantic import AliasChoices, AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from stream_relay.core.config.constants import CANARY_DOMAIN
from stream_relay.models.canonical_event import CanonicalEvent, ExtraField, IngestionSource


def _snake_or_camel(field_name: str) -> AliasChoices:
    return AliasChoices(field_name, to_camel(field_name))


_WIRE_CONFIG = ConfigDict(
    frozen=True,
    extra="ignore",
    populate_by_name=True,
    alias_generator=AliasGenerator(validation_alias=_snake_or_camel),
)


class EventMeta(BaseModel):
    """Envelope metadata attached by the event platform."""

    model_config = _WIRE_CONFIG

    uri: str | None = None
    id: str | None = None
    domain: str | None = None
    stream: str | None = None
    dt: str | None = None
    request_id: str | None = None
    topic: str | None = None
    partition: int | None = None
    offset: int | None = None


class LengthChange(BaseModel):
    model_config = _WIRE_CONFIG

    old: int | None = None
    new: int | None = None


class RevisionChange(BaseModel):
    model_config = _WIRE_CONFIG

    old: int | None = None
    new: int | None = None


class RawStreamEvent(BaseModel):
    """
    One line of the upstream stream, as published by Wikimedia.

    Decode with ``RawStreamEvent.model_validate_json(line)``; a JSON object
    without ``meta`` (or with mistyped fields) raises ``ValidationError``.
    """

    model_config = _WIRE_CONFIG

    schema_uri: str | None = Field(default=None, validation_alias="$schema")
    meta: EventMeta
    id: int | None = None
    event_type: str | None = Field(default=None, validation_alias="type")
    namespace: int | None = None
    title: str | None = None
    title_url: str | None = None
    comment: str | None = None
    timestamp: int | None = None
    user: str | None = None
    bot: bool | None = None
    minor: bool | None = None
    patrolled: bool | None = None
    length: LengthChange | None = None
    revision: RevisionChange | None = None
    server_url: str | None = None
    server_name: str | None = None
    server_script_path: str | None = None
    wiki: str | None = None
    parsedcomment: str | None = None
    notify_url: str | None = None
    log_type: str | None = None
    log_action: str | None = None
    log_id: int | None = None

    def is_canary(self) -> bool:
        """Synthetic liveness events injected by the platform."""
        return self.meta.domain == CANARY_DOMAIN

    def matches_server(self, expected_server: str) -> bool:
        return self.server_name == expected_server

    def summary(self) -> str:
        """One-line human summary, e.g. ``[edit] Foo by Bar (bot: False, wiki: enwiki)``."""
        return (
            f"[{self.event_type or 'unknown'}] "
            f"{self.title or '?'} by {self.user or '?'} "
            f"(bot: {bool(self.bot)}, wiki: {self.wiki or '?'})"
        )

    def _extras(self) -> list[ExtraField]:
        length = self.length or LengthChange()
        revision = self.revision or RevisionChange()
        candidates = [
            ("namespace", self.namespace),
            ("comment", self.comment),
            ("minor", self.minor),
            ("patrolled", self.patrolled),
            ("length_old", length.old),
            ("length_new", length.new),
            ("revision_old", revision.old),
            ("revision_new", revision.new),
            ("server_name", self.server_name),
            ("log_type", self.log_type),
            ("log_action", self.log_action),
            ("meta_id", self.meta.id),
            ("meta_stream", self.meta.stream),
        ]
        return [
            ExtraField(key=key, value=_to_text(value))
            for key, value in candidates
            if value is not None
        ]

    def to_canonical_event(self, source: IngestionSource = IngestionSource.WIKIPEDIA) -> CanonicalEvent:
        """Project onto the queue schema. Absent upstream values stay ``None``."""
        return CanonicalEvent(
            source=source,
            timestamp=self.meta.dt,
            title=self.title,
            user=self.user,
            is_bot=self.bot,
            event_type=self.event_type,
            page_url=self.meta.uri or self.title_url,
            wiki=self.wiki,
            extras=self._extras(),
        )


def _to_text(value) -> str:
    # JSON spelling for booleans so extras read the same as the upstream line
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


__all__ = [
    "EventMeta",
    "LengthChange",
    "RawStreamEvent",
    "RevisionChange",
]
