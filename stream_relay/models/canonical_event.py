"""
Canonical queue event.

The only contract between the ingestion service and the writer service.
Wire form is flat JSON with camelCase keys:

    {"source": "Wikipedia", "timestamp": "...", "title": "...", "user": "...",
     "isBot": false, "eventType": "edit", "pageUrl": "...", "wiki": "enwiki",
     "extras": [{"key": "namespace", "value": "0"}]}
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class IngestionSource(str, Enum):
    """Upstream system an event was ingested from."""

    WIKIPEDIA = "Wikipedia"
    WIKIDATA = "Wikidata"


class ExtraField(BaseModel):
    """Source-specific key/value pair carried alongside the common fields."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str


class CanonicalEvent(BaseModel):
    """
    Normalized, source-independent event record.

    Optional fields stay ``None`` when upstream did not provide them;
    they are serialized as ``null``, never defaulted.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    source: IngestionSource
    timestamp: str | None = None
    title: str | None = None
    user: str | None = None
    is_bot: bool | None = None
    event_type: str | None = None
    page_url: str | None = None
    wiki: str | None = None
    extras: list[ExtraField] = Field(default_factory=list)

    def to_json(self) -> str:
        """Serialize to the queue wire form."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, data: str | bytes) -> "CanonicalEvent":
        """
        Parse the queue wire form.

        Raises:
            pydantic.ValidationError: If the body is not a valid event
        """
        return cls.model_validate_json(data)
