"""
Subset of the EventStreams OpenAPI capability document.

Only the path ``/v2/stream/{streams}`` and its ``streams`` parameter are
modelled; everything else in the document is ignored.
"""

from pydantic import BaseModel, ConfigDict, Field

from stream_relay.core.config.constants import (
    WIKIMEDIA_STREAM_PATH_TEMPLATE,
    WIKIMEDIA_STREAMS_PARAMETER,
)

_LENIENT = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class StreamsItemSchema(BaseModel):
    model_config = _LENIENT

    item_type: str | None = Field(default=None, alias="type")
    enum_values: list[str] | None = Field(default=None, alias="enum")


class StreamsParameterSchema(BaseModel):
    model_config = _LENIENT

    schema_type: str | None = Field(default=None, alias="type")
    items: StreamsItemSchema | None = None


class StreamsParameter(BaseModel):
    model_config = _LENIENT

    name: str | None = None
    location: str | None = Field(default=None, alias="in")
    param_schema: StreamsParameterSchema | None = Field(default=None, alias="schema")


class StreamsGetOperation(BaseModel):
    model_config = _LENIENT

    parameters: list[StreamsParameter] | None = None


class StreamsPathItem(BaseModel):
    model_config = _LENIENT

    get: StreamsGetOperation | None = None


class StreamsSpec(BaseModel):
    """
    Capability document root.

    Usage:
        spec = StreamsSpec.model_validate_json(response.content)
        streams = spec.available_streams()  # None if the path is missing
    """

    model_config = _LENIENT

    paths: dict[str, StreamsPathItem] | None = None

    def available_streams(self) -> list[str] | None:
        """
        Enumerated stream names, or ``None`` when any step of
        ``paths -> template -> get -> parameters[streams] -> schema.items.enum``
        is missing.
        """
        path_item = (self.paths or {}).get(WIKIMEDIA_STREAM_PATH_TEMPLATE)
        if path_item is None or path_item.get is None:
            return None

        for parameter in path_item.get.parameters or []:
            if parameter.name != WIKIMEDIA_STREAMS_PARAMETER:
                continue
            schema = parameter.param_schema
            if schema is None or schema.items is None:
                return None
            return schema.items.enum_values

        return None
