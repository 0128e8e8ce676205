"""
Stream Schema Validator

Confirms, once per process and before the first stream connection, that the
configured stream name is offered by the EventStreams service. The list of
valid names is read from the service's OpenAPI capability document:

    paths["/v2/stream/{streams}"].get.parameters[name == "streams"].schema.items.enum

Any failure here is fatal: the process root lets the exception abort startup.
"""

import httpx
from pydantic import ValidationError

from stream_relay.core.config.constants import (
    HEADER_USER_AGENT,
    WIKIMEDIA_SPEC_URL,
    WIKIMEDIA_STREAM_PATH_TEMPLATE,
    Stage,
)
from stream_relay.core.config.settings import get_settings
from stream_relay.core.exceptions import SchemaFetchError, UnknownStreamError
from stream_relay.core.logging.logger import get_logger
from stream_relay.models.streams_spec import StreamsSpec

logger = get_logger(__name__)


class StreamSchemaValidator:
    """
    Validates a stream name against the upstream capability document.

    Usage:
        async with httpx.AsyncClient() as client:
            await StreamSchemaValidator(client).validate("recentchange")
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        spec_url: str = WIKIMEDIA_SPEC_URL,
        user_agent: str | None = None,
    ):
        self._client = http_client
        self._spec_url = spec_url
        self._user_agent = user_agent or get_settings().HTTP_USER_AGENT

    async def fetch_available_streams(self) -> list[str]:
        """
        Download the capability document and extract the stream names.

        Raises:
            SchemaFetchError: Transport failure, non-2xx status, invalid
                JSON/shape, or no enumerated streams in the document
        """
        logger.info("Fetching streams capability document", stage=Stage.VALIDATE_FETCH, url=self._spec_url)

        try:
            response = await self._client.get(
                self._spec_url,
                headers={HEADER_USER_AGENT: self._user_agent},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SchemaFetchError.caused_by(
                e,
                f"Capability document request failed with status {e.response.status_code}",
                endpoint=self._spec_url,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise SchemaFetchError.caused_by(
                e, "Failed to fetch capability document", endpoint=self._spec_url
            ) from e

        try:
            spec = StreamsSpec.model_validate_json(response.content)
        except ValidationError as e:
            raise SchemaFetchError.caused_by(
                e, "Failed to parse capability document", endpoint=self._spec_url
            ) from e

        streams = spec.available_streams()
        if streams is None:
            raise SchemaFetchError(
                "Could not extract available streams from capability document",
                endpoint=self._spec_url,
                path=WIKIMEDIA_STREAM_PATH_TEMPLATE,
            )
        return streams

    async def validate(self, stream_name: str) -> None:
        """
        Raise unless ``stream_name`` is offered upstream.

        Raises:
            SchemaFetchError: The capability document is unusable
            UnknownStreamError: The stream is not in the enumerated list
        """
        try:
            streams = await self.fetch_available_streams()
        except SchemaFetchError as e:
            logger.error("Stream validation failed", stage=Stage.VALIDATE_ERR, **e.log_fields())
            raise

        if stream_name not in streams:
            error = UnknownStreamError(
                f"Stream '{stream_name}' not found. Available: {', '.join(streams)}",
                available_streams=streams,
                endpoint=self._spec_url,
            )
            logger.error("Unknown stream", stage=Stage.VALIDATE_ERR, stream=stream_name, available=streams)
            raise error

        logger.info(f"Stream '{stream_name}' validated successfully", stage=Stage.VALIDATE_OK)
