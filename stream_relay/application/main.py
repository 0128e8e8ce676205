"""
Console entry points.

    stream-relay-ingestion   Wikimedia stream -> queue
    stream-relay-writer      queue -> log
"""

import uvicorn

from stream_relay.core.config.settings import get_settings


def _serve(factory_path: str) -> None:
    settings = get_settings()

    uvicorn.run(
        factory_path,
        factory=True,
        host=settings.app.API_HOST,
        port=settings.app.API_PORT,
        log_level=settings.logging.LOG_LEVEL.lower(),
    )


def run_ingestion() -> None:
    _serve("stream_relay.application.ingestion_app:create_ingestion_app")


def run_writer() -> None:
    _serve("stream_relay.application.writer_app:create_writer_app")
