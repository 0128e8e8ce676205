#!/usr/bin/env python3
"""
Ingestion Service Entry Point

Startup order:
    1. Logging
    2. StreamConfig / QueueConfig and the queue backend (fatal on error)
    3. HTTP client, publisher, validator, reader
    4. Stream validation against the capability document (fatal on error)
    5. Stream reader started as a background task

The HTTP server only exposes /health and /metrics.
"""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from stream_relay.application.api.routes.health import router as health_router
from stream_relay.application.background import start_background_task, stop_background_task
from stream_relay.core.config.constants import Stage
from stream_relay.core.config.settings import QueueConfig, StreamConfig, get_settings
from stream_relay.core.exceptions import RelayError
from stream_relay.core.logging.logger import get_logger, setup_logging
from stream_relay.infrastructure.message_queue.factory import MessageQueueFactory
from stream_relay.ingestion.queue_publisher import QueuePublisher
from stream_relay.ingestion.stream_reader import StreamReader
from stream_relay.ingestion.stream_validator import StreamSchemaValidator

logger = get_logger(__name__)


# ============================================================================
# Application Lifespan
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage ingestion lifecycle (startup and shutdown).
    """
    settings = get_settings()

    # Setup logging
    setup_logging(log_level=settings.logging.LOG_LEVEL, log_format=settings.logging.LOG_FORMAT)

    logger.info(
        "Starting ingestion service",
        stage=Stage.APP_STARTUP,
        environment=settings.app.ENVIRONMENT,
        version=settings.app.APP_VERSION,
    )

    try:
        stream_config = StreamConfig.from_env()
        queue_config = QueueConfig.from_env()
        queue = MessageQueueFactory.from_url(queue_config.SQS_QUEUE_URL, settings)
    except RelayError as e:
        logger.critical("Invalid configuration", stage=Stage.APP_STARTUP, **e.log_fields())
        raise

    logger.info(
        f"Wikipedia stream config loaded: language={stream_config.WIKI_LANG}, stream={stream_config.WIKI_STREAM}",
        stage=Stage.APP_STARTUP,
    )

    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(30.0, connect=settings.HTTP_CONNECT_TIMEOUT),
        follow_redirects=True,
    )
    reader_task = None

    try:
        await queue.initialize()

        publisher = QueuePublisher(queue)
        validator = StreamSchemaValidator(http_client)
        reader = StreamReader(stream_config, http_client, publisher)

        await validator.validate(stream_config.WIKI_STREAM)

        reader_task = start_background_task(reader.consume(), name="stream-reader")
        app.state.reader_task = reader_task

        logger.info("Application startup complete", stage=Stage.APP_STARTUP)

        yield

    except RelayError as e:
        logger.critical("Startup failed", stage=Stage.APP_STARTUP, **e.log_fields())
        raise

    finally:
        logger.info("Shutting down application", stage=Stage.APP_SHUTDOWN)

        await stop_background_task(reader_task)
        await http_client.aclose()
        await queue.close()

        logger.info("Application shutdown complete", stage=Stage.APP_SHUTDOWN)


# ============================================================================
# Application Factory
# ============================================================================


def create_ingestion_app() -> FastAPI:
    """
    Create and configure the ingestion FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.app.APP_NAME} - Ingestion",
        version=settings.app.APP_VERSION,
        description="Relays Wikimedia EventStreams events into a message queue",
        lifespan=lifespan,
    )
    app.include_router(health_router)
    return app
