#!/usr/bin/env python3
"""
Writer Service Entry Point

Startup order:
    1. Logging
    2. QueueConfig and the queue backend (fatal on error)
    3. Queue initialization + consumer
    4. Consumer started as a background task
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from stream_relay.application.api.routes.health import router as health_router
from stream_relay.application.background import start_background_task, stop_background_task
from stream_relay.core.config.constants import Stage
from stream_relay.core.config.settings import QueueConfig, get_settings
from stream_relay.core.exceptions import RelayError
from stream_relay.core.logging.logger import get_logger, setup_logging
from stream_relay.infrastructure.message_queue.factory import MessageQueueFactory
from stream_relay.writer.queue_consumer import QueueConsumer

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage writer lifecycle (startup and shutdown).
    """
    settings = get_settings()

    setup_logging(log_level=settings.logging.LOG_LEVEL, log_format=settings.logging.LOG_FORMAT)

    logger.info(
        "Starting writer service",
        stage=Stage.APP_STARTUP,
        environment=settings.app.ENVIRONMENT,
        version=settings.app.APP_VERSION,
    )

    try:
        queue_config = QueueConfig.from_env()
        queue = MessageQueueFactory.from_url(queue_config.SQS_QUEUE_URL, settings)
    except RelayError as e:
        logger.critical("Invalid configuration", stage=Stage.APP_STARTUP, **e.log_fields())
        raise

    consumer_task = None

    try:
        await queue.initialize()

        consumer = QueueConsumer(queue)
        consumer_task = start_background_task(consumer.consume(), name="queue-consumer")
        app.state.consumer_task = consumer_task

        logger.info("Application startup complete", stage=Stage.APP_STARTUP)

        yield

    finally:
        logger.info("Shutting down application", stage=Stage.APP_SHUTDOWN)

        await stop_background_task(consumer_task)
        await queue.close()

        logger.info("Application shutdown complete", stage=Stage.APP_SHUTDOWN)


def create_writer_app() -> FastAPI:
    """
    Create and configure the writer FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.app.APP_NAME} - Writer",
        version=settings.app.APP_VERSION,
        description="Consumes canonical events from the message queue",
        lifespan=lifespan,
    )
    app.include_router(health_router)
    return app
