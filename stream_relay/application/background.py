"""
Background task helpers for the service lifespans.

Each service runs exactly one long-lived task (stream reader or queue
consumer) next to the HTTP server. The handle is retained so shutdown can
cancel it and wait for it to unwind.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

from stream_relay.core.config.constants import Stage
from stream_relay.core.logging.logger import get_logger

logger = get_logger(__name__)


def _log_task_exit(task: asyncio.Task) -> None:
    if task.cancelled():
        logger.info("Background task cancelled", stage=Stage.APP_SHUTDOWN, task=task.get_name())
        return

    error = task.exception()
    if error is not None:
        logger.critical(
            "Background task crashed",
            stage=Stage.APP_SHUTDOWN,
            task=task.get_name(),
            error=str(error),
            error_type=type(error).__name__,
        )
    else:
        logger.critical("Background task exited", stage=Stage.APP_SHUTDOWN, task=task.get_name())


def start_background_task(coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
    """Schedule ``coro`` on the running loop and log how it ends."""
    task = asyncio.create_task(coro, name=name)
    task.add_done_callback(_log_task_exit)
    logger.info("Background task started", stage=Stage.APP_STARTUP, task=name)
    return task


async def stop_background_task(task: asyncio.Task | None) -> None:
    """Cancel ``task`` and wait until it has finished unwinding."""
    if task is None:
        return
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
