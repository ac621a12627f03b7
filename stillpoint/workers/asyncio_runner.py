from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from stillpoint.db.session import dispose_engine

T = TypeVar("T")

logger = structlog.get_logger("stillpoint.workers")


async def _run_job(job_name: str, job: Callable[[], Awaitable[T]]) -> T:
    # asyncpg connections are bound to the loop that opened them; each job gets a fresh loop and pool.
    await dispose_engine()
    started = time.monotonic()
    try:
        with structlog.contextvars.bound_contextvars(job=job_name):
            result = await job()
            logger.info("worker_job_finished", duration_ms=int((time.monotonic() - started) * 1000))
            return result
    finally:
        await dispose_engine()


def run_async_job(job_name: str, job: Callable[[], Awaitable[T]]) -> T:
    """Runs a coroutine factory to completion from a synchronous Celery task."""
    return asyncio.run(_run_job(job_name, job))
