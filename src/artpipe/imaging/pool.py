"""Processing concurrency layer.

Architecture:
    FastAPI (async) -> asyncio.Semaphore(N) -> ThreadPoolExecutor(N) -> process_image

Requests beyond the semaphore limit queue with a timeout, then get 503. When
profile parallelism is enabled, a second executor renders the thumbnail and
full image of one job side by side; it is kept separate from the job executor
so a job never waits on a slot held by itself.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

    from artpipe.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

SEMAPHORE_TIMEOUT_SECONDS: float = 5.0


class ProcessingPool:
    """Manages the semaphore and thread pools for image processing jobs."""

    def __init__(self, settings: Settings, timeout: float = SEMAPHORE_TIMEOUT_SECONDS) -> None:
        self._timeout = timeout
        self._semaphore = asyncio.Semaphore(settings.max_concurrent)
        self._executor = ThreadPoolExecutor(
            max_workers=settings.max_concurrent,
            thread_name_prefix="image-job",
        )
        self._profile_executor: ThreadPoolExecutor | None = None
        if settings.parallel_profiles:
            self._profile_executor = ThreadPoolExecutor(
                max_workers=settings.max_concurrent * 2,
                thread_name_prefix="image-profile",
            )
        self._active_count: int = 0
        self._queue_depth: int = 0
        self._counter_lock = threading.Lock()

    async def run(self, func: Callable[..., T], *args: object) -> T:
        """Submit a synchronous function to the job thread pool.

        Acquires the semaphore (with timeout), runs the function in the
        executor, then releases.

        Raises:
            TimeoutError: If the semaphore cannot be acquired within the timeout.
        """
        with self._counter_lock:
            self._queue_depth += 1
        try:
            await asyncio.wait_for(self._semaphore.acquire(), timeout=self._timeout)
        finally:
            with self._counter_lock:
                self._queue_depth -= 1

        with self._counter_lock:
            self._active_count += 1
        try:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(self._executor, func, *args)
        finally:
            self._semaphore.release()
            with self._counter_lock:
                self._active_count -= 1

    @property
    def profile_executor(self) -> ThreadPoolExecutor | None:
        """Executor for rendering profiles concurrently, or None when disabled."""
        return self._profile_executor

    @property
    def active_count(self) -> int:
        """Number of currently running jobs."""
        with self._counter_lock:
            return self._active_count

    @property
    def queue_depth(self) -> int:
        """Number of requests waiting for a semaphore slot."""
        with self._counter_lock:
            return self._queue_depth

    def shutdown(self) -> None:
        """Shut down the thread pool executors."""
        self._executor.shutdown(wait=True)
        if self._profile_executor is not None:
            self._profile_executor.shutdown(wait=True)
        logger.info("Processing pool shut down")
