"""Background queue for learning writes.

Jobs are named coroutine factories so a failed write can be retried with a
fresh coroutine. The worker runs one job at a time; the request path only
ever calls ``submit``.
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from resume_search.config import (
    get_learning_max_attempts,
    get_learning_queue_size,
    get_learning_retry_delay,
)
from resume_search.errors import PersistenceWriteFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LearningJob:
    """A named, retryable write."""

    name: str
    run: Callable[[], Awaitable[object]]


class LearningQueue:
    """Bounded asyncio queue drained by a single worker task."""

    def __init__(
        self,
        *,
        maxsize: int | None = None,
        max_attempts: int | None = None,
        retry_delay: float | None = None,
    ):
        """Initialize the queue. Call start() before jobs are processed."""
        self._queue: asyncio.Queue[LearningJob] = asyncio.Queue(
            maxsize=maxsize if maxsize is not None else get_learning_queue_size()
        )
        self.max_attempts = max(
            1, max_attempts if max_attempts is not None else get_learning_max_attempts()
        )
        self.retry_delay = retry_delay if retry_delay is not None else get_learning_retry_delay()
        self._worker: asyncio.Task[None] | None = None
        self.completed = 0
        self.failed = 0
        self.dropped = 0

    @property
    def running(self) -> bool:
        """True while the worker task is alive."""
        return self._worker is not None and not self._worker.done()

    @property
    def pending(self) -> int:
        """Jobs waiting in the queue."""
        return self._queue.qsize()

    def start(self) -> None:
        """Start the worker task if it is not already running."""
        if self.running:
            return
        self._worker = asyncio.create_task(self._drain(), name="learning-queue")
        logger.debug("Learning queue worker started")

    def submit(self, name: str, run: Callable[[], Awaitable[object]]) -> bool:
        """Enqueue a job without waiting. Returns False if the queue is full."""
        try:
            self._queue.put_nowait(LearningJob(name=name, run=run))
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning("Learning queue full, dropping %s", name)
            return False
        return True

    async def join(self) -> None:
        """Wait until every submitted job has been processed."""
        await self._queue.join()

    async def stop(self, drain_timeout: float = 5.0) -> None:
        """Drain remaining jobs for up to drain_timeout seconds, then cancel the worker."""
        if self._worker is None:
            return
        try:
            await asyncio.wait_for(self._queue.join(), drain_timeout)
        except TimeoutError:
            logger.warning(
                "Learning queue stopped with %d job(s) still pending", self._queue.qsize()
            )
        self._worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None
        logger.debug("Learning queue worker stopped")

    async def _drain(self) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self._run(job)
            finally:
                self._queue.task_done()

    async def _run(self, job: LearningJob) -> None:
        for attempt in range(1, self.max_attempts + 1):
            try:
                await job.run()
            except Exception:
                if attempt == self.max_attempts:
                    self.failed += 1
                    logger.warning(
                        "%s", PersistenceWriteFailed(job.name, attempt), exc_info=True
                    )
                    return
                delay = self.retry_delay * 2 ** (attempt - 1)
                logger.debug("%s failed (attempt %d), retrying in %.2fs", job.name, attempt, delay)
                await asyncio.sleep(delay)
            else:
                self.completed += 1
                return
