"""Fire-and-forget write workers."""

import asyncio
import zlib
from typing import Awaitable, Callable, Optional

from .logger import logger

JobFactory = Callable[[], Awaitable[object]]

# Shard key for writes that do not belong to a single player
GLOBAL_KEY = "__server__"


class WriteQueue:
    """Runs database writes off the caller's path.

    Jobs are routed to one of ``workers`` shards by key. Each shard runs its jobs
    one at a time in submission order, so writes for one player never overtake
    each other, while different players are written in parallel. A failing job is
    logged and dropped; the jobs after it still run.
    """

    def __init__(self, workers: int = 4, queue_size: int = 1000):
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self.workers = workers
        self.queue_size = queue_size
        self._queues: list[asyncio.Queue[Optional[tuple[JobFactory, str]]]] = []
        self._tasks: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    def start(self) -> None:
        """Start the worker tasks. Must be called from the running event loop."""
        if self._tasks:
            return
        self._queues = [asyncio.Queue(maxsize=self.queue_size) for _ in range(self.workers)]
        self._tasks = [
            asyncio.create_task(self._worker(i, queue), name=f"online-monitor-writer-{i}")
            for i, queue in enumerate(self._queues)
        ]
        logger.info(f"Write queue started with {self.workers} workers")

    def submit(self, key: str, job_factory: JobFactory, description: str = "") -> bool:
        """Queue a write without waiting for it.

        Args:
            key: Shard key; jobs with the same key run in submission order
            job_factory: Called by the worker to create the coroutine to await
            description: Shown in log lines about this job

        Returns:
            False if the job was dropped (queue stopped or shard full)
        """
        if not self._tasks:
            logger.warning(f"Write queue is not running, dropping job: {description}")
            return False
        queue = self._queues[self._shard(key)]
        try:
            queue.put_nowait((job_factory, description))
        except asyncio.QueueFull:
            logger.warning(f"Write queue shard is full, dropping job: {description}")
            return False
        return True

    async def join(self) -> None:
        """Wait until every queued job has finished."""
        for queue in self._queues:
            await queue.join()

    async def stop(self) -> None:
        """Finish the queued jobs, then stop the workers."""
        if not self._tasks:
            return
        await self.join()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        self._queues = []
        logger.info("Write queue stopped")

    def _shard(self, key: str) -> int:
        # Stable across processes, unlike hash()
        return zlib.crc32(key.encode()) % self.workers

    async def _worker(self, index: int, queue: asyncio.Queue) -> None:
        while True:
            job_factory, description = await queue.get()
            try:
                await job_factory()
            except Exception as e:
                logger.error(
                    f"Write job failed on worker {index} ({description}): {e}",
                    exc_info=True,
                )
            finally:
                queue.task_done()
