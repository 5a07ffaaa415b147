"""
Best-effort side task queue.

Backfills and TTL refreshes are dispatched here and never awaited by the
request that produced them. A failing task is reported to an error callback
and logged; it is never re-raised into the caller.
"""

import asyncio
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

import structlog

logger = structlog.get_logger(__name__)

CoroutineFactory = Callable[[], Awaitable[Any]]


@dataclass
class SideTask:
    """A unit of best-effort work."""

    name: str
    factory: CoroutineFactory
    context: Dict[str, Any] = field(default_factory=dict)
    task_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


ErrorCallback = Callable[[SideTask, BaseException], None]


class SideTaskQueue:
    """Bounded queue drained by a fixed pool of workers."""

    def __init__(
        self,
        workers: int = 2,
        maxsize: int = 1000,
        on_error: Optional[ErrorCallback] = None,
    ):
        """
        Initialize side task queue.

        Args:
            workers: Number of worker coroutines
            maxsize: Queue capacity; tasks beyond it are dropped
            on_error: Callback invoked with the task and the exception it raised
        """
        self.workers = workers
        self.queue: asyncio.Queue[SideTask] = asyncio.Queue(maxsize=maxsize)
        self.on_error = on_error
        self.stats: Dict[str, int] = defaultdict(int)
        self.running = False
        self._worker_tasks: List[asyncio.Task] = []

    async def start(self) -> None:
        """Start the worker pool."""
        if self.running:
            logger.warning("Side task queue is already running")
            return

        self.running = True
        self._worker_tasks = [
            asyncio.create_task(self._worker(f"side-worker-{i}"))
            for i in range(self.workers)
        ]
        logger.info("Side task queue started", workers=self.workers)

    def submit(self, name: str, factory: CoroutineFactory, **context: Any) -> bool:
        """
        Dispatch a task without waiting for it.

        Returns:
            True if the task was queued, False if it was dropped
        """
        if not self.running:
            logger.warning("Side task dropped, queue not running", task=name, **context)
            self.stats["dropped"] += 1
            return False

        task = SideTask(name=name, factory=factory, context=context)
        try:
            self.queue.put_nowait(task)
        except asyncio.QueueFull:
            logger.warning("Side task dropped, queue full", task=name, **context)
            self.stats["dropped"] += 1
            return False

        self.stats["submitted"] += 1
        return True

    async def join(self) -> None:
        """Wait until every queued task has been processed."""
        await self.queue.join()

    async def stop(self) -> None:
        """Drain outstanding work and stop the workers."""
        if not self.running:
            return

        await self.join()
        self.running = False
        for worker_task in self._worker_tasks:
            worker_task.cancel()
        await asyncio.gather(*self._worker_tasks, return_exceptions=True)
        self._worker_tasks = []
        logger.info("Side task queue stopped", stats=dict(self.stats))

    async def _worker(self, worker_name: str) -> None:
        while True:
            task = await self.queue.get()
            try:
                await task.factory()
                self.stats["completed"] += 1
                logger.debug(
                    "Side task completed",
                    worker=worker_name,
                    task=task.name,
                    **task.context,
                )
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.stats["failed"] += 1
                logger.warning(
                    "Side task failed",
                    worker=worker_name,
                    task=task.name,
                    error=str(e),
                    error_type=type(e).__name__,
                    **task.context,
                )
                if self.on_error is not None:
                    try:
                        self.on_error(task, e)
                    except Exception as callback_error:
                        logger.error(
                            "Side task error callback failed",
                            task=task.name,
                            error=str(callback_error),
                        )
            finally:
                self.queue.task_done()
