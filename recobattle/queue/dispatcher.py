"""Background dispatcher for ASR processing.

Uploads are accepted on the request path and handed to a bounded
in-process queue. A fixed pool of worker tasks drains the queue and runs
the processing function for each upload, so the request never waits on
the ASR provider. A full queue makes submit() wait (backpressure).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from recobattle.asr.interface import ASREngine
from recobattle.models import AudioFile

logger = logging.getLogger(__name__)

ProcessFn = Callable[[AudioFile, ASREngine, bytes], Awaitable[Any]]


@dataclass
class ProcessingTask:
    """One accepted upload waiting for ASR processing."""

    file: AudioFile
    engine: ASREngine
    audio: bytes = field(repr=False)


class ProcessingDispatcher:
    """Bounded queue plus a pool of asyncio worker tasks.

    Args:
        worker_count: Number of concurrent processing workers.
        queue_size: Maximum number of queued tasks (0 means unbounded).
    """

    def __init__(self, worker_count: int = 4, queue_size: int = 100) -> None:
        if worker_count < 1:
            raise ValueError("worker_count must be at least 1")
        self.worker_count = worker_count
        self._queue: asyncio.Queue[ProcessingTask] = asyncio.Queue(maxsize=queue_size)
        self._workers: list[asyncio.Task[None]] = []
        self._accepting = False

    @property
    def running(self) -> bool:
        return bool(self._workers)

    @property
    def accepting(self) -> bool:
        """Whether submit() currently takes new work."""
        return self._accepting

    def pending(self) -> int:
        """Number of tasks waiting in the queue."""
        return self._queue.qsize()

    def start(self, process_fn: ProcessFn) -> None:
        """Spawn the worker pool.

        Args:
            process_fn: Async callable(file, engine, audio) run per task.
        """
        if self._workers:
            raise RuntimeError("Dispatcher already started")
        self._accepting = True
        self._workers = [
            asyncio.create_task(self._worker(i, process_fn), name=f"asr-worker-{i}")
            for i in range(self.worker_count)
        ]
        logger.info("Dispatcher started with %d workers", self.worker_count)

    async def submit(self, task: ProcessingTask) -> None:
        """Queue an upload for processing; waits while the queue is full.

        Raises:
            RuntimeError: If the dispatcher is not accepting work.
        """
        if not self._accepting:
            raise RuntimeError("Dispatcher is not accepting work")
        await self._queue.put(task)
        logger.debug(
            "Queued file for processing",
            extra={"file_id": task.file.file_id, "asr": task.file.asr},
        )

    async def _worker(self, index: int, process_fn: ProcessFn) -> None:
        """Process queued tasks until cancelled."""
        while True:
            task = await self._queue.get()
            try:
                await process_fn(task.file, task.engine, task.audio)
            except Exception:
                # Terminal for this job only
                logger.error(
                    "Processing failed in worker %d",
                    index,
                    extra={"file_id": task.file.file_id, "asr": task.file.asr},
                    exc_info=True,
                )
            finally:
                self._queue.task_done()

    def stop(self) -> None:
        """Stop accepting new tasks. Queued tasks are still processed."""
        self._accepting = False
        logger.info("Dispatcher stopping, %d tasks queued", self._queue.qsize())

    async def join(self, timeout: float | None = None) -> bool:
        """Wait for the queue to drain.

        Returns:
            True if every queued task finished, False on timeout.
        """
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except TimeoutError:
            return False
        return True

    async def cancel(self) -> None:
        """Cancel all workers and wait for them to exit.

        In-flight jobs abort at their next await and keep whatever status
        was last persisted.
        """
        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._accepting = False

    async def shutdown(self, timeout: float) -> bool:
        """Stop, drain for up to `timeout` seconds, then cancel.

        Returns:
            True if the queue drained before the timeout.
        """
        self.stop()
        drained = await self.join(timeout)
        if not drained:
            logger.warning(
                "Shutdown timeout (%.1fs) exceeded, cancelling in-flight jobs",
                timeout,
            )
        await self.cancel()
        return drained
