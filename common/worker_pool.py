"""
Bounded thread worker pool with caller-runs backpressure and a join barrier.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, Future, wait
from typing import Callable, List, Optional

from common.slot_semaphore import SlotSemaphore


class WorkerPool:
    """Fixed-size thread pool holding at most ``size + queue_size`` tasks.

    When every worker is busy and the queue is full, ``submit`` runs the task
    on the calling thread instead, so no task is dropped and the queue never
    grows past its bound.
    """

    def __init__(
        self,
        size: int,
        queue_size: Optional[int] = None,
        name: str = "worker",
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the worker pool.

        Args:
            size: Number of worker threads
            queue_size: Number of tasks that may wait for a worker (default: size)
            name: Prefix for worker thread names
            logger: Logger to report on (default: module logger)
        """
        if size < 1:
            raise ValueError(f"WorkerPool size must be at least 1, got {size}")
        self.size = size
        self.queue_size = size if queue_size is None else queue_size
        self.name = name
        self.logger = logger or logging.getLogger(__name__)

        self._executor = ThreadPoolExecutor(max_workers=size, thread_name_prefix=name)
        self._slots = SlotSemaphore(self.size + self.queue_size)
        self._futures: List[Future] = []
        self._active = 0
        self._lock = threading.Lock()
        self._is_shutdown = False

        # Statistics
        self.submitted = 0
        self.caller_runs = 0

        self.logger.debug(
            f"Initialized WorkerPool {name} with {size} workers, queue bound {self.queue_size}"
        )

    def submit(self, fn: Callable[[], None]) -> Optional[Future]:
        """Schedule a task on the pool, or run it here when the pool is full.

        Args:
            fn: Callable taking no arguments

        Returns:
            The task's Future, or None if it ran on the calling thread
        """
        if self._is_shutdown:
            raise RuntimeError(f"WorkerPool {self.name} is shut down")

        self.submitted += 1
        if not self._slots.try_acquire():
            self.caller_runs += 1
            self.logger.debug(f"WorkerPool {self.name} saturated, running task on caller thread")
            self._run(fn)
            return None

        try:
            future = self._executor.submit(self._run_in_slot, fn)
        except Exception:
            self._slots.release()
            raise
        self._futures.append(future)
        return future

    def _run_in_slot(self, fn: Callable[[], None]) -> None:
        try:
            self._run(fn)
        finally:
            self._slots.release()

    def _run(self, fn: Callable[[], None]) -> None:
        with self._lock:
            self._active += 1
        try:
            fn()
        except Exception as e:
            self.logger.error(f"WorkerPool {self.name} task failed: {e}", exc_info=True)
        finally:
            with self._lock:
                self._active -= 1

    def active_count(self) -> int:
        """Number of tasks currently executing."""
        with self._lock:
            return self._active

    def pending_count(self) -> int:
        """Number of submitted tasks that have not completed yet."""
        return self._slots.in_flight()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Block until every submitted task has completed.

        Args:
            timeout: Maximum time to wait (None = wait forever)

        Returns:
            True if all tasks completed, False on timeout
        """
        return self._slots.wait_idle(timeout)

    def shutdown(self, timeout: Optional[float] = None) -> List[Future]:
        """Stop accepting tasks and wait a bounded time for the pool to drain.

        Running tasks are never interrupted; if they outlive the timeout the
        shutdown proceeds without them.

        Args:
            timeout: Maximum time to wait for outstanding tasks (None = wait forever)

        Returns:
            Futures of tasks that had not finished when the wait ended
        """
        self._is_shutdown = True
        _, not_done = wait(self._futures, timeout=timeout)
        self._executor.shutdown(wait=False)

        if not_done:
            self.logger.warning(
                f"WorkerPool {self.name} shut down with {len(not_done)} tasks still running"
            )
        else:
            self.logger.debug(
                f"WorkerPool {self.name} drained: {self.submitted} tasks, "
                f"{self.caller_runs} ran on caller thread"
            )
        return list(not_done)

    def __repr__(self) -> str:
        return (
            f"WorkerPool(name={self.name!r}, size={self.size}, queue_size={self.queue_size}, "
            f"active={self.active_count()}, pending={self.pending_count()})"
        )
