"""Execution contexts for background work and result delivery.

The view-model never decides where its work runs. It receives a
:class:`SchedulerProvider` and dispatches repository calls on ``io()`` and
state delivery on ``ui()``. Tests pass :meth:`SchedulerProvider.immediate`
so both run inline.
"""

import logging
import queue
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor

logger = logging.getLogger(__name__)

Task = Callable[[], None]


class Scheduler(ABC):
    """Runs tasks on some execution context."""

    @abstractmethod
    def schedule(self, task: Task) -> None:
        """Queue or run a task.

        Args:
            task: Zero-argument callable.
        """


class ImmediateScheduler(Scheduler):
    """Runs every task inline on the calling thread."""

    def schedule(self, task: Task) -> None:
        task()


class ThreadPoolScheduler(Scheduler):
    """Runs tasks on a thread pool."""

    def __init__(self, max_workers: int = 4, thread_name_prefix: str = "gh-search-io") -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=thread_name_prefix,
        )

    def schedule(self, task: Task) -> None:
        future = self._executor.submit(task)
        future.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(future: Future[None]) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Scheduled task failed: %s", exc, exc_info=exc)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


class MainThreadScheduler(Scheduler):
    """Queues tasks for a single consuming thread, like a UI event loop.

    Producers call :meth:`schedule` from any thread; the owning thread
    drains the queue with :meth:`run_pending` or :meth:`run_until`.
    """

    def __init__(self) -> None:
        self._tasks: queue.Queue[Task] = queue.Queue()

    def schedule(self, task: Task) -> None:
        self._tasks.put(task)

    @property
    def pending(self) -> int:
        return self._tasks.qsize()

    def run_pending(self) -> int:
        """Run every task queued so far without blocking.

        Returns:
            Number of tasks run.
        """
        ran = 0
        while True:
            try:
                task = self._tasks.get_nowait()
            except queue.Empty:
                return ran
            task()
            ran += 1

    def run_until(self, predicate: Callable[[], bool], timeout: float | None = None) -> bool:
        """Run queued tasks as they arrive until ``predicate`` holds.

        Args:
            predicate: Checked before waiting and after each task.
            timeout: Give up after this many seconds. None waits forever.

        Returns:
            True if the predicate became true, False on timeout.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while not predicate():
            remaining = None if deadline is None else deadline - time.monotonic()
            if remaining is not None and remaining <= 0:
                return False
            try:
                task = self._tasks.get(timeout=remaining)
            except queue.Empty:
                return False
            task()
        return True


class SchedulerProvider:
    """Pair of schedulers: ``io`` for work, ``ui`` for delivering results."""

    def __init__(self, io: Scheduler, ui: Scheduler) -> None:
        self._io = io
        self._ui = ui

    @classmethod
    def immediate(cls) -> "SchedulerProvider":
        """Both schedulers run inline, for deterministic tests."""
        scheduler = ImmediateScheduler()
        return cls(io=scheduler, ui=scheduler)

    def io(self) -> Scheduler:
        return self._io

    def ui(self) -> Scheduler:
        return self._ui
