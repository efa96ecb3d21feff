"""Bounded fire-and-forget execution for derived-state pipelines.

Callers never block on submitted work. Failures are logged and counted
instead of propagating, and submissions beyond the pending bound are
rejected (and counted) rather than queued indefinitely.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class DispatchStats:
    """Counters describing background task outcomes."""

    submitted: int = 0
    succeeded: int = 0
    failed: int = 0
    rejected: int = 0

    @property
    def pending(self) -> int:
        return self.submitted - self.succeeded - self.failed


class BackgroundDispatcher:
    """Runs tasks on a small thread pool with a bounded backlog.

    Args:
        max_workers: Worker threads.
        max_pending: Submitted-but-unfinished tasks allowed at once.
    """

    def __init__(self, max_workers: int = 2, max_pending: int = 64) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, max_workers), thread_name_prefix="council-bg"
        )
        self._slots = threading.BoundedSemaphore(max(1, max_pending))
        self._lock = threading.Lock()
        self._futures: set[Future] = set()
        self._stats = DispatchStats()
        self._closed = False

    @property
    def stats(self) -> DispatchStats:
        """A snapshot of the counters."""
        with self._lock:
            return DispatchStats(**vars(self._stats))

    def submit(self, name: str, fn: Callable[..., Any], *args: Any) -> Future | None:
        """Schedule ``fn(*args)`` without waiting for it.

        Args:
            name: Label used in logs.
            fn: Callable to run on a worker thread.
            *args: Positional arguments for ``fn``.

        Returns:
            The task's Future, or None if the task was rejected.
        """
        if self._closed or not self._slots.acquire(blocking=False):
            with self._lock:
                self._stats.rejected += 1
            logger.warning("Background queue full or closed; dropped task %s", name)
            return None

        with self._lock:
            self._stats.submitted += 1
        try:
            future = self._executor.submit(self._run, name, fn, args)
        except RuntimeError:
            # Executor shut down after the closed check.
            self._slots.release()
            with self._lock:
                self._stats.submitted -= 1
                self._stats.rejected += 1
            logger.warning("Background dispatcher closed; dropped task %s", name)
            return None

        with self._lock:
            self._futures.add(future)
        future.add_done_callback(self._forget)
        return future

    def _run(self, name: str, fn: Callable[..., Any], args: tuple) -> Any:
        try:
            result = fn(*args)
        except Exception:
            with self._lock:
                self._stats.failed += 1
            logger.exception("Background task %s failed", name)
            return None
        else:
            with self._lock:
                self._stats.succeeded += 1
            logger.debug("Background task %s finished", name)
            return result
        finally:
            self._slots.release()

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._futures.discard(future)

    def join(self, timeout: float | None = None) -> bool:
        """Wait for tasks submitted so far.

        Returns:
            True if every task finished within ``timeout``.
        """
        with self._lock:
            futures = set(self._futures)
        _, not_done = wait_futures(futures, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting tasks and optionally wait for running ones."""
        self._closed = True
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "BackgroundDispatcher":
        return self

    def __exit__(self, *args: Any) -> None:
        self.shutdown()
