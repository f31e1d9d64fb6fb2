from __future__ import annotations

import itertools
import logging
import queue
import threading
from concurrent.futures import Future
from typing import Any, Callable, Optional

from querybridge.packages.common.querybridge_common.config import Settings
from querybridge.packages.common.querybridge_common.errors import ExecutionError, WorkerPoolSaturated

_STOP = None


class QueryWorkerPool:
    """
    Bounded, dynamically sized pool of statement threads.

    Threads are started on demand and exit after `keep_alive` seconds
    without work, so an idle pool holds none. At most `max_workers`
    statements run at once and at most `queue_size` more may wait; further
    submissions are rejected instead of queued.
    """

    def __init__(
        self,
        *,
        max_workers: int = 1000,
        queue_size: int = 0,
        keep_alive: float = 60.0,
        thread_name_prefix: str = "jdbc-query-executor",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1.")
        if queue_size < 0:
            raise ValueError("queue_size must not be negative.")
        if keep_alive <= 0:
            raise ValueError("keep_alive must be positive.")
        self.max_workers = max_workers
        self.queue_size = queue_size
        self.keep_alive = keep_alive
        self._thread_name_prefix = thread_name_prefix
        self._work: queue.SimpleQueue = queue.SimpleQueue()
        self._slots = threading.BoundedSemaphore(max_workers + queue_size)
        # one permit per worker waiting for work
        self._idle = threading.Semaphore(0)
        self._workers: set[threading.Thread] = set()
        self._thread_ids = itertools.count()
        self._in_flight = 0
        self._lock = threading.Lock()
        self._closed = False
        self._logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_settings(cls, settings: Settings) -> QueryWorkerPool:
        return cls(
            max_workers=settings.QUERY_WORKER_MAX_THREADS,
            queue_size=settings.QUERY_WORKER_QUEUE_SIZE,
            keep_alive=settings.QUERY_WORKER_KEEP_ALIVE,
            thread_name_prefix=settings.QUERY_WORKER_THREAD_PREFIX,
        )

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def worker_count(self) -> int:
        with self._lock:
            return len(self._workers)

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        if not self._slots.acquire(blocking=False):
            raise WorkerPoolSaturated(
                f"Query worker pool is saturated ({self.max_workers} running, {self.queue_size} queued)."
            )
        future: Future = Future()
        with self._lock:
            if self._closed:
                self._slots.release()
                raise ExecutionError("Query worker pool is shut down.")
            self._in_flight += 1
            self._work.put((future, fn, args))
            if not self._idle.acquire(blocking=False) and len(self._workers) < self.max_workers:
                self._spawn_worker()
        future.add_done_callback(self._on_done)
        return future

    def _spawn_worker(self) -> None:
        thread = threading.Thread(
            target=self._worker,
            name=f"{self._thread_name_prefix}-{next(self._thread_ids)}",
            daemon=True,
        )
        self._workers.add(thread)
        thread.start()

    def _worker(self) -> None:
        current = threading.current_thread()
        while True:
            try:
                item = self._work.get(timeout=self.keep_alive)
            except queue.Empty:
                with self._lock:
                    # no permit left means a submitter counted on this thread
                    if self._idle.acquire(blocking=False):
                        self._workers.discard(current)
                        return
                continue

            if item is _STOP:
                with self._lock:
                    self._workers.discard(current)
                return

            future, fn, args = item
            if future.set_running_or_notify_cancel():
                try:
                    result = fn(*args)
                except Exception as exc:
                    future.set_exception(exc)
                else:
                    future.set_result(result)
            self._idle.release()

    def _on_done(self, _: Future) -> None:
        with self._lock:
            self._in_flight -= 1
        self._slots.release()

    def shutdown(self, *, wait: bool = True, cancel_futures: bool = False) -> None:
        with self._lock:
            self._closed = True
            workers = list(self._workers)
        self._logger.debug("Shutting down query worker pool (in_flight=%s)", self.in_flight)

        if cancel_futures:
            while True:
                try:
                    item = self._work.get_nowait()
                except queue.Empty:
                    break
                if item is not _STOP:
                    item[0].cancel()

        for _ in workers:
            self._work.put(_STOP)
        if wait:
            for thread in workers:
                if thread is not threading.current_thread():
                    thread.join()

    def __enter__(self) -> QueryWorkerPool:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown(wait=True, cancel_futures=True)
