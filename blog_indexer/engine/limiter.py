"""Bounded task runner capping how many extraction tasks run at once."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from threading import Lock
from typing import Any, Callable, TypeVar

T = TypeVar("T")


class ConcurrencyLimiter:
    """Run submitted callables with at most ``limit`` executing concurrently.

    Excess submissions wait in the executor's FIFO work queue. Each task's
    outcome, result or exception, is delivered only through its own future,
    so one failing task never blocks or fails the tasks queued behind it.
    """

    def __init__(self, limit: int, name: str = "extract") -> None:
        if limit < 1:
            raise ValueError("ConcurrencyLimiter limit must be >= 1")
        self.limit = limit
        self._executor = ThreadPoolExecutor(max_workers=limit, thread_name_prefix=name)
        self._lock = Lock()
        self._running = 0
        self._peak = 0

    @property
    def running(self) -> int:
        with self._lock:
            return self._running

    @property
    def peak(self) -> int:
        with self._lock:
            return self._peak

    def submit(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> "Future[T]":
        return self._executor.submit(self._run, fn, args, kwargs)

    def _run(self, fn: Callable[..., T], args: tuple, kwargs: dict) -> T:
        with self._lock:
            self._running += 1
            self._peak = max(self._peak, self._running)
        try:
            return fn(*args, **kwargs)
        finally:
            with self._lock:
                self._running -= 1

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=not wait)

    def __enter__(self) -> "ConcurrencyLimiter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)


__all__ = ["ConcurrencyLimiter"]
