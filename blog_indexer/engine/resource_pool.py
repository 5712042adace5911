"""Fixed-size pool of expensive render resources shared by extraction tasks."""

from __future__ import annotations

from collections import deque
from contextlib import contextmanager
from threading import Condition
from typing import Callable, Deque, Dict, Generic, Iterator, List, TypeVar

import structlog

R = TypeVar("R")


class PoolInitializationError(RuntimeError):
    """Raised when the pool cannot create every resource up front."""


class PoolClosedError(RuntimeError):
    """Raised when acquiring from a pool that has been shut down."""


def _close_resource(resource: object) -> None:
    close = getattr(resource, "close", None)
    if callable(close):
        close()


class ResourcePool(Generic[R]):
    """Hand out resources exclusively; block callers while all are checked out."""

    def __init__(
        self,
        factory: Callable[[], R],
        closer: Callable[[R], None] | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self._factory = factory
        self._closer = closer or _close_resource
        self.logger = logger or structlog.get_logger("blog_indexer.resource_pool")
        self._condition = Condition()
        self._resources: List[R] = []
        self._available: Deque[R] = deque()
        self._checked_out: Dict[int, R] = {}
        self._closed = False

    @property
    def size(self) -> int:
        with self._condition:
            return len(self._resources)

    @property
    def available_count(self) -> int:
        with self._condition:
            return len(self._available)

    @property
    def checked_out_count(self) -> int:
        with self._condition:
            return len(self._checked_out)

    def initialize(self, size: int) -> None:
        if size < 1:
            raise ValueError("Pool size must be >= 1")
        with self._condition:
            if self._resources:
                raise RuntimeError("ResourcePool is already initialised")
        self.logger.info("pool_initialising", size=size)
        created: list[R] = []
        try:
            for _ in range(size):
                created.append(self._factory())
        except Exception as exc:
            self.logger.error("pool_initialisation_failed", created=len(created), error=str(exc))
            for resource in created:
                self._safe_close(resource)
            raise PoolInitializationError(
                f"Failed to create resource {len(created) + 1}/{size}: {exc}"
            ) from exc
        with self._condition:
            self._resources = created
            self._available = deque(created)
            self._checked_out = {}
            self._closed = False
            self._condition.notify_all()

    def acquire(self, timeout: float | None = None) -> R:
        with self._condition:
            ready = self._condition.wait_for(
                lambda: self._closed or bool(self._available), timeout=timeout
            )
            if self._closed:
                raise PoolClosedError("ResourcePool has been shut down")
            if not ready:
                raise TimeoutError(f"No resource became available within {timeout}s")
            resource = self._available.popleft()
            self._checked_out[id(resource)] = resource
            return resource

    def release(self, resource: R) -> None:
        with self._condition:
            if self._checked_out.pop(id(resource), None) is None:
                raise ValueError("Resource is not checked out from this pool")
            if self._closed:
                return
            self._available.append(resource)
            self._condition.notify()

    @contextmanager
    def lease(self, timeout: float | None = None) -> Iterator[R]:
        resource = self.acquire(timeout=timeout)
        try:
            yield resource
        finally:
            self.release(resource)

    def shutdown_all(self) -> None:
        with self._condition:
            if self._closed and not self._resources:
                return
            resources = list(self._resources)
            self._closed = True
            self._resources = []
            self._available.clear()
            self._condition.notify_all()
        for resource in resources:
            self._safe_close(resource)
        self.logger.info("pool_shutdown", closed=len(resources))

    def _safe_close(self, resource: R) -> None:
        try:
            self._closer(resource)
        except Exception as exc:  # noqa: BLE001
            self.logger.warning("resource_close_failed", error=str(exc))


__all__ = ["PoolClosedError", "PoolInitializationError", "ResourcePool"]
