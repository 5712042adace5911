from __future__ import annotations

import threading

import pytest

from blog_indexer.engine import PoolClosedError, PoolInitializationError, ResourcePool


def test_pool_hands_out_each_resource_exclusively(resource_factory) -> None:
    pool = ResourcePool(resource_factory)
    pool.initialize(2)
    first = pool.acquire()
    second = pool.acquire()
    assert first is not second
    assert pool.available_count == 0
    assert pool.checked_out_count == 2
    with pytest.raises(TimeoutError):
        pool.acquire(timeout=0.05)
    pool.release(first)
    assert pool.acquire(timeout=0.05) is first
    pool.shutdown_all()


def test_acquire_blocks_until_release(resource_factory) -> None:
    pool = ResourcePool(resource_factory)
    pool.initialize(1)
    held = pool.acquire()
    acquired: list[object] = []
    waiting = threading.Event()

    def worker() -> None:
        waiting.set()
        acquired.append(pool.acquire(timeout=2))

    thread = threading.Thread(target=worker)
    thread.start()
    waiting.wait(timeout=1)
    assert not acquired
    pool.release(held)
    thread.join(timeout=2)
    assert acquired == [held]
    pool.shutdown_all()


def test_release_rejects_foreign_or_double_release(resource_factory) -> None:
    pool = ResourcePool(resource_factory)
    pool.initialize(1)
    with pytest.raises(ValueError):
        pool.release(object())
    resource = pool.acquire()
    pool.release(resource)
    with pytest.raises(ValueError):
        pool.release(resource)
    pool.shutdown_all()


def test_lease_returns_resource_on_error(resource_factory) -> None:
    pool = ResourcePool(resource_factory)
    pool.initialize(1)
    with pytest.raises(RuntimeError):
        with pool.lease():
            raise RuntimeError("render failed")
    assert pool.available_count == 1
    pool.shutdown_all()


def test_initialize_fails_fast_and_closes_created(failing_resource_factory) -> None:
    factory = failing_resource_factory(2)
    pool = ResourcePool(factory)
    with pytest.raises(PoolInitializationError):
        pool.initialize(3)
    assert len(factory.created) == 1
    assert factory.created[0].closed
    assert pool.size == 0


def test_initialize_validates_size(resource_factory) -> None:
    pool = ResourcePool(resource_factory)
    with pytest.raises(ValueError):
        pool.initialize(0)
    pool.initialize(1)
    with pytest.raises(RuntimeError):
        pool.initialize(1)
    pool.shutdown_all()


def test_shutdown_closes_checked_out_resources(resource_factory) -> None:
    pool = ResourcePool(resource_factory)
    pool.initialize(2)
    held = pool.acquire()
    pool.shutdown_all()
    assert all(resource.closed for resource in resource_factory.created)
    with pytest.raises(PoolClosedError):
        pool.acquire(timeout=0.05)
    pool.release(held)
    assert pool.available_count == 0
    pool.shutdown_all()


def test_shutdown_wakes_blocked_waiters(resource_factory) -> None:
    pool = ResourcePool(resource_factory)
    pool.initialize(1)
    pool.acquire()
    errors: list[BaseException] = []

    def worker() -> None:
        try:
            pool.acquire(timeout=2)
        except PoolClosedError as exc:
            errors.append(exc)

    thread = threading.Thread(target=worker)
    thread.start()
    pool.shutdown_all()
    thread.join(timeout=2)
    assert len(errors) == 1
