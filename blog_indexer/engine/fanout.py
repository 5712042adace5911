"""Run independent calls concurrently and collect a result-or-error for each."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Generic, Mapping, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class Settled(Generic[T]):
    name: str
    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def gather_settled(
    calls: Mapping[str, Callable[[], T]], max_workers: int | None = None
) -> list[Settled[T]]:
    """Execute every call, never raising; results keep the mapping's order."""

    if not calls:
        return []
    workers = max_workers or len(calls)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fanout") as executor:
        futures = {name: executor.submit(call) for name, call in calls.items()}
        settled: list[Settled[T]] = []
        for name, future in futures.items():
            error = future.exception()
            if error is not None:
                settled.append(Settled(name=name, error=error))
            else:
                settled.append(Settled(name=name, value=future.result()))
    return settled


__all__ = ["Settled", "gather_settled"]
