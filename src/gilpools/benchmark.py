# SPDX-FileContributor: The gilpools authors
#
# SPDX-License-Identifier: Apache-2.0

# Copyright 2026 The gilpools authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Timing comparisons between running work serially, on a thread pool and on a process pool.

Usage example: ::

    comparison = compare(cpu_task, [5_000_000] * 8, max_workers=4)
    print(comparison.format_table())

Timings depend on the machine, its load and its power mode. Only the relative order is meaningful.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from time import perf_counter
from typing import (
    TYPE_CHECKING,
    Any,
    Generic,
    TypeVar,
)

from gilpools.pool_kind import PoolKind
from gilpools.pools import (
    DEFAULT_WORKERS,
    drain_in_completion_order,
    drain_in_submission_order,
    map_in_pool,
    submit_all,
)
from gilpools.workloads import io_task

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

A = TypeVar("A")
T = TypeVar("T")

SERIAL = "serial"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Timing(Generic[T]):
    """How long one strategy took, and what it produced."""

    label: str
    seconds: float
    results: list[T] = field(repr=False)


@dataclass(frozen=True)
class Comparison(Generic[T]):
    """The timings of several strategies running the same work."""

    timings: tuple[Timing[T], ...]

    def __getitem__(self, label: str) -> Timing[T]:
        for timing in self.timings:
            if timing.label == label:
                return timing
        raise KeyError(label)

    def fastest(self) -> str:
        """The label of the strategy that took the least time."""
        if not self.timings:
            raise ValueError("Nothing was timed")
        return min(self.timings, key=lambda timing: timing.seconds).label

    def speedup(self, label: str) -> float:
        """
        How many times faster `label` was than running serially.

        :raises ValueError: If the comparison has no serial timing.
        """
        try:
            serial = self[SERIAL]
        except KeyError:
            raise ValueError("Speedup is relative to a serial run, which was not timed") from None
        seconds = self[label].seconds
        if seconds == 0:
            return float("inf")
        return serial.seconds / seconds

    def format_table(self) -> str:
        """Render the timings as an aligned plain-text table."""
        width = max([len("strategy"), *(len(timing.label) for timing in self.timings)])
        has_serial = any(timing.label == SERIAL for timing in self.timings)
        lines = [f"{'strategy':<{width}}  {'seconds':>9}"]
        for timing in self.timings:
            line = f"{timing.label:<{width}}  {timing.seconds:>9.3f}"
            if has_serial and timing.label != SERIAL:
                line += f"  x{self.speedup(timing.label):.2f}"
            lines.append(line)
        return "\n".join(lines)


def time_serial(func: Callable[[A], T], inputs: Iterable[A], /) -> Timing[T]:
    """
    Run `func` over `inputs` one call after the other, in this thread.
    """
    start = perf_counter()
    results = [func(value) for value in inputs]
    return Timing(SERIAL, perf_counter() - start, results)


def time_pool(
    kind: PoolKind, func: Callable[[A], T], inputs: Iterable[A], /, *, max_workers: int = DEFAULT_WORKERS
) -> Timing[T]:
    """
    Run `func` over `inputs` on a freshly spawned pool.

    The measured time includes spawning the pool and shutting it down, which is where processes pay their extra cost.
    """
    start = perf_counter()
    results = map_in_pool(kind, func, inputs, max_workers=max_workers)
    return Timing(kind.value, perf_counter() - start, results)


def compare(
    func: Callable[[A], T],
    inputs: Iterable[A],
    /,
    *,
    max_workers: int = DEFAULT_WORKERS,
    kinds: Iterable[PoolKind] = (PoolKind.THREAD, PoolKind.PROCESS),
    include_serial: bool = True,
) -> Comparison[T]:
    """
    Time the same work serially and on each kind of pool.

    :param func: The unit of work. Must be picklable when `kinds` includes `PoolKind.PROCESS`.
    :param inputs: The inputs to `func`.
    :param max_workers: The number of workers in each pool.
    :param kinds: The pool kinds to time.
    :param include_serial: Whether to time a serial run as well, as the baseline for `Comparison.speedup()`.
    :returns: The timings, serial first, then in the order of `kinds`.
    """
    inputs = list(inputs)
    timings: list[Timing[T]] = []
    if include_serial:
        timings.append(time_serial(func, inputs))
    timings.extend(time_pool(kind, func, inputs, max_workers=max_workers) for kind in kinds)
    for timing in timings:
        logger.debug("%s took %.3f seconds", timing.label, timing.seconds)
    return Comparison(tuple(timings))


@dataclass(frozen=True)
class DrainTiming:
    """When the first and the last result of a drain were reported, in seconds since submission."""

    label: str
    time_to_first: float
    total: float
    order: tuple[int, ...]
    """The positions of the submitted tasks, in the order their results were reported."""


def _time_drain(
    label: str,
    drain: Callable[..., Iterator[tuple[int, Any]]],
    delays: list[float],
    max_workers: int,
) -> DrainTiming:
    logger.debug("Draining %d io_task calls in %s on %d threads", len(delays), label, max_workers)
    with PoolKind.THREAD.executor(max_workers) as executor:
        start = perf_counter()
        futures = submit_all(executor, io_task, delays)
        time_to_first: float | None = None
        order: list[int] = []
        for index, _ in drain(futures):
            if time_to_first is None:
                time_to_first = perf_counter() - start
            order.append(index)
        total = perf_counter() - start
    return DrainTiming(label, time_to_first or 0.0, total, tuple(order))


def time_draining(delays: Iterable[float], /, *, max_workers: int | None = None) -> tuple[DrainTiming, DrainTiming]:
    """
    Compare reporting results in completion order with reporting them in submission order.

    Every delay becomes one `io_task` on a thread pool. With enough workers to run all tasks at once, completion order
    reports the shortest delay first, while submission order has to wait for the first task to finish.

    :param delays: The delays of the `io_task` calls, in submission order.
    :param max_workers: The number of threads. Defaults to one per delay.
    :returns: The timings for completion order and for submission order, in that order.
    """
    delays = list(delays)
    if not delays:
        raise ValueError("Need at least one delay to time")
    workers = len(delays) if max_workers is None else max_workers
    return (
        _time_drain("completion order", drain_in_completion_order, delays, workers),
        _time_drain("submission order", drain_in_submission_order, delays, workers),
    )
