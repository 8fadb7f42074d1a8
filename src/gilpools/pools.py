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
Helpers for running a function over many inputs on a standard-library worker pool, and for collecting the results.

Nothing here schedules work: `ThreadPoolExecutor` and `ProcessPoolExecutor` do all of that. This module only spawns
them, submits to them, and drains their futures either in submission order or in completion order.

Usage example: ::

    with PoolKind.THREAD.executor(8) as executor:
        futures = submit_all(executor, io_task, delays)
        for index, result in drain_in_completion_order(futures):
            print(f"task {index} finished with {result}")

Note that exception groups will be used if available, so `except*` is preferred for exception handling.
"""

from __future__ import annotations

import logging
import os
import sys
from concurrent.futures import Future, as_completed, wait
from concurrent.futures import TimeoutError as FuturesTimeoutError
from time import monotonic
from typing import (
    TYPE_CHECKING,
    Any,
    TypeVar,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Sequence
    from concurrent.futures import Executor

    from gilpools.pool_kind import PoolKind

A = TypeVar("A")
T = TypeVar("T")

DEFAULT_WORKERS = os.cpu_count() or 4

logger = logging.getLogger(__name__)


def _extract_exceptions(futures_with_exception: list[Future[Any]]) -> list[BaseException]:
    """
    Extract the exceptions from a number of finished `Future` objects which are known to have failed.

    :param futures_with_exception: The `Future` objects to extract the exceptions from.
    :returns: The extracted exceptions. `BaseException` instances will be listed first.
    """
    exceptions: list[BaseException] = []
    for future in futures_with_exception:
        try:
            future.result()
        except BaseException as exc:  # noqa: BLE001
            # A cancelled future lands here as well, with its CancelledError
            exceptions.append(exc)
    # Sort BaseExceptions before other Exceptions, so naive unpacking of group.exceptions[0] gets the most
    # important exception
    exceptions.sort(key=lambda x: isinstance(x, Exception))
    return exceptions


def _has_failed(future: Future[Any]) -> bool:
    """
    Whether a finished `Future` was cancelled or ended with an exception.
    """
    return future.cancelled() or future.exception() is not None


def _raise_failures(failed: list[Future[Any]]) -> None:
    """
    Raise the exceptions of the failed futures, if there are any.

    Python <3.11: only the first exception is raised.

    :param failed: The finished futures that failed, in the order they were drained.
    :raises BaseException: If exactly one future failed, or on Python <3.11.
    :raises BaseExceptionGroup: If more than one future failed.
    """
    if not failed:
        return

    exceptions = _extract_exceptions(failed)
    logger.warning("%d of the drained futures yielded an exception", len(exceptions))
    if len(exceptions) == 1 or sys.version_info < (3, 11):
        raise exceptions[0]
    raise BaseExceptionGroup(f"{len(exceptions)} futures yielded an exception", exceptions)


def map_in_pool(
    kind: PoolKind,
    func: Callable[[A], T],
    inputs: Iterable[A],
    /,
    *,
    max_workers: int = DEFAULT_WORKERS,
    timeout: float | None = None,
) -> list[T]:
    """
    Spawn a fixed pool, map `func` over `inputs` on it and wait for all the results.

    For a `PoolKind.PROCESS` pool, `func` and all `inputs` must be picklable.

    :param kind: Which pool to spawn.
    :param func: The function to call for every input.
    :param inputs: The inputs. Each one is passed as the only argument to `func`.
    :param max_workers: The number of workers in the pool.
    :param timeout: If set, the number of seconds all results must be available in, counted from the start.
    :returns: The results, in the same order as `inputs`.
    :raises TimeoutError: If `timeout` was set and not all results were available in time. Calls that have not
                          started yet are cancelled, and running calls are no longer waited for.
    :raises Exception: The first exception raised by `func`, in input order.
    """
    inputs = list(inputs)
    logger.debug(
        "Mapping %s over %d inputs on %d %s", getattr(func, "__name__", func), len(inputs), max_workers, kind.value
    )
    executor = kind.executor(max_workers)
    timed_out = False
    try:
        return list(executor.map(func, inputs, timeout=timeout))
    except FuturesTimeoutError:
        if timeout is None:
            # Raised by `func` itself
            raise
        timed_out = True
        raise TimeoutError(f"Not all results were available within {timeout} seconds") from None
    finally:
        # Calls that are already running can't be interrupted: after a timeout they are left to finish on their own
        executor.shutdown(wait=not timed_out, cancel_futures=timed_out)


def submit_all(executor: Executor, func: Callable[[A], T], inputs: Iterable[A], /) -> list[Future[T]]:
    """
    Submit every input up front.

    :param executor: The pool to submit to.
    :param func: The function to call for every input.
    :param inputs: The inputs. Each one is passed as the only argument to `func`.
    :returns: The `Future` instances, in the same order as `inputs`.
    """
    return [executor.submit(func, value) for value in inputs]


def drain_in_completion_order(
    futures: Sequence[Future[T]], /, *, timeout: float | None = None
) -> Iterator[tuple[int, T]]:
    """
    Yield the results of `futures` in the order in which they finish.

    A slow future does not hold back the results of those that finish after it was submitted. Failed futures do not
    stop the drain: all successful results are yielded first, and the failures are raised at the end.

    Python <3.11: If more than one future failed, only the first exception is raised.

    :param futures: The futures to drain. Each future may only be listed once.
    :param timeout: If set, the number of seconds all futures must finish in, counted from the first call to `next()`.
    :returns: Pairs of the future's position in `futures` and its result.
    :raises TimeoutError: If `timeout` was set and not all futures finished in time.
    :raises BaseException: If exactly one of the futures failed.
    :raises BaseExceptionGroup: If more than one of the futures failed.
    """
    index_of = {future: index for index, future in enumerate(futures)}
    if len(index_of) != len(futures):
        raise ValueError("The same future was listed more than once")

    failed: list[Future[T]] = []
    try:
        for future in as_completed(index_of, timeout=timeout):
            if _has_failed(future):
                failed.append(future)
                continue
            yield index_of[future], future.result()
    except FuturesTimeoutError:
        raise TimeoutError(f"Not all futures completed within {timeout} seconds") from None

    logger.debug("Drained %d futures in completion order", len(futures))
    _raise_failures(failed)


def drain_in_submission_order(
    futures: Sequence[Future[T]], /, *, timeout: float | None = None
) -> Iterator[tuple[int, T]]:
    """
    Yield the results of `futures` in the order in which they are listed.

    The counterpart of `drain_in_completion_order()`, with the same contract: a result is only yielded once all futures
    listed before it have finished, even when it was available long before.

    :param futures: The futures to drain.
    :param timeout: If set, the number of seconds all futures must finish in, counted from the first call to `next()`.
    :returns: Pairs of the future's position in `futures` and its result.
    :raises TimeoutError: If `timeout` was set and not all futures finished in time.
    :raises BaseException: If exactly one of the futures failed.
    :raises BaseExceptionGroup: If more than one of the futures failed.
    """
    deadline = None if timeout is None else monotonic() + timeout

    failed: list[Future[T]] = []
    for index, future in enumerate(futures):
        remaining = None if deadline is None else max(0.0, deadline - monotonic())
        done, _ = wait([future], timeout=remaining)
        if not done:
            raise TimeoutError(f"Not all futures completed within {timeout} seconds")
        if _has_failed(future):
            failed.append(future)
            continue
        yield index, future.result()

    logger.debug("Drained %d futures in submission order", len(futures))
    _raise_failures(failed)
