# SPDX-FileContributor: The gilpools authors
#
# SPDX-License-Identifier: MIT

"""
The two kinds of worker pool, and which kind of workload each one is for.
"""

from __future__ import annotations

from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from enum import Enum


class PoolKind(Enum):
    """Which standard-library executor to spawn."""

    # Values double as the labels used in timing reports

    THREAD = "threads"
    """A fixed set of threads in this process. They share memory and the GIL."""

    PROCESS = "processes"
    """A fixed set of OS processes. Each has its own memory and its own GIL."""

    def executor(self, max_workers: int) -> Executor:
        """
        Spawn a fresh executor of this kind.

        :param max_workers: The fixed number of workers in the pool.
        :returns: A new `ThreadPoolExecutor` or `ProcessPoolExecutor`. Use it as a context manager.
        """
        if max_workers < 1:
            raise ValueError(f"A pool needs at least one worker, got {max_workers}")
        if self is PoolKind.THREAD:
            return ThreadPoolExecutor(max_workers=max_workers)
        return ProcessPoolExecutor(max_workers=max_workers)


class WorkloadKind(Enum):
    """What a unit of work spends most of its time on."""

    IO_BOUND = "io-bound"
    """Waiting on the network or the disk. The GIL is released while waiting."""

    CPU_BOUND = "cpu-bound"
    """Executing Python bytecode. The GIL is held throughout."""


def recommend_pool(workload: WorkloadKind) -> PoolKind:
    """
    Pick the pool kind for a workload.

    Threads suffice when the work mostly waits, since waiting releases the GIL. Work that computes needs processes to
    run on more than one core.
    """
    if workload is WorkloadKind.IO_BOUND:
        return PoolKind.THREAD
    return PoolKind.PROCESS
