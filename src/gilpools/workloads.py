# SPDX-FileContributor: The gilpools authors
#
# SPDX-License-Identifier: MIT

"""
Illustrative units of work.

All of these live at module level so a `ProcessPoolExecutor` can pickle them.
"""

from __future__ import annotations

from time import sleep

CPU_TASK_MODULUS = 97


def io_task(delay: float) -> float:
    """
    Simulate waiting on an external operation, such as a network request or a disk read.

    `sleep` releases the GIL, just like a blocking socket or file read does.

    :param delay: The number of seconds to wait.
    :returns: `delay`
    """
    if delay < 0:
        raise ValueError(f"Cannot wait a negative amount of time: {delay}")
    sleep(delay)
    return delay


def cpu_task(n: int) -> int:
    """
    Simulate computation in pure Python. The GIL is held for the whole call.

    :param n: The number of loop iterations.
    :returns: The sum of `(i * i) % 97` over `range(n)`.
    """
    if n < 0:
        raise ValueError(f"Cannot loop a negative number of times: {n}")
    total = 0
    for i in range(n):
        total += (i * i) % CPU_TASK_MODULUS
    return total
