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
# ruff: noqa: S101  # assert is allowed in tests
# ruff: noqa: PLR2004  # Magic values are permissible in tests

"""
Tests for `io_task` and `cpu_task`.
"""

from __future__ import annotations

import pickle
from time import perf_counter

import pytest

from gilpools.workloads import cpu_task, io_task


def test_io_task_waits() -> None:
    """
    Verify that `io_task` returns its delay after waiting for at least that long.
    """
    start = perf_counter()
    assert io_task(0.05) == 0.05
    assert perf_counter() - start >= 0.04


def test_io_task_zero() -> None:
    """
    Verify that a zero delay is allowed.
    """
    assert io_task(0) == 0


@pytest.mark.parametrize(
    ("n", "expected"),
    [
        (0, 0),
        (1, 0),
        (10, 285),
        # 97 * 97 is a multiple of 97, so i == 97 adds nothing
        (98, cpu_task(97)),
    ],
)
def test_cpu_task(n: int, expected: int) -> None:
    """
    Verify the arithmetic of `cpu_task`.
    """
    assert cpu_task(n) == expected


@pytest.mark.parametrize(("task", "argument"), [(io_task, -0.1), (cpu_task, -1)])
def test_negative_input_rejected(task: object, argument: float) -> None:
    """
    Verify that negative amounts of work are refused.
    """
    with pytest.raises(ValueError, match="negative"):
        task(argument)  # type: ignore[operator]


@pytest.mark.parametrize("task", [io_task, cpu_task])
def test_tasks_are_picklable(task: object) -> None:
    """
    Verify that the tasks can be sent to a process pool.
    """
    assert pickle.loads(pickle.dumps(task)) is task  # noqa: S301  # Our own data
