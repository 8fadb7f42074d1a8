# SPDX-FileContributor: The gilpools authors
#
# SPDX-License-Identifier: MIT

# This is just a copy of an example in the README.md, to ensure its correctness

# No formatting: the example is manually formatted for readability
# fmt: off

# ruff: noqa: T201  # Printing is the point of the example

from gilpools.benchmark import time_draining

completion, submission = time_draining([0.3, 0.1, 0.2])
print(f"first result after {completion.time_to_first:.2f}s instead of {submission.time_to_first:.2f}s")
