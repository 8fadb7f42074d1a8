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
Fixtures shared by the test modules.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path

SAMPLE_CONTIGS = ["chr1", "chr2", "chr3"]

SAMPLE_READS = [
    # (contig index, position, mapping quality, unmapped)
    (0, 100, 60, False),
    (0, 200, 40, False),
    (0, 300, 0, True),
    (1, 50, 10, False),
]
"""Reads of the sample BAM file, in coordinate order. chr3 has no reads at all."""


@pytest.fixture(scope="session")
def bam_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """
    A coordinate-sorted, indexed BAM file named `sample.bam`, holding the reads in `SAMPLE_READS`.

    Tests using it are skipped when pysam is not available.
    """
    pysam = pytest.importorskip("pysam")

    path = tmp_path_factory.mktemp("bam") / "sample.bam"
    header = {
        "HD": {"VN": "1.6", "SO": "coordinate"},
        "SQ": [{"SN": name, "LN": 10_000} for name in SAMPLE_CONTIGS],
    }
    with pysam.AlignmentFile(str(path), "wb", header=header) as bam:
        for number, (contig, position, quality, unmapped) in enumerate(SAMPLE_READS):
            read = pysam.AlignedSegment(bam.header)
            read.query_name = f"read{number}"
            read.query_sequence = "ACGT" * 5
            read.query_qualities = pysam.qualitystring_to_array("I" * 20)
            read.reference_id = contig
            read.reference_start = position
            if unmapped:
                # Placed but unmapped, like the unmapped mate of a mapped read
                read.flag = 4
            else:
                read.flag = 0
                read.mapping_quality = quality
                read.cigartuples = [(0, 20)]
            bam.write(read)
    pysam.index(str(path))
    return path
