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
Worked example: summarising the reads of an indexed BAM file, one chromosome per worker.

Summarising a contig is CPU-bound Python work, so the contigs are fanned out over a process pool by default. Each worker
opens the BAM file itself, since an open `pysam.AlignmentFile` cannot be passed to another process.

Usage example: ::

    for contig, summary in process_all_chromosomes("sample.bam", max_workers=4).items():
        print(contig, summary.mapped_reads, summary.mean_mapping_quality)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Union

import pysam

from gilpools.pool_kind import PoolKind
from gilpools.pools import DEFAULT_WORKERS, drain_in_completion_order, submit_all

if TYPE_CHECKING:
    from collections.abc import Iterable

StrPath = Union[str, Path]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChromosomeSummary:
    """Read statistics for a single contig."""

    contig: str
    reads: int
    mapped_reads: int
    mean_mapping_quality: float


def _require_file(bam_path: StrPath) -> Path:
    path = Path(bam_path)
    if not path.is_file():
        raise FileNotFoundError(f"No BAM file at {path}")
    return path


def list_contigs(bam_path: StrPath) -> list[str]:
    """
    The reference names from the header of a BAM file, in header order.
    """
    with pysam.AlignmentFile(str(_require_file(bam_path)), "rb") as bam:
        return list(bam.references)


def process_chromosome(bam_path: StrPath, contig: str) -> ChromosomeSummary:
    """
    Summarise the reads placed on one contig of an indexed BAM file.

    Unmapped reads placed on the contig (such as unmapped mates) count as reads, but not as mapped reads, and their
    mapping quality is ignored.

    :param bam_path: The BAM file. It needs a `.bai` index next to it.
    :param contig: The reference name to summarise.
    :returns: The summary for `contig`.
    """
    reads = 0
    mapped = 0
    quality_sum = 0
    with pysam.AlignmentFile(str(bam_path), "rb") as bam:
        for read in bam.fetch(contig):
            reads += 1
            if read.is_unmapped:
                continue
            mapped += 1
            quality_sum += read.mapping_quality
    return ChromosomeSummary(contig, reads, mapped, quality_sum / mapped if mapped else 0.0)


def process_all_chromosomes(
    bam_path: StrPath,
    /,
    *,
    contigs: Iterable[str] | None = None,
    max_workers: int = DEFAULT_WORKERS,
    pool: PoolKind = PoolKind.PROCESS,
) -> dict[str, ChromosomeSummary]:
    """
    Summarise every contig of a BAM file on a worker pool.

    Results are collected as they finish, so a small contig is reported without waiting for a large one.

    :param bam_path: The BAM file. It needs a `.bai` index next to it.
    :param contigs: The contigs to summarise. Defaults to all of them, as listed in the header.
    :param max_workers: The number of workers.
    :param pool: The kind of pool to fan out over.
    :returns: The summaries keyed by contig, in the order of `contigs`.
    :raises FileNotFoundError: If there is no file at `bam_path`. No pool is spawned in that case.
    """
    path = _require_file(bam_path)
    contig_list = list(contigs) if contigs is not None else list_contigs(path)
    if not contig_list:
        return {}

    logger.debug("Summarising %d contigs of %s on %s", len(contig_list), path, pool.value)
    summaries: dict[int, ChromosomeSummary] = {}
    with pool.executor(min(max_workers, len(contig_list))) as executor:
        # Workers need not share our working directory
        futures = submit_all(executor, partial(process_chromosome, str(path.resolve())), contig_list)
        for index, summary in drain_in_completion_order(futures):
            logger.debug("Finished %s: %d reads", summary.contig, summary.reads)
            summaries[index] = summary

    return {summaries[index].contig: summaries[index] for index in sorted(summaries)}
