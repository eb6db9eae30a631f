# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/bench/bench_coverage.py

"""Coverage."""

from __future__ import annotations

import logging

from cdc_fifo.model import PopKind, PopResult, PushResult

logger = logging.getLogger(__name__)


class BenchCoverage:  # pylint: disable=too-many-instance-attributes
    """Track push/pop activity and FIFO states.

    Producer ticks and consumer ticks are sampled separately since they
    come from different clock domains.
    """

    def __init__(self) -> None:
        self.a_ticks: int = 0
        self.b_ticks: int = 0
        self.pushes: int = 0
        self.rejects: int = 0
        self.pops: int = 0
        self.holds: int = 0
        self.full_hits: int = 0
        self.empty_hits: int = 0
        self.a_resets: int = 0
        self.b_resets: int = 0
        self.max_occupancy: int = 0

    def sample_a(self, result: PushResult, full: bool, reset: bool) -> None:
        """Sample one producer tick."""
        self.a_ticks += 1
        if reset:
            self.a_resets += 1
            return
        if result is PushResult.ACCEPTED:
            self.pushes += 1
        elif result is PushResult.REJECTED:
            self.rejects += 1
        if full:
            self.full_hits += 1

    def sample_b(self, result: PopResult, reset: bool) -> None:
        """Sample one consumer tick."""
        self.b_ticks += 1
        if reset:
            self.b_resets += 1
            return
        if result.kind is PopKind.DELIVERED:
            self.pops += 1
        elif result.kind is PopKind.HELD:
            self.holds += 1
        else:
            self.empty_hits += 1

    def sample_occupancy(self, occupancy: int) -> None:
        """Track the peak number of occupied slots."""
        self.max_occupancy = max(self.max_occupancy, occupancy)

    def to_dict(self) -> dict[str, int]:
        """Counters as a dict."""
        return dict(vars(self))

    def report(self) -> None:
        """Log coverage summary."""
        logger.info(
            "BenchCoverage summary:"
            " pushes=%d rejects=%d pops=%d holds=%d full=%d empty=%d"
            " max_occupancy=%d",
            self.pushes,
            self.rejects,
            self.pops,
            self.holds,
            self.full_hits,
            self.empty_hits,
            self.max_occupancy,
        )
