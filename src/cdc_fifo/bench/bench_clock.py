# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/bench/bench_clock.py

"""Clock edges for the two independent domains.

Each ``BenchClock`` is an ideal clock with an integer period and phase in
picoseconds. ``edge_schedule`` merges the edges of several clocks into one
time-ordered stream. Edges that fall on the same picosecond are ordered by
clock registration order, then rising before falling; this is one legal
resolution of two registers sampling at the same instant.
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass
from typing import Iterator, Literal, Sequence

logger = logging.getLogger(__name__)

EdgeKind = Literal["rise", "fall"]


@dataclass(frozen=True)
class Edge:
    """One clock edge."""

    time_ps: int
    domain: str
    kind: EdgeKind


@dataclass(frozen=True)
class BenchClock:
    """Ideal clock: rising edges at phase + n * period, falling half way."""

    name: str
    period_ps: int
    phase_ps: int = 0

    def __post_init__(self) -> None:
        if self.period_ps < 2:
            raise ValueError(f"{self.period_ps=}")
        if self.phase_ps < 0:
            raise ValueError(f"{self.phase_ps=}")

    @property
    def high_ps(self) -> int:
        """Time from a rising edge to the next falling edge."""
        return self.period_ps // 2

    def edges(self, until_ps: int) -> Iterator[Edge]:
        """Yield this clock's edges up to and including ``until_ps``."""
        t = self.phase_ps
        while t <= until_ps:
            yield Edge(t, self.name, "rise")
            if t + self.high_ps <= until_ps:
                yield Edge(t + self.high_ps, self.name, "fall")
            t += self.period_ps


def edge_schedule(clocks: Sequence[BenchClock], until_ps: int) -> Iterator[Edge]:
    """Merge the edges of all clocks in time order."""
    names = [c.name for c in clocks]
    if len(set(names)) != len(names):
        raise ValueError(f"Duplicate clock names: {names}")
    order = {name: i for i, name in enumerate(names)}

    def key(e: Edge) -> tuple[int, int, int]:
        return (e.time_ps, order[e.domain], 0 if e.kind == "rise" else 1)

    return heapq.merge(*(c.edges(until_ps) for c in clocks), key=key)
