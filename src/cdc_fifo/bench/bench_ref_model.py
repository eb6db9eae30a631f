# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/bench/bench_ref_model.py

"""CDC FIFO reference model (simplified, queue-based).

This model intentionally ignores toggles, synchronizers and clocks and
implements a logical FIFO:

* Pushes: every push the producer accepted is appended, masked to the
  data width. ``full`` is not modeled; the producer decides acceptance.
* Pops: every item the consumer hands out is checked against the head of
  the queue.
* Reset: the queue is flushed once both domains are in reset; items that
  were in flight at that point are gone from the DUT as well.

This keeps the reference model focused on **data integrity** and order,
while the bench checks the protocol flags separately.
"""

from __future__ import annotations

import logging
from collections import deque

logger = logging.getLogger(__name__)


class BenchRefModel:
    """Logical queue holding every accepted, not yet consumed item."""

    def __init__(self, depth: int, width: int, name: str = "ref_model") -> None:
        if depth < 1:
            raise ValueError(f"{depth=}")
        if width < 1:
            raise ValueError(f"{width=}")
        self.name = name
        self.depth = depth
        self.data_mask: int = (1 << width) - 1

        self._fifo: deque[int] = deque()

        # Simple counters for debug/statistics
        self.pushes: int = 0
        self.pops: int = 0
        self.underflows: int = 0
        self.flushes: int = 0
        self.flushed_items: int = 0

    def __len__(self) -> int:
        return len(self._fifo)

    def push(self, data: int) -> None:
        """Record an item the producer accepted."""
        data &= self.data_mask
        self._fifo.append(data)
        self.pushes += 1
        logger.debug("REF PUSH: data=%d, fifo_len=%d", data, len(self._fifo))

    def pop(self) -> int | None:
        """Return the next expected item, or None if nothing is expected."""
        if not self._fifo:
            self.underflows += 1
            logger.warning("Ref-model: consumer delivered an item but queue is empty")
            return None
        expected = self._fifo.popleft()
        self.pops += 1
        logger.debug("REF POP: expected=%d, fifo_len=%d", expected, len(self._fifo))
        return expected

    def flush(self) -> None:
        """Drop every in-flight item (both domains are in reset)."""
        self.flushes += 1
        self.flushed_items += len(self._fifo)
        logger.debug("REF FLUSH: dropping %d items", len(self._fifo))
        self._fifo.clear()

    def snapshot_state(self) -> dict:
        """Return a snapshot of logical FIFO state for debug.

        Used by the scoreboard on mismatches to give context.
        """
        return {
            "fifo_len": len(self._fifo),
            "next": self._fifo[0] if self._fifo else None,
            "depth": self.depth,
            "pushes": self.pushes,
            "pops": self.pops,
            "underflows": self.underflows,
            "flushes": self.flushes,
        }
