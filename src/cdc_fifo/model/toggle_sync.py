# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/model/toggle_sync.py

"""Cross-domain toggle synchronizer.

Models a chain of flip-flops clocked by the destination domain. Every
destination tick shifts the chain by one stage and captures the source
toggle vector into the first stage; the destination logic only looks at
the last stage. With the default two stages a source change becomes
visible two destination ticks after it is first captured.

Setup window:
    A source bit that changed less than ``setup_ps`` before the sampling
    edge violates setup time. The first stage then goes metastable and
    resolves to either the old or the new value, chosen by ``rng``. The
    later stages never see an unresolved value. Only the first sample after
    a change can go metastable; later samples settle to the new value, so
    a change never shows up and then disappears again. With
    ``setup_ps == 0`` capture is deterministic.

The source must hold a changed bit for at least one destination tick;
the protocol upholds this because toggles only change again after a
round trip through the other domain.

Reference:
    C.E. Cummings, "Clock Domain Crossing (CDC) Design & Verification
    Techniques Using SystemVerilog," SNUG 2008
"""

from __future__ import annotations

import logging
import random
from collections import deque

from .slot_store import ToggleVector

logger = logging.getLogger(__name__)


class ToggleSynchronizer:
    """Register chain that relays a toggle vector into another clock domain."""

    def __init__(
        self,
        width: int,
        stages: int = 2,
        setup_ps: int = 0,
        rng: random.Random | None = None,
        name: str = "sync",
    ) -> None:
        if not isinstance(stages, int) or stages < 1:
            raise TypeError(
                "Synchronization stage count must be a positive integer, "
                f"not {stages!r}"
            )
        if width < 1:
            raise ValueError(f"{width=}")
        if setup_ps < 0:
            raise ValueError(f"{setup_ps=}")
        self.name = name
        self.width = width
        self.stages = stages
        self.setup_ps = setup_ps
        self._rng = rng if rng is not None else random.Random()
        self._chain: deque[list[int]] = deque(
            ([0] * width for _ in range(stages)), maxlen=stages
        )
        self.metastable_cnt: int = 0
        # Per bit: change time already seen by a sample
        self._sampled_change: list[int | None] = [None] * width

    @property
    def out(self) -> tuple[int, ...]:
        """Value of the last stage, safe to use in the destination domain."""
        return tuple(self._chain[-1])

    def reset(self) -> None:
        """Clear every stage."""
        for stage in self._chain:
            stage[:] = [0] * self.width
        self._sampled_change = [None] * self.width

    def sample(self, src: ToggleVector, now: int) -> tuple[int, ...]:
        """Advance the chain by one destination tick and return the output."""
        if len(src) != self.width:
            raise ValueError(f"{len(src)=} {self.width=}")
        captured = [self._capture(src, i, now) for i in range(self.width)]
        self._chain.appendleft(captured)
        return self.out

    def _capture(self, src: ToggleVector, index: int, now: int) -> int:
        value = src[index]
        if not self.setup_ps:
            return value
        changed = src.changed_at(index)
        first_sample = changed != self._sampled_change[index]
        self._sampled_change[index] = changed
        if changed is None or not first_sample:
            return value
        if not 0 <= now - changed < self.setup_ps:
            return value
        # Setup violated: resolve to the new value or the previous one.
        self.metastable_cnt += 1
        resolved = value if self._rng.getrandbits(1) else value ^ 1
        logger.debug(
            "%s: bit %d sampled %d ps after change, resolved to %d",
            self.name,
            index,
            now - changed,
            resolved,
        )
        return resolved
