# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/model/slot_store.py

"""Slot store shared by the producer and consumer domains.

The store holds ``depth`` data words and three toggle vectors:

* push:    flipped by the producer when it writes a slot (phase 1)
* confirm: mirrored from push by the producer half a source tick later
           (phase 2)
* ack:     flipped by the consumer when it takes a slot

A slot is occupied while ``push != ack`` and free while they are equal.
Each toggle vector is written by exactly one domain.
"""

from __future__ import annotations

import logging
from typing import Iterator, Sequence

logger = logging.getLogger(__name__)


class ToggleVector:
    """A vector of toggle bits that remembers when each bit last changed.

    The change time lets a synchronizer decide whether a bit was stable for
    its whole setup window when sampled.
    """

    def __init__(self, width: int, name: str = "toggles") -> None:
        if width < 1:
            raise ValueError(f"{width=}")
        self.name = name
        self._bits: list[int] = [0] * width
        self._changed_at: list[int | None] = [None] * width

    def __len__(self) -> int:
        return len(self._bits)

    def __getitem__(self, index: int) -> int:
        return self._bits[index]

    def __iter__(self) -> Iterator[int]:
        return iter(self._bits)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name}={self.bits_str()})"

    def bits_str(self) -> str:
        """Return the bits as a string, slot 0 first."""
        return "".join(str(b) for b in self._bits)

    def changed_at(self, index: int) -> int | None:
        """Return the time of the last change of a bit (None if never)."""
        return self._changed_at[index]

    def flip(self, index: int, now: int) -> None:
        """Invert one bit."""
        self._bits[index] ^= 1
        self._changed_at[index] = now

    def assign(self, values: Sequence[int], now: int) -> None:
        """Copy values bit by bit, stamping only the bits that change."""
        if len(values) != len(self._bits):
            raise ValueError(f"{len(values)=} {len(self._bits)=}")
        for i, v in enumerate(values):
            v = 1 if v else 0
            if self._bits[i] != v:
                self._bits[i] = v
                self._changed_at[i] = now

    def clear(self, now: int) -> None:
        """Drive every bit to 0."""
        self.assign([0] * len(self._bits), now)

    def to_list(self) -> list[int]:
        """Return a copy of the bits."""
        return list(self._bits)


class SlotStore:
    """Fixed-capacity array of data slots plus the handshake toggles."""

    def __init__(self, depth: int, width: int) -> None:
        if depth < 1:
            raise ValueError(f"{depth=}")
        if width < 1:
            raise ValueError(f"{width=}")
        self.depth = depth
        self.width = width
        self.data_mask = (1 << width) - 1
        self._data: list[int] = [0] * depth
        self.push = ToggleVector(depth, "push")
        self.confirm = ToggleVector(depth, "confirm")
        self.ack = ToggleVector(depth, "ack")

    def read(self, index: int) -> int:
        """Return the data word held by a slot."""
        return self._data[index]

    def write(self, index: int, data: int) -> None:
        """Store a data word, masked to the configured width."""
        self._data[index] = data & self.data_mask

    def is_occupied(self, index: int) -> bool:
        """True when the slot holds data the consumer has not acknowledged.

        This reads both domains' toggles directly, so it is only meaningful
        to an observer outside the two clock domains (tests, bench checks).
        """
        return self.push[index] != self.ack[index]

    def occupancy(self) -> int:
        """Number of occupied slots."""
        return sum(1 for i in range(self.depth) if self.is_occupied(i))

    def is_empty(self) -> bool:
        """True when no slot is occupied."""
        return self.occupancy() == 0

    def snapshot_state(self) -> dict:
        """Return the toggle vectors as strings for debug."""
        return {
            "push": self.push.bits_str(),
            "confirm": self.confirm.bits_str(),
            "ack": self.ack.bits_str(),
            "occupancy": self.occupancy(),
        }
