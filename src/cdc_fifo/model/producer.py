# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/model/producer.py

"""Producer controller (domain A, write side).

Per accepted push the producer runs a two-phase commit:

* Phase 1 (rising edge of clock A): write the data word at ``head`` and flip
  the slot's push toggle.
* Phase 2 (falling edge of clock A): mirror the push toggles into the
  confirm toggles.

The consumer only treats a slot as ready once both toggles differ from
its ack toggle, which guarantees half a source tick of hold time before
the write is acted upon.

Fullness tracking:

* lazy:   a shadow tail/size pair. ``size`` grows on every accepted push and
          shrinks whenever the synchronized ack vector shows that the slot
          at the shadow tail was freed. ``full`` is ``size == depth``.
* direct: no shadow tail. ``full`` is the occupancy of the slot the next
          write would target, read from the synchronized ack vector.

Both report the same ``full`` on every tick; the lazy form is the one that
maps onto hardware without a per-slot comparator in front of ``full``.

``head_prev`` is the slot of the most recent write. Only ``snapshot_state``
reads it; the single-phase consumer checks the slot at its own tail.
"""

from __future__ import annotations

import enum
import logging
import random
from typing import Literal

from .slot_store import SlotStore
from .toggle_sync import ToggleSynchronizer

logger = logging.getLogger(__name__)

Commit = Literal["two_phase", "single_phase"]
Tracking = Literal["lazy", "direct"]


class PushResult(enum.Enum):
    """Outcome of one producer tick."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    IDLE = "idle"


class ProducerController:  # pylint: disable=too-many-instance-attributes
    """Write-side state machine clocked by domain A."""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        store: SlotStore,
        *,
        sync_stages: int = 2,
        commit: Commit = "two_phase",
        tracking: Tracking = "lazy",
        setup_ps: int = 0,
        rng: random.Random | None = None,
    ) -> None:
        if commit not in ("two_phase", "single_phase"):
            raise ValueError(f"{commit=}")
        if tracking not in ("lazy", "direct"):
            raise ValueError(f"{tracking=}")
        self.store = store
        self.depth = store.depth
        self.commit = commit
        self.tracking = tracking
        self.ack_sync = ToggleSynchronizer(
            store.depth, sync_stages, setup_ps, rng, name="ack_sync_a"
        )
        self.head: int = 0
        self.head_prev: int = 0
        self.tail: int = 0
        self.size: int = 0
        self.full: bool = False
        self.in_reset: bool = False

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(head={self.head}, tail={self.tail}, "
            f"size={self.size}, full={self.full})"
        )

    def _clear(self, now: int) -> None:
        self.head = 0
        self.head_prev = 0
        self.tail = 0
        self.size = 0
        self.full = False
        self.store.push.clear(now)
        self.store.confirm.clear(now)
        self.ack_sync.reset()

    def tick(self, *, reset: bool, push: bool, data: int, now: int) -> PushResult:
        """Evaluate one rising edge of clock A.

        ``full`` is the registered value from the previous edge; the caller
        is expected to have sampled it before raising ``push``.
        """
        if reset:
            if not self.in_reset:
                logger.debug("producer reset asserted at %d", now)
            self.in_reset = True
            self._clear(now)
            return PushResult.REJECTED if push else PushResult.IDLE
        if self.in_reset:
            logger.debug("producer reset released at %d", now)
            self.in_reset = False

        # Decisions below use the pre-edge synchronizer output.
        ack_seen = self.ack_sync.out

        result = PushResult.IDLE
        if push and self.full:
            result = PushResult.REJECTED
            logger.debug("push rejected (full) data=%d at %d", data, now)
        elif push:
            self.store.write(self.head, data)
            self.store.push.flip(self.head, now)
            logger.debug("push slot=%d data=%d at %d", self.head, data, now)
            self.head_prev = self.head
            self.head = (self.head + 1) % self.depth
            if self.tracking == "lazy":
                self.size += 1
            result = PushResult.ACCEPTED

        if self.tracking == "lazy":
            self._retire(ack_seen)
        self.full = self._calc_full(ack_seen)
        self.ack_sync.sample(self.store.ack, now)
        return result

    def try_push(self, data: int, now: int) -> PushResult:
        """Request one push outside of reset."""
        return self.tick(reset=False, push=True, data=data, now=now)

    def falling_edge(self, now: int) -> None:
        """Phase 2 of the commit: mirror push toggles into confirm toggles."""
        if self.in_reset or self.commit != "two_phase":
            return
        self.store.confirm.assign(self.store.push.to_list(), now)

    def _retire(self, ack_seen: tuple[int, ...]) -> None:
        """Advance the shadow tail over every slot the consumer has freed."""
        push = self.store.push
        while self.size and push[self.tail] == ack_seen[self.tail]:
            self.tail = (self.tail + 1) % self.depth
            self.size -= 1

    def _calc_full(self, ack_seen: tuple[int, ...]) -> bool:
        if self.tracking == "direct":
            return self.store.push[self.head] != ack_seen[self.head]
        return self.size >= self.depth

    def snapshot_state(self) -> dict:
        """Return producer registers for debug."""
        return {
            "head": self.head,
            "head_prev": self.head_prev,
            "tail": self.tail,
            "size": self.size,
            "full": self.full,
            "in_reset": self.in_reset,
            "ack_sync": "".join(str(b) for b in self.ack_sync.out),
        }
