# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/model/fifo.py

"""Top level of the toggle-handshake CDC FIFO.

Wires one SlotStore, one ProducerController (domain A) and one
ConsumerController (domain B). Each domain has its own entry points and
only ever touches its own registers plus the toggles it owns:

    domain A:  tick_a()  at every rising edge of clock A
               fall_a()  at every falling edge of clock A
    domain B:  tick_b()  at every rising edge of clock B

Reset:
    Each domain clears only the toggles it owns, so the FIFO is empty only
    after both domains have been through reset. A reset asserted in one
    domain is carried into the other at its next edge, and the domain that
    asserted stays in reset until the other has taken it. A reset applied
    to both domains at once is not extended.

Example:
    >>> fifo = CdcFifo(depth=4, width=8)
    >>> fifo.tick_a(reset=False, push=True, data=0x5A, now=0)
    <PushResult.ACCEPTED: 'accepted'>
"""

from __future__ import annotations

import logging
import random

from .consumer import ConsumerController, PopResult
from .producer import Commit, ProducerController, PushResult, Tracking
from .slot_store import SlotStore

logger = logging.getLogger(__name__)


class CdcFifo:
    """Clock domain crossing FIFO built from per-slot toggle handshakes."""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        depth: int,
        width: int,
        *,
        sync_stages: int = 2,
        commit: Commit = "two_phase",
        tracking: Tracking = "lazy",
        setup_ps: int = 0,
        rng: random.Random | None = None,
    ) -> None:
        if sync_stages < 2:
            logger.warning(
                "sync_stages=%d: single-register synchronization is not "
                "metastability safe",
                sync_stages,
            )
        if tracking == "lazy" and depth < 4:
            logger.warning("depth=%d is below 4 with lazy full tracking", depth)
        self.store = SlotStore(depth, width)
        self.producer = ProducerController(
            self.store,
            sync_stages=sync_stages,
            commit=commit,
            tracking=tracking,
            setup_ps=setup_ps,
            rng=rng,
        )
        self.consumer = ConsumerController(
            self.store,
            sync_stages=sync_stages,
            commit=commit,
            setup_ps=setup_ps,
            rng=rng,
        )
        # Reset owed by each domain after the other one asserted it
        self._reset_owed_a: bool = False
        self._reset_owed_b: bool = False

    @property
    def depth(self) -> int:
        """Item capacity."""
        return self.store.depth

    @property
    def width(self) -> int:
        """Bits per item."""
        return self.store.width

    @property
    def full(self) -> bool:
        """Domain A output: sample before raising push."""
        return self.producer.full

    @property
    def data_valid(self) -> bool:
        """Domain B output: data_out holds an item not yet advanced past."""
        return self.consumer.data_valid

    @property
    def data_out(self) -> int:
        """Domain B output: the exposed item."""
        return self.consumer.data_out

    def tick_a(self, *, reset: bool, push: bool, data: int, now: int) -> PushResult:
        """Rising edge of clock A."""
        reset = reset or self._reset_owed_a or self._reset_owed_b
        if reset:
            if not self.producer.in_reset:
                self._reset_owed_b = True
            self._reset_owed_a = False
        return self.producer.tick(reset=reset, push=push, data=data, now=now)

    def fall_a(self, now: int) -> None:
        """Falling edge of clock A."""
        self.producer.falling_edge(now)

    def tick_b(self, *, reset: bool, dequeue: bool, now: int) -> PopResult:
        """Rising edge of clock B."""
        reset = reset or self._reset_owed_b or self._reset_owed_a
        if reset:
            if not self.consumer.in_reset:
                self._reset_owed_a = True
            self._reset_owed_b = False
        return self.consumer.tick(reset=reset, dequeue=dequeue, now=now)

    def occupancy(self) -> int:
        """Slots holding unacknowledged data."""
        return self.store.occupancy()

    def is_empty(self) -> bool:
        """True when the store is empty and nothing is exposed."""
        return self.store.is_empty() and not self.consumer.data_valid

    def snapshot_state(self) -> dict:
        """Return a snapshot of both domains for debug."""
        return {
            "store": self.store.snapshot_state(),
            "producer": self.producer.snapshot_state(),
            "consumer": self.consumer.snapshot_state(),
        }
