# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/model/consumer.py

"""Consumer controller (domain B, read side).

The consumer exposes the oldest item through a registered output
(``data_valid``/``data_out``) with peek semantics: the value stays put
until the caller asks to advance with ``dequeue``. A slot is consumed the
moment its data is latched into the output register, which is also when
its ack toggle flips.
"""

from __future__ import annotations

import enum
import logging
import random
from typing import NamedTuple

from .producer import Commit
from .slot_store import SlotStore
from .toggle_sync import ToggleSynchronizer

logger = logging.getLogger(__name__)


class PopKind(enum.Enum):
    """What the consumer output shows after a tick."""

    DELIVERED = "delivered"
    HELD = "held"
    EMPTY = "empty"


class PopResult(NamedTuple):
    """Outcome of one consumer tick."""

    kind: PopKind
    data: int | None = None


class ConsumerController:  # pylint: disable=too-many-instance-attributes
    """Read-side state machine clocked by domain B."""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        store: SlotStore,
        *,
        sync_stages: int = 2,
        commit: Commit = "two_phase",
        setup_ps: int = 0,
        rng: random.Random | None = None,
    ) -> None:
        if commit not in ("two_phase", "single_phase"):
            raise ValueError(f"{commit=}")
        self.store = store
        self.depth = store.depth
        self.commit = commit
        self.push_sync = ToggleSynchronizer(
            store.depth, sync_stages, setup_ps, rng, name="push_sync_b"
        )
        self.confirm_sync = ToggleSynchronizer(
            store.depth, sync_stages, setup_ps, rng, name="confirm_sync_b"
        )
        self.tail: int = 0
        self.data_valid: bool = False
        self.data_out: int = 0
        self.in_reset: bool = False

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(tail={self.tail}, "
            f"data_valid={self.data_valid}, data_out={self.data_out})"
        )

    @property
    def data_ready(self) -> bool:
        """True when the slot at ``tail`` holds a stably committed write."""
        ack = self.store.ack[self.tail]
        if self.push_sync.out[self.tail] == ack:
            return False
        if self.commit == "single_phase":
            return True
        return self.confirm_sync.out[self.tail] != ack

    def _clear(self, now: int) -> None:
        self.tail = 0
        self.data_valid = False
        self.data_out = 0
        self.store.ack.clear(now)
        self.push_sync.reset()
        self.confirm_sync.reset()

    def tick(self, *, reset: bool, dequeue: bool, now: int) -> PopResult:
        """Evaluate one rising edge of clock B."""
        if reset:
            if not self.in_reset:
                logger.debug("consumer reset asserted at %d", now)
            self.in_reset = True
            self._clear(now)
            return PopResult(PopKind.EMPTY)
        if self.in_reset:
            logger.debug("consumer reset released at %d", now)
            self.in_reset = False

        result = self._step(dequeue, now)
        self.push_sync.sample(self.store.push, now)
        self.confirm_sync.sample(self.store.confirm, now)
        return result

    def try_pop(self, advance: bool, now: int) -> PopResult:
        """Evaluate one tick outside of reset."""
        return self.tick(reset=False, dequeue=advance, now=now)

    def _step(self, dequeue: bool, now: int) -> PopResult:
        if self.data_ready and (not self.data_valid or dequeue):
            self.data_out = self.store.read(self.tail)
            self.store.ack.flip(self.tail, now)
            logger.debug("pop slot=%d data=%d at %d", self.tail, self.data_out, now)
            self.tail = (self.tail + 1) % self.depth
            self.data_valid = True
            return PopResult(PopKind.DELIVERED, self.data_out)
        if dequeue and self.data_valid:
            # Underrun: nothing new arrived, drop valid and keep waiting.
            self.data_valid = False
        if self.data_valid:
            return PopResult(PopKind.HELD, self.data_out)
        return PopResult(PopKind.EMPTY)

    def snapshot_state(self) -> dict:
        """Return consumer registers for debug."""
        return {
            "tail": self.tail,
            "data_valid": self.data_valid,
            "data_out": self.data_out,
            "data_ready": self.data_ready,
            "in_reset": self.in_reset,
            "push_sync": "".join(str(b) for b in self.push_sync.out),
            "confirm_sync": "".join(str(b) for b in self.confirm_sync.out),
        }
