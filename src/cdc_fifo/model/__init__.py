# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/model/__init__.py

"""Behavioral model of the toggle-handshake CDC FIFO.

Modules:
- slot_store: data slots and the push/confirm/ack toggle vectors
- toggle_sync: register-chain synchronizer with optional metastability
- producer: domain A write-side controller (two-phase commit, full tracking)
- consumer: domain B read-side controller (peek output, ack toggles)
- fifo: CdcFifo top level
"""

from __future__ import annotations

from .consumer import ConsumerController, PopKind, PopResult
from .fifo import CdcFifo
from .producer import ProducerController, PushResult
from .slot_store import SlotStore, ToggleVector
from .toggle_sync import ToggleSynchronizer

__all__ = (
    "CdcFifo",
    "ConsumerController",
    "PopKind",
    "PopResult",
    "ProducerController",
    "PushResult",
    "SlotStore",
    "ToggleSynchronizer",
    "ToggleVector",
)
