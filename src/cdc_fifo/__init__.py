# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/__init__.py

"""cdc_fifo: a behavioral model of a toggle-handshake clock domain crossing FIFO.

The FIFO moves fixed-width data words from a producer clocked by domain A to
a consumer clocked by an unrelated domain B. Slot occupancy is encoded by
per-slot toggle bits that cross between domains through multi-stage
synchronizers, so no multi-bit pointer ever crosses a clock boundary.

Main Components:

model:
    The FIFO itself, modeled at clock-edge granularity:
    - Slot store with push/confirm/ack toggle vectors
    - Cross-domain toggle synchronizer (register chain, optional
      metastability resolution)
    - Producer (domain A) and consumer (domain B) controllers
    - CdcFifo top level wiring both domains

bench:
    Self-checking simulation bench: two-clock edge scheduler, counter
    driver, reset pulses, reference model, scoreboard, coverage counters
    and results reporting.

tools:
    Command-line entry points (cdc-fifo-sim).

utils:
    Common utilities used across the package
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

try:
    __version__ = pkg_version("cdc-fifo")
except PackageNotFoundError:
    __version__ = "0+local"
