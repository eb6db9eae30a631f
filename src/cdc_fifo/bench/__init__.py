# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/bench/__init__.py

"""Self-checking simulation bench for the CDC FIFO.

Modules:
- bench_config: YAML model (pydantic) and runtime parameters
- bench_clock: Clock definitions and the two-clock edge schedule
- bench_ref_model: Queue-based reference model
- bench_sb: In-order scoreboard
- bench_coverage: Activity and state counters
- bench_env: The bench itself (drivers, reset windows, protocol checks)
- bench_results: Scalars, witness time series and plots
"""

from __future__ import annotations

from .bench_clock import BenchClock, Edge, edge_schedule
from .bench_config import BenchModel, BenchParams, ResetPulse
from .bench_coverage import BenchCoverage
from .bench_env import BenchEnv
from .bench_ref_model import BenchRefModel
from .bench_results import BenchResults, WitnessRow
from .bench_sb import BenchScoreboard

__all__ = (
    "BenchClock",
    "BenchCoverage",
    "BenchEnv",
    "BenchModel",
    "BenchParams",
    "BenchRefModel",
    "BenchResults",
    "BenchScoreboard",
    "Edge",
    "ResetPulse",
    "WitnessRow",
    "edge_schedule",
)
