# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/bench/bench_results.py

"""Results of one bench run: scalars, witness time series and plots."""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import List, NamedTuple

from cdc_fifo.utils import PlotLine, red

logger = logging.getLogger(__name__)


class WitnessRow(NamedTuple):
    """FIFO state right after one rising edge."""

    time_ps: int
    domain: str
    full: int
    data_valid: int
    occupancy: int
    ref_len: int


class BenchResults:  # pylint: disable=too-many-instance-attributes
    """Container for bench results with validation status tracking."""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        *,
        vect_cnt: int,
        pass_cnt: int,
        err_cnt: int,
        unchecked_cnt: int,
        gap_cnt: int,
        protocol_err_cnt: int,
        full_latency_max_ps: int,
        full_latency_bound_ps: int,
        coverage: dict[str, int],
        segments: List[List[int]],
        witness: List[WitnessRow],
    ) -> None:
        self.basic_checks_pass = False
        self.msg = ""
        self.vect_cnt = vect_cnt
        self.pass_cnt = pass_cnt
        self.err_cnt = err_cnt
        self.unchecked_cnt = unchecked_cnt
        self.gap_cnt = gap_cnt
        self.protocol_err_cnt = protocol_err_cnt
        self.full_latency_max_ps = full_latency_max_ps
        self.full_latency_bound_ps = full_latency_bound_ps
        for k, v in coverage.items():
            setattr(self, k, v)
        self._segments = segments
        self._witness = witness
        self._plot_title = "Fifo Occupancy"

    def __str__(self) -> str:
        """Return JSON-formatted string representation of the scalars."""
        return self.scalars_to_str()

    @property
    def consumed(self) -> List[int]:
        """Every checked item, in consumption order, across reset epochs."""
        return [v for seg in self._segments for v in seg]

    @property
    def segments(self) -> List[List[int]]:
        """Checked items split at each reset."""
        return self._segments

    @property
    def witness(self) -> List[WitnessRow]:
        """Per-edge state time series."""
        return self._witness

    def check(self) -> None:
        """Validate data integrity and protocol checks."""
        self.basic_checks_pass = True
        msgs = []
        if self.err_cnt:
            msgs.append(f"{self.err_cnt} scoreboard mismatches")
        if self.gap_cnt:
            msgs.append(f"{self.gap_cnt} gaps in the counter sequence")
        if self.protocol_err_cnt:
            msgs.append(f"{self.protocol_err_cnt} protocol violations")
        if self.full_latency_max_ps > self.full_latency_bound_ps:
            msgs.append(
                f"full deassert latency {self.full_latency_max_ps} ps > "
                f"{self.full_latency_bound_ps} ps"
            )
        if msgs:
            self.basic_checks_pass = False
            self.msg = "; ".join(msgs)
            logger.error(red(self.msg))
        if not self.vect_cnt:
            logger.warning("No items were consumed during the run")

    def scalars_to_dict(self) -> dict[str, int | float | str | bool]:
        """Extract scalar attributes (int, str, bool) to dictionary, excluding
        private and sequence attributes.
        """
        result: dict[str, int | float | str | bool] = {}
        for key, value in vars(self).items():
            if key.startswith("_"):
                continue
            if isinstance(value, (int, float, str, bool)):
                result[key] = value
        return result

    def scalars_to_str(self) -> str:
        """Return JSON-formatted string of scalar results only."""
        return json.dumps(self.scalars_to_dict(), indent=2)

    def save_scalars(self, outdir: Path, name: str) -> None:
        """Save scalar results to a JSON file."""
        (outdir / f"{name}_scalars.json").write_text(
            json.dumps(self.scalars_to_dict(), indent=2) + "\n"
        )

    def save_witness(self, outdir: Path, name: str) -> None:
        """Save the per-edge witness to a CSV file."""
        with (outdir / f"{name}_witness.csv").open(
            "w", newline="", encoding="utf-8"
        ) as f:
            wr = csv.writer(f)
            wr.writerow(WitnessRow._fields)
            for row in self._witness:
                wr.writerow(row)

    def save_plot(self, outdir: Path, name: str) -> None:
        """Generate and save a line plot of FIFO occupancy over time."""
        if not self._witness:
            return
        xs = [r.time_ps / 1000 for r in self._witness]
        p = PlotLine(outdir)
        p.add_line(xs, [r.occupancy for r in self._witness], "occupancy", "blue")
        p.add_line(xs, [r.ref_len for r in self._witness], "reference", "green")
        p.set_labels("Time (ns)", "Items", self._plot_title)
        p.format()
        p.save(f"{name}_plot")

    def save(self, outdir: Path, name: str) -> None:
        """Save scalars, witness and plot to the output directory."""
        self.save_scalars(outdir, name)
        self.save_witness(outdir, name)
        self.save_plot(outdir, name)
