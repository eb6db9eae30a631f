# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/bench/bench_env.py

"""Self-checking bench for the CDC FIFO.

The bench plays the role of the logic around the FIFO:

* Domain A driver: every rising edge of clock A, samples ``full`` and, if
  not full, requests a push (with probability ``push_prob``). Data comes
  from a free-running counter that advances only on accepted pushes and is
  cleared whenever domain A is in reset.
* Domain B driver: every rising edge of clock B after ``pop_start``,
  requests a dequeue (with probability ``pop_prob``). An item is consumed
  when ``data_valid`` is set and a dequeue is requested.
* Reset: the configured pulses are one level signal that each domain
  samples on its own edges.

Checks:

* Scoreboard: consumed items against the reference queue.
* Gaps: consumed items must follow the counter (modulo 2**width).
* Protocol: no write into an occupied slot, ``full`` never under-reports,
  ``full`` deasserts within the synchronization latency after a slot is
  freed, and the FIFO reads back empty once both domains are in reset.

Reset window:
    From the first domain entering reset until both domains have left it.
    The reference model is flushed when both domains are in reset at the
    same time; items consumed while the window is open are counted but not
    compared, since the domain that reset first may have dropped them.
"""

from __future__ import annotations

import logging
import random

from cdc_fifo.model import CdcFifo, PopKind, PushResult
from cdc_fifo.utils import green, red

from .bench_clock import BenchClock, edge_schedule
from .bench_config import BenchParams
from .bench_coverage import BenchCoverage
from .bench_ref_model import BenchRefModel
from .bench_results import BenchResults, WitnessRow
from .bench_sb import BenchScoreboard

logger = logging.getLogger(__name__)


class BenchEnv:  # pylint: disable=too-many-instance-attributes
    """Two-clock simulation of the FIFO with stimulus and checking."""

    def __init__(self, params: BenchParams, record_witness: bool = True) -> None:
        self.params = params
        self.record_witness = record_witness
        self.data_mask = (1 << params.width) - 1

        # Stimulus and metastability resolution draw from separate streams
        self._stim_rng = random.Random(params.seed)
        self._meta_rng = random.Random(params.seed ^ 0x5EED_5EED)

        self.fifo = CdcFifo(
            params.depth,
            params.width,
            sync_stages=params.sync_stages,
            commit=params.commit,
            tracking=params.tracking,
            setup_ps=params.setup_window,
            rng=self._meta_rng,
        )
        self.clk_a = BenchClock("a", params.period_a_ps, params.clk_a_phase)
        self.clk_b = BenchClock("b", params.period_b_ps, params.clk_b_phase)

        self.ref_model = BenchRefModel(params.depth, params.width)
        self.sb = BenchScoreboard(
            self.ref_model,
            fail_on_error=params.fail_on_error,
            error_quit_count=params.error_quit_count,
        )
        self.cov = BenchCoverage()

        self.counter: int = 0
        self.segments: list[list[int]] = [[]]
        self.witness: list[WitnessRow] = []
        self.unchecked_cnt: int = 0
        self.gap_cnt: int = 0
        self.protocol_errors: list[str] = []

        extra = 1 if params.setup_window else 0
        self.full_latency_bound_ps = (
            params.sync_stages + 1 + extra
        ) * params.period_a_ps
        self.full_latency_max_ps: int = 0
        self._freed_while_full_at: int | None = None

        self._rst_window: bool = False
        self._rst_flushed: bool = False

    # ------------------------------------------------------------------
    # Top level
    # ------------------------------------------------------------------

    def run(self) -> BenchResults:
        """Simulate up to ``params.duration`` and return the results."""
        logger.info(
            "Bench start: depth=%d width=%d period_a=%d ps period_b=%d ps "
            "duration=%d ps seed=%d",
            self.params.depth,
            self.params.width,
            self.clk_a.period_ps,
            self.clk_b.period_ps,
            self.params.duration,
            self.params.seed,
        )
        for edge in edge_schedule([self.clk_a, self.clk_b], self.params.duration):
            if edge.domain == "a" and edge.kind == "rise":
                self.rise_a(edge.time_ps)
            elif edge.domain == "a":
                self.fifo.fall_a(edge.time_ps)
            elif edge.kind == "rise":
                self.rise_b(edge.time_ps)
        self.cov.report()
        self.sb.report()
        return self.get_results()

    def reset_active(self, now: int) -> bool:
        """Level of the reset signal at ``now``."""
        return any(
            start <= now < start + length for start, length in self.params.resets
        )

    # ------------------------------------------------------------------
    # Domain A
    # ------------------------------------------------------------------

    def rise_a(self, now: int) -> PushResult:
        """Drive and evaluate one producer edge."""
        fifo = self.fifo
        reset = self.reset_active(now)
        want = self._stim_rng.random() < self.params.push_prob
        push = want and not fifo.full
        data = self.counter & self.data_mask

        if (
            push
            and not reset
            and not self._rst_window
            and fifo.store.is_occupied(fifo.producer.head)
        ):
            self._protocol_error(f"push into occupied slot {fifo.producer.head}", now)

        result = fifo.tick_a(reset=reset, push=push, data=data, now=now)

        if reset:
            self.counter = 0
            self._freed_while_full_at = None
        elif result is PushResult.ACCEPTED:
            self.ref_model.push(data)
            self.counter += 1

        self._track_reset_window(now)
        if not self._rst_window:
            self._check_full(now)
        self.cov.sample_a(result, fifo.full, reset)
        self._sample(now, "a")
        return result

    def _check_full(self, now: int) -> None:
        fifo = self.fifo
        if not fifo.full and fifo.occupancy() >= fifo.depth:
            self._protocol_error("full deasserted while every slot is occupied", now)
        if self._freed_while_full_at is not None and not fifo.full:
            latency = now - self._freed_while_full_at
            self.full_latency_max_ps = max(self.full_latency_max_ps, latency)
            if latency > self.full_latency_bound_ps:
                self._protocol_error(
                    f"full deasserted {latency} ps after a slot was freed "
                    f"(bound {self.full_latency_bound_ps} ps)",
                    now,
                )
            self._freed_while_full_at = None

    # ------------------------------------------------------------------
    # Domain B
    # ------------------------------------------------------------------

    def rise_b(self, now: int) -> None:
        """Drive and evaluate one consumer edge."""
        fifo = self.fifo
        reset = self.reset_active(now)
        want = self._stim_rng.random() < self.params.pop_prob
        dequeue = want and now >= self.params.pop_start

        if dequeue and fifo.data_valid and not reset:
            self._consume(fifo.data_out, now)

        result = fifo.tick_b(reset=reset, dequeue=dequeue, now=now)

        if reset:
            self._freed_while_full_at = None
        elif (
            result.kind is PopKind.DELIVERED
            and fifo.full
            and self._freed_while_full_at is None
        ):
            self._freed_while_full_at = now

        self._track_reset_window(now)
        self.cov.sample_b(result, reset)
        self._sample(now, "b")

    def _consume(self, data: int, now: int) -> None:
        if self._rst_window:
            self.unchecked_cnt += 1
            logger.debug("Unchecked item %d consumed in reset window at %d", data, now)
            return
        seg = self.segments[-1]
        if seg and data != (seg[-1] + 1) & self.data_mask:
            self.gap_cnt += 1
            logger.error(red(f"Gap: {seg[-1]} followed by {data} at {now} ps"))
        seg.append(data)
        self.sb.write(data, now)

    # ------------------------------------------------------------------
    # Reset window and bookkeeping
    # ------------------------------------------------------------------

    def _track_reset_window(self, now: int) -> None:
        a_rst = self.fifo.producer.in_reset
        b_rst = self.fifo.consumer.in_reset
        if (a_rst or b_rst) and not self._rst_window:
            self._rst_window = True
            self._rst_flushed = False
            logger.info("Reset window opened at %d ps", now)
        if self._rst_window and a_rst and b_rst and not self._rst_flushed:
            self._rst_flushed = True
            self.ref_model.flush()
            if self.segments[-1]:
                self.segments.append([])
            fifo = self.fifo
            if not fifo.is_empty() or fifo.full or fifo.data_valid:
                self._protocol_error(
                    f"FIFO not empty with both domains in reset: "
                    f"{fifo.snapshot_state()}",
                    now,
                )
        if self._rst_window and not a_rst and not b_rst:
            if not self._rst_flushed:
                logger.warning(
                    "Reset window closed at %d ps without both domains in reset", now
                )
            self._rst_window = False
            logger.info("Reset window closed at %d ps", now)

    def _protocol_error(self, msg: str, now: int) -> None:
        self.protocol_errors.append(f"{now} ps: {msg}")
        logger.error(red(f"PROTOCOL: {msg} at {now} ps"))

    def _sample(self, now: int, domain: str) -> None:
        occupancy = self.fifo.occupancy()
        self.cov.sample_occupancy(occupancy)
        if self.record_witness:
            self.witness.append(
                WitnessRow(
                    now,
                    domain,
                    int(self.fifo.full),
                    int(self.fifo.data_valid),
                    occupancy,
                    len(self.ref_model),
                )
            )

    def get_results(self) -> BenchResults:
        """Collect the results of the run."""
        results = BenchResults(
            vect_cnt=self.sb.vect_cnt,
            pass_cnt=self.sb.pass_cnt,
            err_cnt=self.sb.err_cnt,
            unchecked_cnt=self.unchecked_cnt,
            gap_cnt=self.gap_cnt,
            protocol_err_cnt=len(self.protocol_errors),
            full_latency_max_ps=self.full_latency_max_ps,
            full_latency_bound_ps=self.full_latency_bound_ps,
            coverage=self.cov.to_dict(),
            segments=[seg for seg in self.segments if seg],
            witness=self.witness,
        )
        results.check()
        if results.basic_checks_pass:
            logger.info(green(f"Bench checks passed ({results.vect_cnt} items)"))
        return results
