# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/bench/bench_sb.py

"""Scoreboard comparing consumed items against the reference model."""

from __future__ import annotations

import logging

from .bench_ref_model import BenchRefModel

logger = logging.getLogger(__name__)


class BenchScoreboard:
    """In-order comparator for the consumer output stream.

    Every item the consumer hands out is compared with the head of the
    reference model queue. Pass/fail statistics are kept and, when
    ``fail_on_error`` is set, an AssertionError is raised once
    ``error_quit_count`` mismatches were seen (0 disables the early quit).

    Statistics:
        vect_cnt: Total number of comparisons performed
        pass_cnt: Number of passing comparisons
        err_cnt: Number of failing comparisons
    """

    def __init__(
        self,
        ref_model: BenchRefModel,
        *,
        fail_on_error: bool = True,
        error_quit_count: int = 1,
    ) -> None:
        self.ref_model = ref_model
        self.fail_on_error = fail_on_error
        self.error_quit_count = max(0, error_quit_count)
        self.vect_cnt: int = 0
        self.pass_cnt: int = 0
        self.err_cnt: int = 0
        self.actual: list[int] = []

    def write(self, act: int, now: int) -> bool:
        """Compare one consumed item; return True on match."""
        snapshot = self.ref_model.snapshot_state()
        exp = self.ref_model.pop()
        self.vect_cnt += 1
        self.actual.append(act)
        if exp is not None and exp == act:
            self.pass_cnt += 1
            logger.debug("PASS exp=%d act=%d at %d ps", exp, act, now)
            return True
        self.err_cnt += 1
        logger.error("MISMATCH exp=%s act=%d at %d ps", exp, act, now)
        logger.error("REF_MODEL_STATE: %s", snapshot)
        if (
            self.fail_on_error
            and self.error_quit_count
            and self.err_cnt >= self.error_quit_count
        ):
            raise AssertionError(
                f"Scoreboard error_quit_count exceeded "
                f"(errors={self.err_cnt}, threshold={self.error_quit_count})"
            )
        return False

    @property
    def passed(self) -> bool:
        """True when at least one item was compared and none failed."""
        return self.vect_cnt > 0 and self.err_cnt == 0

    def report(self) -> None:
        """Log the pass/fail summary."""
        if self.passed:
            logger.info(
                "*** TEST PASSED - %d ran, %d passed ***", self.vect_cnt, self.pass_cnt
            )
        else:
            logger.error(
                "*** TEST FAILED - %d ran, %d passed, %d failed ***",
                self.vect_cnt,
                self.pass_cnt,
                self.err_cnt,
            )
