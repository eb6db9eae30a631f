# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/bench/bench_config.py

"""Bench configuration: YAML model validation and runtime parameters.

A bench run is described by a flat YAML mapping. ``BenchModel`` validates
it (pydantic) and converts unit strings with pint; ``BenchParams`` is the
plain parameter object the bench consumes, created via ``from_model`` and
validated with ``check()``.

Example spec:

    depth: 32
    width: 8
    clk_a_freq: 100 MHz
    clk_b_freq: 71 MHz
    duration: 20 us
    pop_start: 500 ns
    resets:
      - {start: 0 ns, length: 100 ns}
      - {start: 8 us, length: 200 ns}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any, List, Literal

from pint import UnitRegistry
from pydantic import (
    BaseModel,
    BeforeValidator,
    NonNegativeInt,
    PositiveInt,
    field_validator,
)

from cdc_fifo.utils import yellow

logger = logging.getLogger(__name__)

_UREG: Any = UnitRegistry()


def _parse_frequency(value: str | int | float) -> int:
    """Parse frequency from string with units (e.g., '1.1 GHz'), integer Hz
    value, or float Hz value.

    Returns frequency in Hz as integer.
    """
    if isinstance(value, (int, float)):
        return int(value)
    quantity: Any = _UREG.Quantity(value)
    return int(round(quantity.to("Hz").magnitude))


def _parse_time(value: str | int | float) -> int:
    """Parse a time from string with units (e.g., '250 ns') or integer
    picoseconds.

    Returns time in ps as integer.
    """
    if isinstance(value, (int, float)):
        return int(value)
    quantity: Any = _UREG.Quantity(value)
    return int(round(quantity.to("ps").magnitude))


# Accepts string with units (e.g., '1.1 GHz'), integer Hz, or float Hz during
# parsing, but validates to int Hz after conversion.
FrequencyHz = Annotated[int, BeforeValidator(_parse_frequency)]

# Accepts string with units (e.g., '250 ns') or integer ps.
TimePs = Annotated[int, BeforeValidator(_parse_time)]


class ResetPulse(BaseModel):
    """One reset pulse, applied as a level to both domains."""

    start: TimePs
    length: TimePs


class BenchModel(BaseModel):
    """Bench configuration model for YAML spec file validation.

    Attributes:
        depth: FIFO depth in items.
        width: Data width in bits.
        sync_stages: Synchronizer flip-flop stages in each direction.
        commit: 'two_phase' (push + confirm toggles) or 'single_phase'.
        tracking: 'lazy' shadow tail/size or 'direct' full detection.
        clk_a_freq: Producer clock frequency (accepts unit strings).
        clk_b_freq: Consumer clock frequency (accepts unit strings).
        clk_a_phase: Time of the first producer rising edge.
        clk_b_phase: Time of the first consumer rising edge.
        setup_window: Synchronizer setup window; 0 disables metastability.
        duration: Simulated time.
        push_prob: Probability of a push request per producer tick.
        pop_prob: Probability of a dequeue request per consumer tick.
        pop_start: Consumer idle time before the first dequeue request.
        resets: Reset pulses, applied to both domains.
        seed: Random seed (int, hex string or 'random').
        fail_on_error: Raise when the scoreboard error count is reached.
        error_quit_count: Mismatches tolerated before raising (0 disables).
    """

    depth: PositiveInt = 32
    width: PositiveInt = 8
    sync_stages: PositiveInt = 2
    commit: Literal["two_phase", "single_phase"] = "two_phase"
    tracking: Literal["lazy", "direct"] = "lazy"
    clk_a_freq: FrequencyHz
    clk_b_freq: FrequencyHz
    clk_a_phase: TimePs = 0
    clk_b_phase: TimePs = 0
    setup_window: TimePs = 0
    duration: TimePs
    push_prob: float = 1.0
    pop_prob: float = 1.0
    pop_start: TimePs = 0
    resets: List[ResetPulse] = []
    seed: int | str = 1
    fail_on_error: bool = True
    error_quit_count: NonNegativeInt = 1

    @field_validator("clk_a_freq", "clk_b_freq")
    @classmethod
    def _check_positive_frequency(cls, v: int) -> int:
        """Ensure clock frequencies are positive to prevent division by zero."""
        if v <= 0:
            raise ValueError(f"Clock frequency must be positive, got {v}")
        return v

    def __str__(self) -> str:
        """Return JSON-formatted string representation of the model."""
        return f"{self.__class__.__name__}:\n" + json.dumps(self.model_dump(), indent=2)

    def save(self, outdir: Path, name: str = "") -> None:
        """Save the model to a JSON file in the specified output directory."""
        name = name if name else self.__class__.__name__
        (outdir / f"{name}.json").write_text(
            json.dumps(self.model_dump(), indent=2) + "\n"
        )


class BenchParams:  # pylint: disable=too-many-instance-attributes
    """Runtime parameters for a bench run.

    Created from a validated BenchModel instance. Provides clock periods in
    picoseconds and validation of cross-field constraints.
    """

    def __init__(  # pylint: disable=too-many-arguments, too-many-locals
        self,
        *,
        depth: int = 32,
        width: int = 8,
        sync_stages: int = 2,
        commit: Literal["two_phase", "single_phase"] = "two_phase",
        tracking: Literal["lazy", "direct"] = "lazy",
        clk_a_freq: int,
        clk_b_freq: int,
        clk_a_phase: int = 0,
        clk_b_phase: int = 0,
        setup_window: int = 0,
        duration: int,
        push_prob: float = 1.0,
        pop_prob: float = 1.0,
        pop_start: int = 0,
        resets: list[tuple[int, int]] | None = None,
        seed: int = 1,
        fail_on_error: bool = True,
        error_quit_count: int = 1,
    ) -> None:
        self.depth = depth
        self.width = width
        self.sync_stages = sync_stages
        self.commit = commit
        self.tracking = tracking
        self.clk_a_freq = clk_a_freq
        self.clk_b_freq = clk_b_freq
        self.clk_a_phase = clk_a_phase
        self.clk_b_phase = clk_b_phase
        self.setup_window = setup_window
        self.duration = duration
        self.push_prob = push_prob
        self.pop_prob = pop_prob
        self.pop_start = pop_start
        self.resets = list(resets or [])
        self.seed = seed
        self.fail_on_error = fail_on_error
        self.error_quit_count = error_quit_count

    @classmethod
    def from_model(cls, model: BenchModel, seed: int | None = None) -> "BenchParams":
        """Create BenchParams from a validated BenchModel instance.

        ``seed`` must already be an integer when given; string seeds in the
        model are resolved by the caller.
        """
        if not isinstance(model, BenchModel):
            raise TypeError(f"Expected BenchModel, got {type(model).__name__}")
        if seed is None:
            if not isinstance(model.seed, int):
                raise TypeError(f"Unresolved seed {model.seed!r}")
            seed = model.seed
        return cls(
            depth=model.depth,
            width=model.width,
            sync_stages=model.sync_stages,
            commit=model.commit,
            tracking=model.tracking,
            clk_a_freq=int(model.clk_a_freq),
            clk_b_freq=int(model.clk_b_freq),
            clk_a_phase=int(model.clk_a_phase),
            clk_b_phase=int(model.clk_b_phase),
            setup_window=int(model.setup_window),
            duration=int(model.duration),
            push_prob=model.push_prob,
            pop_prob=model.pop_prob,
            pop_start=int(model.pop_start),
            resets=[(int(r.start), int(r.length)) for r in model.resets],
            seed=seed,
            fail_on_error=model.fail_on_error,
            error_quit_count=model.error_quit_count,
        )

    def __str__(self) -> str:
        """Return JSON-formatted string representation of the parameters."""
        return f"{self.__class__.__name__}:\n" + json.dumps(vars(self), indent=2)

    @property
    def period_a_ps(self) -> int:
        """Producer clock period in ps."""
        return max(1, round(1e12 / self.clk_a_freq))

    @property
    def period_b_ps(self) -> int:
        """Consumer clock period in ps."""
        return max(1, round(1e12 / self.clk_b_freq))

    @property
    def slow_period_ps(self) -> int:
        """Period of the slower clock in ps."""
        return max(self.period_a_ps, self.period_b_ps)

    def check(self) -> None:  # pylint: disable=too-many-branches
        """Validate all parameter constraints."""
        if self.depth < 1:
            raise ValueError(f"{self.depth=}")
        if self.width < 1:
            raise ValueError(f"{self.width=}")
        if self.sync_stages < 1:
            raise ValueError(f"{self.sync_stages=}")
        if self.commit not in ("two_phase", "single_phase"):
            raise ValueError(f"{self.commit=}")
        if self.tracking not in ("lazy", "direct"):
            raise ValueError(f"{self.tracking=}")
        if self.clk_a_freq <= 0 or self.clk_b_freq <= 0:
            raise ValueError(f"{self.clk_a_freq=}, {self.clk_b_freq=}")
        if self.period_a_ps < 2 or self.period_b_ps < 2:
            raise ValueError(f"{self.period_a_ps=}, {self.period_b_ps=}")
        if self.clk_a_phase < 0 or self.clk_b_phase < 0:
            raise ValueError(f"{self.clk_a_phase=}, {self.clk_b_phase=}")
        if not 0 <= self.setup_window < min(self.period_a_ps, self.period_b_ps):
            raise ValueError(
                f"{self.setup_window=} must be below both clock periods "
                f"({self.period_a_ps=}, {self.period_b_ps=})"
            )
        if self.duration <= 0:
            raise ValueError(f"{self.duration=}")
        if not 0.0 <= self.push_prob <= 1.0:
            raise ValueError(f"{self.push_prob=}")
        if not 0.0 <= self.pop_prob <= 1.0:
            raise ValueError(f"{self.pop_prob=}")
        if self.pop_start < 0:
            raise ValueError(f"{self.pop_start=}")
        if self.error_quit_count < 0:
            raise ValueError(f"{self.error_quit_count=}")
        self.check_resets()
        self.check_sizing()

    def check_resets(self) -> None:
        """Reject reset pulses that one domain could miss.

        Both domains must be in reset at the same time for the FIFO to come
        back empty, so a pulse must cover two periods of the slower clock.
        """
        min_length = 2 * self.slow_period_ps
        last_end = -1
        for start, length in sorted(self.resets):
            if start < 0:
                raise ValueError(f"reset {start=}")
            if length < min_length:
                raise ValueError(
                    f"reset pulse at {start} ps is {length} ps long; "
                    f"needs at least {min_length} ps"
                )
            if start <= last_end:
                raise ValueError(f"reset pulse at {start} ps overlaps the previous one")
            last_end = start + length

    def check_sizing(self) -> None:
        """Warn about configurations that are legal but not recommended."""
        if self.sync_stages < 2:
            logger.warning(
                yellow(
                    f"sync_stages={self.sync_stages}: single-register "
                    "synchronization is not metastability safe"
                )
            )
        if self.tracking == "lazy" and self.depth < 4:
            logger.warning(
                yellow(f"depth={self.depth} is below 4 with lazy full tracking")
            )

    def save(self, outdir: Path, name: str = "") -> None:
        """Save the parameters to a JSON file in the specified output directory."""
        name = name if name else self.__class__.__name__
        (outdir / f"{name}.json").write_text(json.dumps(vars(self), indent=2) + "\n")
