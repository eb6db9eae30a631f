# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/tools/fifo_sim.py

"""CDC FIFO bench runner.

Usage:
    cdc-fifo-sim examples/cdc_fifo_depth32.yaml
    cdc-fifo-sim examples/*.yaml --verbosity debug
    SEED=random cdc-fifo-sim examples/cdc_fifo_metastable.yaml

Each spec gets its own output directory (``out_cdc_fifo_sim_<stem>`` unless
``--outdir`` is given) holding run.log, the validated model and parameters,
and the results scalars, witness and plot.

Seed precedence: ``--seed`` > SEED environment variable > spec ``seed``.
FAIL_ON_ERROR and ERROR_QUIT_COUNT in the environment override the spec file
``fail_on_error`` and ``error_quit_count``.
"""

from __future__ import annotations

import argparse
import json
import logging
import random
import shutil
import time
from pathlib import Path
from typing import Sequence, cast

import yaml

from cdc_fifo.bench import BenchEnv, BenchModel, BenchParams, BenchResults
from cdc_fifo.settings import get_bool_setting, get_int_setting, get_str_setting
from cdc_fifo.utils import configure_logger, ensure_dir, green, normalize_seed, red

logger = logging.getLogger(__name__)


def get_args(
    argv: Sequence[str] | None = None, description: str = ""
) -> argparse.Namespace:
    """Parse command line arguments for the bench runner.

    Provides standard arguments for spec file paths, output directory,
    results name, logging verbosity and seed.
    """
    ap = argparse.ArgumentParser(
        description=description,
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument("spec", nargs="+", help="YAML spec file path(s)")
    ap.add_argument("--outdir", help="output directory")
    ap.add_argument("--results-name", default="results", help="results name prefix")
    ap.add_argument(
        "--verbosity",
        choices=["critical", "error", "warning", "info", "debug"],
        default=get_str_setting("VERBOSITY", "info"),
        help="logging level",
    )
    ap.add_argument(
        "--seed",
        default=get_str_setting("SEED", ""),
        help="random seed (decimal, 0x..., or 'random'); overrides the spec file",
    )
    return ap.parse_args(argv)


class BenchSolver:  # pylint: disable=too-many-instance-attributes
    """Run one spec through the bench, from spec loading to saved results."""

    def __init__(self, outdir: Path, results_name: str = "results") -> None:
        self.outdir = outdir
        self.results_name = results_name
        self.spec_file: str = ""
        self.seed_override: str = ""
        self.spec: dict = {}
        self.model: BenchModel | None = None
        self.params: BenchParams | None = None
        self.results: BenchResults | None = None

    def run(self, spec_file: str, seed: str = "") -> None:
        """Execute the complete bench workflow for ``spec_file``."""
        self.spec_file = spec_file
        self.seed_override = seed
        self.get_spec()
        self.get_model()
        self.log_model()
        self.get_params()
        self.log_params()
        self.check_params()
        self.get_results()
        self.check_results()
        self.log_results()
        self.save_results()
        self.handle_results()

    def get_spec(self) -> None:
        """Load the YAML spec file."""
        spec_path = Path(self.spec_file)
        if not spec_path.exists():
            raise SystemExit(f"ERROR: Spec file not found: {self.spec_file}")
        with open(spec_path, encoding="utf-8") as f:
            s = f.read()
            logger.debug("Input spec:\n%s", s)
            self.spec = cast(dict, yaml.safe_load(s) or {})
            logger.debug("Loaded spec:\n%s", json.dumps(self.spec, indent=2))

    def get_model(self) -> None:
        """Validate the spec file against the pydantic model."""
        assert self.spec is not None, "Must call get_spec() first"
        self.model = BenchModel.model_validate(self.spec)

    def log_model(self) -> None:
        """Log the validated model and save it next to the results."""
        assert self.model is not None, "Must call get_model() first"
        logger.info(self.model)
        self.model.save(self.outdir)

    def get_params(self) -> None:
        """Convert the model into bench parameters, resolving the seed."""
        assert self.model is not None, "Must call get_model() first"
        raw_seed = self.seed_override or self.model.seed
        seed = normalize_seed(random.Random(), raw_seed)
        self.params = BenchParams.from_model(self.model, seed=seed)
        self.params.fail_on_error = get_bool_setting(
            "FAIL_ON_ERROR", self.params.fail_on_error
        )
        self.params.error_quit_count = get_int_setting(
            "ERROR_QUIT_COUNT", self.params.error_quit_count
        )

    def log_params(self) -> None:
        """Log parameter summary and save it."""
        assert self.params is not None, "Must call get_params() first"
        logger.info(self.params)
        self.params.save(self.outdir)

    def check_params(self) -> None:
        """Validate parameter constraints."""
        assert self.params is not None, "Must call get_params() first"
        self.params.check()

    def get_results(self) -> None:
        """Run the bench."""
        assert self.params is not None, "Must call get_params() first"
        self.results = BenchEnv(self.params).run()

    def check_results(self) -> None:
        """Re-validate the results (the bench already ran the checks once)."""
        assert self.results is not None, "Must call get_results() first"
        self.results.check()

    def log_results(self) -> None:
        """Log scalar results summary."""
        assert self.results is not None, "Must call get_results() first"
        logger.info("%s:\n%s", self.results_name, self.results.scalars_to_str())

    def save_results(self) -> None:
        """Write all results data to files in the output directory."""
        assert self.results is not None, "Must call get_results() first"
        self.results.save(self.outdir, self.results_name)

    def handle_results(self) -> None:
        """Raise ValueError if result validation checks did not pass."""
        assert self.results is not None, "Must call get_results() first"
        name = self.results.__class__.__name__
        s = f"{name}: {self.results.basic_checks_pass=}"
        if self.results.basic_checks_pass:
            logger.info(green(s))
        else:
            logger.error(red(s))
            raise ValueError("Result validation failed")


def _get_outdir(spec_file: str, user_outdir: str | None, multi: bool) -> Path:
    """
    Determine output directory for one spec.

    Uses command-line override if provided (one subdirectory per spec when
    several specs are given), otherwise a directory named after the spec file.
    """
    spec_path = Path(spec_file)
    if user_outdir:
        outdir = Path(user_outdir)
        if multi:
            outdir = outdir / spec_path.stem
    else:
        outdir = Path(f"out_cdc_fifo_sim_{spec_path.stem}")
    # Clean output directory: delete contents if it exists, then create it
    if outdir.exists():
        shutil.rmtree(outdir)
    return ensure_dir(outdir, make_if_not_exists=True)


def _log_elapsed_time(start_time: float, spec_file: str) -> None:
    """Log elapsed time in HH:MM:SS format since start_time."""
    elapsed_time = time.time() - start_time
    hours, remainder = divmod(int(elapsed_time), 3600)
    minutes, seconds = divmod(remainder, 60)
    logger.info("Completed %s in %d:%02d:%02d", spec_file, hours, minutes, seconds)


def main(
    argv: Sequence[str] | None = None,
) -> int:
    """
    Run the bench for every spec file given on the command line.

    Returns 0 on success; a failing spec raises ValueError.
    """
    args = get_args(argv, "CDC FIFO bench")

    for spec_file in args.spec:
        start_time = time.time()
        outdir = _get_outdir(spec_file, args.outdir, len(args.spec) > 1)
        log_file = outdir / "run.log"
        configure_logger(args.verbosity, log_file)
        logger.info("Logging to console and %s", log_file)

        solver = BenchSolver(outdir, args.results_name)
        solver.run(spec_file, args.seed)

        _log_elapsed_time(start_time, spec_file)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
