# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/conftest.py

"""Shared fixtures."""

from __future__ import annotations

import logging
import os

import pytest

os.environ.setdefault("MPLBACKEND", "Agg")

# pylint: disable-next=wrong-import-position
from cdc_fifo.bench import BenchParams  # noqa: E402


@pytest.fixture
def make_params():
    """Factory for checked BenchParams with small, fast defaults."""

    def _make(**kw) -> BenchParams:
        base = {
            "depth": 8,
            "width": 8,
            "clk_a_freq": 100_000_000,
            "clk_b_freq": 71_000_000,
            "clk_b_phase": 3_000,
            "duration": 5_000_000,
            "fail_on_error": False,
            "seed": 1,
        }
        base.update(kw)
        params = BenchParams(**base)
        params.check()
        return params

    return _make


@pytest.fixture
def restore_root_logger():
    """Undo handler and level changes made by configure_logger()."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
