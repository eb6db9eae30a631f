# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/test_cli.py

from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest

from cdc_fifo.bench import WitnessRow
from cdc_fifo.tools import fifo_sim

SPEC = """\
depth: 8
width: 8
clk_a_freq: 100 MHz
clk_b_freq: 71 MHz
clk_b_phase: 3 ns
duration: 3 us
pop_prob: 0.8
resets:
  - {start: 0 ns, length: 100 ns}
seed: {seed}
"""

EXAMPLES = sorted((Path(__file__).parent.parent / "examples").glob("*.yaml"))


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, restore_root_logger):
    for name in ("SEED", "VERBOSITY", "FAIL_ON_ERROR", "ERROR_QUIT_COUNT"):
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(f"CDC_FIFO_{name}", raising=False)


def _write_spec(path: Path, seed="1") -> Path:
    path.write_text(SPEC.replace("{seed}", seed), encoding="utf-8")
    return path


def test_run_writes_outputs(tmp_path):
    spec = _write_spec(tmp_path / "small.yaml")
    outdir = tmp_path / "out"
    assert fifo_sim.main([str(spec), "--outdir", str(outdir)]) == 0
    for name in (
        "run.log",
        "BenchModel.json",
        "BenchParams.json",
        "results_scalars.json",
        "results_witness.csv",
        "results_plot.png",
    ):
        assert (outdir / name).is_file(), name
    scalars = json.loads((outdir / "results_scalars.json").read_text())
    assert scalars["basic_checks_pass"] is True
    assert scalars["err_cnt"] == 0
    assert scalars["vect_cnt"] > 0
    with (outdir / "results_witness.csv").open(newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == list(WitnessRow._fields)
    assert len(rows) > 100
    log = (outdir / "run.log").read_text()
    assert "TEST PASSED" in log
    assert "\033[" not in log


def test_results_name_and_default_outdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    spec = _write_spec(tmp_path / "small.yaml")
    stale = tmp_path / "out_cdc_fifo_sim_small"
    stale.mkdir()
    (stale / "old.txt").write_text("x")
    assert fifo_sim.main([str(spec), "--results-name", "r1"]) == 0
    assert (stale / "r1_scalars.json").is_file()
    assert not (stale / "old.txt").exists()


def test_seed_precedence(tmp_path, monkeypatch):
    spec = _write_spec(tmp_path / "small.yaml", seed="7")
    outdir = tmp_path / "out"

    def seed_used():
        return json.loads((outdir / "BenchParams.json").read_text())["seed"]

    fifo_sim.main([str(spec), "--outdir", str(outdir)])
    assert seed_used() == 7
    monkeypatch.setenv("CDC_FIFO_SEED", "0x20")
    fifo_sim.main([str(spec), "--outdir", str(outdir)])
    assert seed_used() == 32
    fifo_sim.main([str(spec), "--outdir", str(outdir), "--seed", "11"])
    assert seed_used() == 11


def test_random_seed_is_resolved(tmp_path):
    spec = _write_spec(tmp_path / "small.yaml", seed="random")
    outdir = tmp_path / "out"
    fifo_sim.main([str(spec), "--outdir", str(outdir)])
    seed = json.loads((outdir / "BenchParams.json").read_text())["seed"]
    assert 0 <= seed <= 0xFFFF_FFFF


def test_bad_seed_exits(tmp_path):
    spec = _write_spec(tmp_path / "small.yaml")
    with pytest.raises(SystemExit, match="Invalid seed"):
        fifo_sim.main([str(spec), "--outdir", str(tmp_path / "out"), "--seed", "xyz"])


def test_fail_on_error_env_override(tmp_path, monkeypatch):
    spec = _write_spec(tmp_path / "small.yaml")
    outdir = tmp_path / "out"
    monkeypatch.setenv("FAIL_ON_ERROR", "no")
    fifo_sim.main([str(spec), "--outdir", str(outdir)])
    params = json.loads((outdir / "BenchParams.json").read_text())
    assert params["fail_on_error"] is False


def test_several_specs_get_own_outdirs(tmp_path):
    a = _write_spec(tmp_path / "a.yaml")
    b = _write_spec(tmp_path / "b.yaml", seed="2")
    outdir = tmp_path / "out"
    assert fifo_sim.main([str(a), str(b), "--outdir", str(outdir)]) == 0
    assert (outdir / "a" / "results_scalars.json").is_file()
    assert (outdir / "b" / "results_scalars.json").is_file()


def test_missing_spec(tmp_path):
    with pytest.raises(SystemExit, match="not found"):
        fifo_sim.main([str(tmp_path / "nope.yaml"), "--outdir", str(tmp_path / "o")])


def test_invalid_params_raise(tmp_path):
    spec = tmp_path / "bad.yaml"
    spec.write_text(
        SPEC.replace("{seed}", "1").replace("length: 100 ns", "length: 10 ns"),
        encoding="utf-8",
    )
    with pytest.raises(ValueError, match="needs at least"):
        fifo_sim.main([str(spec), "--outdir", str(tmp_path / "out")])


@pytest.mark.parametrize("example", EXAMPLES, ids=lambda p: p.stem)
def test_examples_pass(tmp_path, example):
    assert fifo_sim.main([str(example), "--outdir", str(tmp_path / "out")]) == 0
