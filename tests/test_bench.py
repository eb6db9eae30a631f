# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/test_bench.py

from __future__ import annotations

import pytest

from cdc_fifo.bench import BenchEnv


def _run(params):
    env = BenchEnv(params)
    return env, env.run()


def _assert_clean(results):
    assert results.basic_checks_pass, results.msg
    assert results.err_cnt == 0
    assert results.gap_cnt == 0
    assert results.protocol_err_cnt == 0
    assert results.vect_cnt > 0


def _assert_counting(results, width):
    mask = (1 << width) - 1
    for seg in results.segments:
        assert seg[0] == 0
        assert all(b == (a + 1) & mask for a, b in zip(seg, seg[1:]))


@pytest.mark.parametrize(
    "push_prob, pop_prob",
    [(0.9, 0.8), (1.0, 1.0)],
    ids=["random", "every_tick"],
)
def test_depth32_with_reset_and_wraparound(make_params, push_prob, pop_prob):
    params = make_params(
        depth=32,
        width=8,
        duration=40_000_000,
        push_prob=push_prob,
        pop_prob=pop_prob,
        pop_start=1_000_000,
        resets=[(0, 100_000), (20_000_000, 200_000)],
    )
    _, results = _run(params)
    _assert_clean(results)
    _assert_counting(results, 8)
    assert len(results.segments) == 2
    # Enough traffic to wrap the 8-bit counter in both reset epochs.
    assert all(len(seg) > 256 for seg in results.segments)
    assert results.full_hits > 0
    assert results.a_resets > 0 and results.b_resets > 0


def test_depth1_push_then_stall(make_params):
    params = make_params(
        depth=1,
        width=4,
        tracking="direct",
        clk_a_freq=200_000_000,
        clk_b_freq=50_000_000,
        clk_b_phase=0,
        duration=10_000_000,
        pop_start=2_000_000,
    )
    _, results = _run(params)
    _assert_clean(results)
    _assert_counting(results, 4)
    stalled = [
        r
        for r in results.witness
        if r.domain == "a" and 1_000_000 < r.time_ps < 2_000_000
    ]
    assert stalled
    assert all(r.full == 1 and r.occupancy == 1 and r.data_valid == 1 for r in stalled)
    assert results.rejects == 0  # the driver never pushes into a full FIFO
    assert results.max_occupancy == 1


@pytest.mark.parametrize(
    "clk_a_freq, clk_b_freq",
    [(250_000_000, 25_000_000), (25_000_000, 250_000_000), (97_000_000, 13_000_000)],
)
@pytest.mark.parametrize("tracking", ["lazy", "direct"])
def test_extreme_clock_ratios(make_params, clk_a_freq, clk_b_freq, tracking):
    slow = max(round(1e12 / clk_a_freq), round(1e12 / clk_b_freq))
    params = make_params(
        depth=4,
        tracking=tracking,
        clk_a_freq=clk_a_freq,
        clk_b_freq=clk_b_freq,
        clk_b_phase=1_100,
        duration=400 * slow,
        resets=[(100 * slow, 3 * slow)],
    )
    _, results = _run(params)
    _assert_clean(results)
    _assert_counting(results, 8)


def test_fifo_reads_empty_inside_reset(make_params):
    params = make_params(
        duration=3_500_000,
        pop_prob=0.3,
        resets=[(3_000_000, 1_000_000)],
    )
    env, results = _run(params)
    _assert_clean(results)
    assert env.fifo.producer.in_reset and env.fifo.consumer.in_reset
    assert env.fifo.is_empty()
    assert not env.fifo.full
    assert not env.fifo.data_valid
    assert env.ref_model.flushes == 1
    assert len(env.ref_model) == 0


@pytest.mark.parametrize("setup_window", [0, 400])
def test_lazy_and_direct_tracking_match(make_params, setup_window):
    def run(tracking):
        params = make_params(
            depth=6,
            tracking=tracking,
            setup_window=setup_window,
            duration=8_000_000,
            push_prob=0.95,
            pop_prob=0.6,
            resets=[(4_000_000, 50_000)],
        )
        _, results = _run(params)
        _assert_clean(results)
        full_trace = [(r.time_ps, r.full) for r in results.witness if r.domain == "a"]
        return results.consumed, full_trace

    lazy_consumed, lazy_full = run("lazy")
    direct_consumed, direct_full = run("direct")
    assert lazy_consumed == direct_consumed
    assert lazy_full == direct_full
    assert any(full for _, full in lazy_full)


def test_single_phase_commit(make_params):
    params = make_params(commit="single_phase", duration=6_000_000, pop_prob=0.7)
    _, results = _run(params)
    _assert_clean(results)
    _assert_counting(results, 8)


def test_metastable_synchronizers_keep_order(make_params):
    params = make_params(
        depth=16,
        sync_stages=3,
        clk_a_freq=333_000_000,
        clk_b_freq=289_000_000,
        clk_b_phase=700,
        setup_window=150,
        duration=20_000_000,
        push_prob=0.7,
        pop_prob=0.7,
        seed=0xC0FFEE,
    )
    env, results = _run(params)
    _assert_clean(results)
    _assert_counting(results, 8)
    syncs = [
        env.fifo.producer.ack_sync,
        env.fifo.consumer.push_sync,
        env.fifo.consumer.confirm_sync,
    ]
    assert sum(s.metastable_cnt for s in syncs) > 0


@pytest.mark.parametrize("setup_window", [0, 500])
def test_full_deasserts_within_sync_latency(make_params, setup_window):
    params = make_params(
        depth=4,
        setup_window=setup_window,
        duration=6_000_000,
        push_prob=1.0,
        pop_prob=0.4,
    )
    _, results = _run(params)
    _assert_clean(results)
    extra = 1 if setup_window else 0
    assert results.full_latency_bound_ps == (2 + 1 + extra) * params.period_a_ps
    assert 0 < results.full_latency_max_ps <= results.full_latency_bound_ps


def test_same_seed_same_run(make_params):
    params = make_params(setup_window=300, duration=3_000_000, seed=42)
    _, first = _run(params)
    _, second = _run(params)
    assert first.consumed == second.consumed
    assert first.witness == second.witness


def test_broken_full_flag_is_caught(make_params, monkeypatch):
    params = make_params(
        depth=4,
        clk_a_freq=250_000_000,
        clk_b_freq=25_000_000,
        duration=2_000_000,
    )
    env = BenchEnv(params)
    monkeypatch.setattr(env.fifo.producer, "_calc_full", lambda ack_seen: False)
    results = env.run()
    assert not results.basic_checks_pass
    assert results.protocol_err_cnt > 0
    assert "protocol violations" in results.msg


def test_mismatch_raises_when_fail_on_error(make_params, monkeypatch):
    params = make_params(duration=2_000_000, fail_on_error=True)
    env = BenchEnv(params)
    write = env.fifo.store.write
    monkeypatch.setattr(env.fifo.store, "write", lambda i, d: write(i, d ^ 1))
    with pytest.raises(AssertionError, match="error_quit_count"):
        env.run()
