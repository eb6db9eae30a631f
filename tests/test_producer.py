# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/test_producer.py

from __future__ import annotations

import pytest

from cdc_fifo.model import ProducerController, PushResult, SlotStore


def _producer(depth=4, **kw):
    store = SlotStore(depth, 8)
    return store, ProducerController(store, **kw)


def _fill(prod, n, t0=0, period=10):
    return [prod.try_push(0x10 + i, t0 + i * period) for i in range(n)]


def test_accepted_push_writes_and_flips():
    store, prod = _producer()
    assert prod.try_push(0xAB, 0) is PushResult.ACCEPTED
    assert store.read(0) == 0xAB
    assert store.push.to_list() == [1, 0, 0, 0]
    assert store.push.changed_at(0) == 0
    assert (prod.head, prod.head_prev, prod.size) == (1, 0, 1)
    assert not prod.full


def test_idle_tick_changes_nothing():
    store, prod = _producer()
    assert prod.tick(reset=False, push=False, data=0x55, now=0) is PushResult.IDLE
    assert store.push.to_list() == [0, 0, 0, 0]
    assert prod.head == 0


@pytest.mark.parametrize("tracking", ["lazy", "direct"])
def test_full_after_depth_pushes_and_rejects(tracking):
    store, prod = _producer(tracking=tracking)
    assert _fill(prod, 4) == [PushResult.ACCEPTED] * 4
    assert prod.full
    assert prod.try_push(0xEE, 40) is PushResult.REJECTED
    assert store.read(0) == 0x10
    assert store.push.to_list() == [1, 1, 1, 1]
    assert prod.head == 0


@pytest.mark.parametrize("tracking", ["lazy", "direct"])
@pytest.mark.parametrize("stages", [1, 2, 3])
def test_full_clears_one_tick_after_ack_crosses(tracking, stages):
    store, prod = _producer(tracking=tracking, sync_stages=stages)
    _fill(prod, 4)
    store.ack.flip(0, 35)
    t = 40
    for _ in range(stages):
        prod.tick(reset=False, push=False, data=0, now=t)
        assert prod.full
        t += 10
    prod.tick(reset=False, push=False, data=0, now=t)
    assert not prod.full
    if tracking == "lazy":
        assert (prod.tail, prod.size) == (1, 3)


def test_lazy_retires_every_freed_slot_at_once():
    store, prod = _producer()
    _fill(prod, 4)
    for i in range(3):
        store.ack.flip(i, 41 + i)
    for t in (50, 60, 70):
        prod.tick(reset=False, push=False, data=0, now=t)
    assert (prod.tail, prod.size) == (3, 1)
    assert not prod.full


def test_falling_edge_mirrors_push_into_confirm():
    store, prod = _producer()
    prod.try_push(1, 0)
    assert store.confirm.to_list() == [0, 0, 0, 0]
    prod.falling_edge(5)
    assert store.confirm.to_list() == [1, 0, 0, 0]
    assert store.confirm.changed_at(0) == 5


def test_single_phase_never_drives_confirm():
    store, prod = _producer(commit="single_phase")
    prod.try_push(1, 0)
    prod.falling_edge(5)
    assert store.confirm.to_list() == [0, 0, 0, 0]


def test_reset_clears_state_and_rejects_push():
    store, prod = _producer()
    _fill(prod, 4)
    prod.falling_edge(35)
    assert prod.tick(reset=True, push=True, data=1, now=40) is PushResult.REJECTED
    assert prod.tick(reset=True, push=False, data=1, now=50) is PushResult.IDLE
    assert prod.in_reset
    assert (prod.head, prod.tail, prod.size, prod.full) == (0, 0, 0, False)
    assert store.push.to_list() == [0, 0, 0, 0]
    assert store.confirm.to_list() == [0, 0, 0, 0]
    # Phase 2 is held off while in reset.
    store.push.flip(0, 52)
    prod.falling_edge(55)
    assert store.confirm.to_list() == [0, 0, 0, 0]
    store.push.flip(0, 57)
    assert prod.try_push(7, 60) is PushResult.ACCEPTED
    assert not prod.in_reset


@pytest.mark.parametrize("kw", [{"commit": "three_phase"}, {"tracking": "eager"}])
def test_bad_mode(kw):
    with pytest.raises(ValueError):
        _producer(**kw)
