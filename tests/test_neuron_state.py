"""
Tests for the per-neuron state store.
"""
import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.neuron_state import NeuronStateStore
from analysis.spike_analysis import phase_uniformity


class TestAllocation:

    def test_default_first_spike_delay(self):
        store = NeuronStateStore((2, 3))
        assert store.n_neurons == 6
        assert np.all(store.last_period == 1.0)
        assert np.all(store.next_spike_time == 1.0)

    def test_custom_delay(self):
        store = NeuronStateStore((1, 4), first_spike_delay=0.5)
        assert np.all(store.last_period == 1.0)
        assert np.all(store.next_spike_time == 0.5)

    def test_no_delay_starts_silent(self):
        store = NeuronStateStore((1, 4), first_spike_delay=0)
        assert np.all(np.isinf(store.last_period))
        assert np.all(store.next_spike_time == 0.0)

    def test_reallocate_resets(self):
        store = NeuronStateStore((2, 2))
        store.next_spike_time[:] = 7.0
        store.allocate((3, 3))
        assert store.shape == (3, 3)
        assert store.n_neurons == 9
        assert np.all(store.next_spike_time == 1.0)


class TestRandomize:

    def test_phases_in_unit_interval(self):
        store = NeuronStateStore((1, 500))
        store.randomize(1.0, np.random.default_rng(0))
        assert np.all(store.last_period == 1.0)
        assert np.all(store.next_spike_time >= 0.0)
        assert np.all(store.next_spike_time <= 1.0)

    def test_phases_are_uniform(self):
        store = NeuronStateStore((1, 2000))
        store.randomize(1.0, np.random.default_rng(1))
        _, p_value = phase_uniformity(store.next_spike_time)
        assert p_value > 0.001

    def test_scaling_factor_narrows_spread(self):
        store = NeuronStateStore((1, 1000))
        store.randomize(0.25, np.random.default_rng(2))
        assert store.next_spike_time.min() >= 0.75
        assert store.next_spike_time.max() <= 1.0

    def test_large_factor_is_clipped(self):
        store = NeuronStateStore((1, 1000))
        store.randomize(3.0, np.random.default_rng(3))
        assert store.next_spike_time.min() >= 0.0


class TestShiftAndCopy:

    def test_shift_only_selected(self):
        store = NeuronStateStore((1, 5))
        store.shift(np.array([1, 3]), 0.5)
        np.testing.assert_allclose(store.next_spike_time, [1.0, 1.5, 1.0, 1.5, 1.0])

    def test_catch_up_uses_each_neuron_gap(self):
        store = NeuronStateStore((1, 3))
        store.mark_covered([0], 100.0)
        store.mark_covered([1], 40.0)
        shifted = store.catch_up([0, 1, 2], 100.0)
        np.testing.assert_array_equal(shifted, [1, 2])
        np.testing.assert_allclose(store.next_spike_time, [1.0, 1.06, 1.1])

    def test_mark_covered_never_moves_back(self):
        store = NeuronStateStore((1, 2))
        store.mark_covered([0, 1], 50.0)
        store.mark_covered([0], 20.0)
        np.testing.assert_array_equal(store.covered_until, [50.0, 50.0])

    def test_unallocated_store_is_empty(self):
        store = NeuronStateStore()
        assert store.n_neurons == 0
        assert store.shape is None

    def test_copy_is_independent(self):
        store = NeuronStateStore((1, 3))
        other = store.copy()
        other.next_spike_time[0] = 9.0
        assert store.next_spike_time[0] == 1.0
        assert other.shape == store.shape

    def test_snapshot(self):
        store = NeuronStateStore((1, 2))
        last, nxt = store.snapshot()
        last[0] = 5.0
        assert store.last_period[0] == pytest.approx(1.0)
