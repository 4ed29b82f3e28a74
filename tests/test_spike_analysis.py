"""
Tests for spike train statistics, stimuli, plotting and the command line runner.
"""
import math

import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from analysis.spike_analysis import (
    isi_statistics, mean_firing_rate, population_rate, first_spike_phases,
    phase_uniformity, spikes_per_slot,
)
from circuit.event_list import SpikeEvent
from models.stimulus import constant_frames, step_frames, grating_frames


class TestISIStatistics:

    def test_regular_train(self):
        st = isi_statistics(np.arange(10) * 0.02)
        assert st['n_isi'] == 9
        assert st['mean'] == pytest.approx(0.02)
        assert st['var'] == pytest.approx(0.0, abs=1e-15)
        assert st['cv'] == pytest.approx(0.0, abs=1e-6)

    def test_too_short(self):
        st = isi_statistics([0.1, 0.2])
        assert math.isnan(st['mean'])

    def test_exponential_intervals_fano(self):
        rng = np.random.default_rng(0)
        times = np.cumsum(rng.exponential(1.0, size=20000))
        st = isi_statistics(times)
        assert st['fano'] == pytest.approx(1.0, rel=0.1)
        assert st['cv'] == pytest.approx(1.0, rel=0.05)


class TestRates:

    def test_mean_firing_rate(self):
        events = [SpikeEvent(0, 0.1), SpikeEvent(1, 0.2), SpikeEvent(0, 0.3)]
        assert mean_firing_rate(events, 0, 2.0) == pytest.approx(1.0)
        assert mean_firing_rate(events, 0, 0.0) == 0.0

    def test_population_rate(self):
        events = [SpikeEvent(0, 0.1)] * 10
        assert population_rate(events, 5, 1.0) == pytest.approx(2.0)


class TestPhases:

    def test_first_spike_phases(self):
        events = [SpikeEvent(1, 0.01), SpikeEvent(0, 0.02), SpikeEvent(1, 0.03)]
        np.testing.assert_allclose(first_spike_phases(events, 0.04), [0.5, 0.25])

    def test_uniform_passes(self):
        phases = np.random.default_rng(3).uniform(size=2000)
        _, p = phase_uniformity(phases)
        assert p > 0.001

    def test_clustered_fails(self):
        _, p = phase_uniformity(np.full(500, 0.5))
        assert p < 1e-6


class TestSpikesPerSlot:

    def test_counts(self):
        counts = spikes_per_slot([0.0005, 0.0007, 0.0021], 0.001, 3)
        np.testing.assert_array_equal(counts, [2, 0, 1])


class TestStimulus:

    def test_constant_frames(self):
        frames = list(constant_frames((2, 3), 5.0, 10.0, 2.0))
        assert [f.time_ms for f in frames] == [0.0, 2.0, 4.0, 6.0, 8.0]
        assert frames[0].values.shape == (2, 3)
        assert np.all(frames[-1].values == 5.0)

    def test_step_frames(self):
        frames = list(step_frames((1, 1), 0.0, 9.0, 5.0, 10.0))
        assert frames[4].values[0, 0] == 0.0
        assert frames[5].values[0, 0] == 9.0

    def test_grating_bounds(self):
        for f in grating_frames((8, 8), 20.0, mean=2.0, contrast=0.5):
            assert f.values.min() >= 1.0 - 1e-12
            assert f.values.max() <= 3.0 + 1e-12


class TestRunAll:

    def test_main_writes_spike_file(self, tmp_path):
        import run_all
        out = tmp_path / "spikes.spk"
        code = run_all.main(['--width', '3', '--height', '3', '--duration', '50',
                             '--output', str(out), '--param', 'Spike_std_dev=-1'])
        assert code == 0
        assert out.exists()

    def test_main_rejects_bad_parameter(self, tmp_path):
        import run_all
        code = run_all.main(['--duration', '5', '--output', str(tmp_path / "s.spk"),
                             '--param', 'Min_period=-3'])
        assert code == 2


class TestPlotting:

    def test_figures_written(self, tmp_path):
        import matplotlib
        matplotlib.use('Agg')
        from analysis.plotting import plot_spike_raster, plot_isi_histogram, plot_rate_curve

        events = [SpikeEvent(0, 0.01), SpikeEvent(1, 0.015), SpikeEvent(0, 0.03)]
        plot_spike_raster(events, save_name='raster.png', figures_dir=str(tmp_path))
        plot_isi_histogram([0.01, 0.03, 0.04], save_name='isi.png', figures_dir=str(tmp_path))
        plot_rate_curve([0, 1, 2], [0, 10, 20], save_name='rate.png', figures_dir=str(tmp_path))
        for name in ('raster.png', 'isi.png', 'rate.png'):
            assert (tmp_path / name).exists()
