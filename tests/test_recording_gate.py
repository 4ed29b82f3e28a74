"""
Tests for the recording window and pixel subsampling.
"""
import math

import numpy as np
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from circuit.recording_gate import GatingConfig, RecordingGate


class TestWindow:

    def test_default_admits_everything(self):
        gate = RecordingGate()
        assert gate.admits_frame(0.0, 1.0)
        assert gate.admits_frame(1e9, 1.0)

    def test_bounds(self):
        gate = RecordingGate(GatingConfig(start_time=10.0, end_time=20.0))
        assert not gate.admits_frame(9.0, 1.0)
        assert gate.admits_frame(10.0, 1.0)
        assert gate.admits_frame(19.0, 1.0)
        assert not gate.admits_frame(19.5, 1.0)
        assert not gate.admits_frame(20.0, 1.0)


class TestSubsampling:

    def test_all_pixels_by_default(self):
        np.testing.assert_array_equal(RecordingGate().admitted_indices(5), [0, 1, 2, 3, 4])

    def test_first_increment_total(self):
        gate = RecordingGate(GatingConfig(first_index=2, index_increment=3, total_inputs=4))
        np.testing.assert_array_equal(gate.admitted_indices(20), [2, 5, 8, 11])

    def test_grid_end_limits_count(self):
        gate = RecordingGate(GatingConfig(first_index=2, index_increment=3, total_inputs=100))
        np.testing.assert_array_equal(gate.admitted_indices(10), [2, 5, 8])

    def test_zero_increment_admits_one_pixel(self):
        gate = RecordingGate(GatingConfig(first_index=4, index_increment=0, total_inputs=math.inf))
        np.testing.assert_array_equal(gate.admitted_indices(10), [4])

    def test_zero_total(self):
        gate = RecordingGate(GatingConfig(total_inputs=0))
        assert gate.admitted_indices(10).size == 0

    def test_first_index_beyond_grid(self):
        gate = RecordingGate(GatingConfig(first_index=12))
        assert gate.admitted_indices(10).size == 0
