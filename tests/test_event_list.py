"""
Tests for spike event ordering.
"""
import numpy as np
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from circuit.event_list import EventList, SpikeEvent, sort_slot_events


class TestSortSlotEvents:

    def test_time_then_neuron(self):
        events = [SpikeEvent(4, 0.002), SpikeEvent(1, 0.003), SpikeEvent(2, 0.002),
                  SpikeEvent(0, 0.001)]
        assert sort_slot_events(events) == [
            SpikeEvent(0, 0.001), SpikeEvent(2, 0.002), SpikeEvent(4, 0.002),
            SpikeEvent(1, 0.003),
        ]

    def test_empty(self):
        assert sort_slot_events([]) == []


class TestEventList:

    def test_extend_slot_keeps_global_order(self):
        lst = EventList()
        lst.extend_slot([SpikeEvent(3, 0.0005), SpikeEvent(1, 0.0002)])
        lst.extend_slot([SpikeEvent(0, 0.0019), SpikeEvent(2, 0.0011)])
        assert [e.neuron for e in lst] == [1, 3, 2, 0]
        assert lst.is_sorted()
        assert len(lst) == 4

    def test_is_sorted_detects_disorder(self):
        lst = EventList([SpikeEvent(0, 0.2), SpikeEvent(0, 0.1)])
        assert not lst.is_sorted()

    def test_as_arrays(self):
        lst = EventList([SpikeEvent(2, 0.1), SpikeEvent(5, 0.2)])
        neurons, times = lst.as_arrays()
        np.testing.assert_array_equal(neurons, [2, 5])
        np.testing.assert_array_equal(times, [0.1, 0.2])

    def test_as_arrays_empty(self):
        neurons, times = EventList().as_arrays()
        assert neurons.size == 0 and times.size == 0

    def test_per_neuron(self):
        lst = EventList([SpikeEvent(1, 0.1), SpikeEvent(0, 0.15), SpikeEvent(1, 0.3)])
        trains = lst.per_neuron()
        np.testing.assert_array_equal(trains[1], [0.1, 0.3])
        np.testing.assert_array_equal(trains[0], [0.15])

    def test_clear(self):
        lst = EventList([SpikeEvent(1, 0.1)])
        lst.clear()
        assert len(lst) == 0
