"""
Spike events and the run-wide ordered event list.

Spikes of one simulation slot are sorted by (time, neuron) before being
appended. Slots only emit times inside their own [ts, ts + dt) window, so
appending slot after slot keeps the whole list ordered.
"""

from typing import NamedTuple

import numpy as np


class SpikeEvent(NamedTuple):
    """One output spike: flat neuron (pixel) index and time in seconds."""
    neuron: int
    time: float

    def sort_key(self):
        return (self.time, self.neuron)


def sort_slot_events(events):
    """Stable sort by time, then neuron index."""
    return sorted(events, key=SpikeEvent.sort_key)


class EventList:
    """Growing, time-ordered list of SpikeEvent."""

    def __init__(self, events=None):
        self._events = list(events) if events is not None else []

    def extend_slot(self, slot_events):
        """Sort one slot's spikes and append them. Returns them sorted."""
        ordered = sort_slot_events(slot_events)
        self._events.extend(ordered)
        return ordered

    def clear(self):
        self._events.clear()

    def __len__(self):
        return len(self._events)

    def __iter__(self):
        return iter(self._events)

    def __getitem__(self, idx):
        return self._events[idx]

    def as_list(self):
        return list(self._events)

    def as_arrays(self):
        """(neurons, times) numpy arrays in list order."""
        if not self._events:
            return np.zeros(0, dtype=np.int64), np.zeros(0, dtype=float)
        neurons = np.fromiter((e.neuron for e in self._events), dtype=np.int64,
                              count=len(self._events))
        times = np.fromiter((e.time for e in self._events), dtype=float,
                            count=len(self._events))
        return neurons, times

    def per_neuron(self):
        """Dict neuron index -> array of its spike times."""
        trains = {}
        for neuron, t in self._events:
            trains.setdefault(neuron, []).append(t)
        return {n: np.array(ts) for n, ts in trains.items()}

    def is_sorted(self):
        keys = [e.sort_key() for e in self._events]
        return all(a <= b for a, b in zip(keys, keys[1:]))
