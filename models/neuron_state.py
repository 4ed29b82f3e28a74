"""
Per-neuron spike prediction state.

Each ganglion cell (one per pixel, indexed by the C-order flattened pixel
offset) keeps two values, both in seconds:

  last_period      firing period of the last non-silent input
  next_spike_time  predicted time of the next spike for that period

plus covered_until (ms), the end of the last slot in which it was
converted.

The ratio (next_spike_time - t_slot) / last_period is the firing phase
that the slot recurrence carries over to a new input.
"""

import logging

import numpy as np

logger = logging.getLogger(__name__)


class NeuronStateStore:
    """Flat state arrays for a grid of ganglion cells."""

    def __init__(self, shape=None, first_spike_delay=1.0):
        self.first_spike_delay = first_spike_delay
        self.shape = None
        self.last_period = np.zeros(0)
        self.next_spike_time = np.zeros(0)
        self.covered_until = np.zeros(0)
        if shape is not None:
            self.allocate(shape)

    @property
    def n_neurons(self):
        return self.last_period.size

    def allocate(self, shape):
        """(Re)allocate state for a grid of the given shape.

        The first spike is delayed by first_spike_delay times the first
        firing period. A delay of 0 starts from a silent state instead.
        """
        shape = tuple(int(s) for s in shape)
        n = int(np.prod(shape)) if shape else 0
        if self.first_spike_delay == 0:
            last_per, next_spk = np.inf, 0.0
        else:
            # Only the ratio next_spike_time / last_period matters here
            last_per, next_spk = 1.0, float(self.first_spike_delay)

        self.shape = shape
        self.last_period = np.full(n, last_per, dtype=float)
        self.next_spike_time = np.full(n, next_spk, dtype=float)
        self.covered_until = np.zeros(n)
        logger.debug("Allocated state for %d neurons (grid %s)", n, shape)

    def randomize(self, random_init, rng):
        """Randomize the initial firing phase of every neuron.

        last_period is set to 1 s and next_spike_time is drawn so that
        next_spike_time / last_period lies in [1 - random_init, 1].
        """
        n = self.n_neurons
        self.last_period[:] = 1.0
        u = rng.uniform(0.0, 1.0, size=n)
        self.next_spike_time[:] = np.maximum(1.0 - random_init * u, 0.0)

    def shift(self, indices, delta_s):
        """Push the predictions of the given neurons delta_s into the future."""
        self.next_spike_time[indices] += delta_s

    def catch_up(self, indices, t_ms, tolerance_ms=0.0):
        """Treat the time each neuron was not converted before t_ms as silence.

        Predictions of the given neurons are pushed forward by their own gap
        since covered_until. Returns the indices that were shifted.
        """
        indices = np.asarray(indices, dtype=np.intp)
        gap_ms = t_ms - self.covered_until[indices]
        behind = gap_ms > tolerance_ms
        self.shift(indices[behind], gap_ms[behind] / 1000.0)
        return indices[behind]

    def mark_covered(self, indices, t_end_ms):
        indices = np.asarray(indices, dtype=np.intp)
        self.covered_until[indices] = np.maximum(self.covered_until[indices], t_end_ms)

    def snapshot(self):
        return self.last_period.copy(), self.next_spike_time.copy()

    def copy(self):
        other = NeuronStateStore.__new__(NeuronStateStore)
        other.first_spike_delay = self.first_spike_delay
        other.shape = self.shape
        other.last_period = self.last_period.copy()
        other.next_spike_time = self.next_spike_time.copy()
        other.covered_until = self.covered_until.copy()
        return other
