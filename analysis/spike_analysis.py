"""
Spike train statistics for the ganglion cell output.

ISI mean/variance, coefficient of variation and Fano factor (variance to
mean ratio of the intervals, in seconds) let a run be compared against the
rate model: a deterministic train has zero ISI variance, a train with
spike_jitter_std_dev = s has ISI variance (s/1000)^2, and the Poisson mode
has variance equal to the mean.
"""

import numpy as np
from scipy import stats


def isi_statistics(spike_times):
    """Inter-spike interval statistics of one spike train.

    Parameters
    ----------
    spike_times : array-like
        Spike times (s) in ascending order.

    Returns
    -------
    stats : dict
        n_isi, mean, var, cv, fano. NaN when fewer than 2 intervals.
    """
    isis = np.diff(np.asarray(spike_times, dtype=float))
    if len(isis) < 2:
        return {'n_isi': len(isis), 'mean': float('nan'), 'var': float('nan'),
                'cv': float('nan'), 'fano': float('nan')}
    mean = float(np.mean(isis))
    var = float(np.var(isis, ddof=1))
    return {
        'n_isi': len(isis),
        'mean': mean,
        'var': var,
        'cv': float(np.sqrt(var) / mean) if mean > 0 else float('nan'),
        'fano': var / mean if mean > 0 else float('nan'),
    }


def mean_firing_rate(events, neuron, duration_s):
    """Spikes per second of one neuron over the run."""
    if duration_s <= 0:
        return 0.0
    n = sum(1 for e in events if e[0] == neuron)
    return n / duration_s


def population_rate(events, n_neurons, duration_s):
    """Mean firing rate (Hz) across n_neurons."""
    if duration_s <= 0 or n_neurons == 0:
        return 0.0
    return len(events) / (n_neurons * duration_s)


def first_spike_phases(events, period_s):
    """First spike time of each neuron divided by its firing period.

    With a constant input and a randomized initial state these phases
    should be uniform on [0, 1].
    """
    first = {}
    for neuron, t in events:
        if neuron not in first:
            first[neuron] = t
    return np.array([first[n] / period_s for n in sorted(first)])


def phase_uniformity(phases):
    """Kolmogorov-Smirnov test of phases against Uniform[0, 1).

    Returns
    -------
    statistic, p_value : float
    """
    result = stats.kstest(np.asarray(phases, dtype=float), 'uniform')
    return float(result.statistic), float(result.pvalue)


def spikes_per_slot(spike_times, step_s, n_slots):
    """Histogram of spike counts per simulation slot."""
    edges = np.arange(n_slots + 1) * step_s
    counts, _ = np.histogram(np.asarray(spike_times, dtype=float), bins=edges)
    return counts
