"""
Plotting utilities for spiking output runs.
"""

import numpy as np
import matplotlib.pyplot as plt
import os


FIGURES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'figures')


def ensure_figures_dir(figures_dir=None):
    os.makedirs(figures_dir or FIGURES_DIR, exist_ok=True)


def _save(fig, save_name, figures_dir):
    if save_name:
        ensure_figures_dir(figures_dir)
        plt.savefig(os.path.join(figures_dir or FIGURES_DIR, save_name),
                    dpi=150, bbox_inches='tight')
    plt.close(fig)
    return fig


def plot_spike_raster(events, duration_s=None, title='', save_name=None,
                      figures_dir=None):
    """Raster of the output spikes (one row per neuron index).

    Parameters
    ----------
    events : iterable of (neuron, time)
        Output of SpikingOutput.events.
    duration_s : float, optional
        Only plot the first N seconds.
    """
    events = list(events)
    neurons = np.array([e[0] for e in events], dtype=int)
    times = np.array([e[1] for e in events], dtype=float)
    if duration_s is not None:
        mask = times <= duration_s
        neurons, times = neurons[mask], times[mask]

    fig, ax = plt.subplots(figsize=(12, 5))
    ax.scatter(times, neurons, marker='|', s=30, color='black', linewidths=0.8)
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Neuron index')
    ax.set_title(title if title else 'Ganglion Cell Output')
    plt.tight_layout()
    return _save(fig, save_name, figures_dir)


def plot_isi_histogram(spike_times, bins=50, title='', save_name=None,
                       figures_dir=None):
    """Histogram of inter-spike intervals (ms) of one neuron."""
    isis_ms = np.diff(np.asarray(spike_times, dtype=float)) * 1000.0
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.hist(isis_ms, bins=bins, color='steelblue', edgecolor='navy', linewidth=0.3)
    ax.set_xlabel('ISI (ms)')
    ax.set_ylabel('Count')
    ax.set_title(title)
    plt.tight_layout()
    return _save(fig, save_name, figures_dir)


def plot_rate_curve(inputs, rates_hz, save_name=None, figures_dir=None):
    """Firing rate vs pixel value (input-output curve of the rate model)."""
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(inputs, rates_hz, 'ko-', markersize=4)
    ax.set_xlabel('Input value', fontsize=12)
    ax.set_ylabel('Firing rate (Hz)', fontsize=12)
    ax.grid(True, alpha=0.3)
    plt.tight_layout()
    return _save(fig, save_name, figures_dir)
