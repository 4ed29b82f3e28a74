"""
Synthetic activation frames for driving the spiking output.

Stand-ins for the upstream retina stages (photoreceptor, bipolar,
amacrine models): each generator yields one SimulationFrame per slot.

  constant   same value on every pixel for the whole run
  step       baseline, then a different value from onset_ms on
  grating    drifting sinusoidal grating, spatial/temporal frequency
  flicker    uniform random luminance redrawn every slot
"""

from dataclasses import dataclass

import numpy as np


@dataclass
class SimulationFrame:
    """Activation frame valid during [time_ms, time_ms + step_ms)."""
    values: np.ndarray
    time_ms: float
    step_ms: float


def _slot_times(duration_ms, step_ms):
    n_steps = int(round(duration_ms / step_ms))
    return [k * step_ms for k in range(n_steps)]


def constant_frames(shape, value, duration_ms, step_ms=1.0):
    frame = np.full(shape, float(value))
    for t in _slot_times(duration_ms, step_ms):
        yield SimulationFrame(frame, t, step_ms)


def step_frames(shape, baseline, value, onset_ms, duration_ms, step_ms=1.0):
    before = np.full(shape, float(baseline))
    after = np.full(shape, float(value))
    for t in _slot_times(duration_ms, step_ms):
        yield SimulationFrame(after if t >= onset_ms else before, t, step_ms)


def grating_frames(shape, duration_ms, step_ms=1.0, mean=1.0, contrast=1.0,
                   spatial_freq=0.1, temporal_freq_hz=2.0, orientation_deg=0.0):
    """Drifting sinusoidal grating.

    Parameters
    ----------
    spatial_freq : float
        Cycles per pixel.
    temporal_freq_hz : float
        Drift frequency (cycles per second).
    orientation_deg : float
        Direction of the wave vector.
    """
    ny, nx = shape
    yy, xx = np.mgrid[0:ny, 0:nx]
    theta = np.deg2rad(orientation_deg)
    spatial_phase = 2 * np.pi * spatial_freq * (xx * np.cos(theta) + yy * np.sin(theta))
    for t in _slot_times(duration_ms, step_ms):
        temporal_phase = 2 * np.pi * temporal_freq_hz * t / 1000.0
        values = mean * (1.0 + contrast * np.sin(spatial_phase - temporal_phase))
        yield SimulationFrame(values, t, step_ms)


def flicker_frames(shape, duration_ms, step_ms=1.0, mean=1.0, std=0.5, rng=None):
    """Spatially uniform luminance drawn from N(mean, std) every slot."""
    if rng is None:
        rng = np.random.default_rng()
    for t in _slot_times(duration_ms, step_ms):
        yield SimulationFrame(np.full(shape, rng.normal(mean, std)), t, step_ms)
