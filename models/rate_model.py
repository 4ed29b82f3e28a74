"""
Ganglion cell input-to-period conversion.

Maps a pixel activation onto a firing period (inter-spike interval, s):

  period = 1 / ((x - threshold) * gain + 1 / max_period)

Below threshold the cell is silent (period = inf). Optional stochastic
output draws the period from a Gamma distribution whose mean is the
deterministic period, as observed in rat ganglion cells
(doi:10.1017/S095252380808067X). A negative spike_jitter_std_dev sets the
ISI variance equal to the mean (Fano factor 1, Poisson-like counts).
The period is saturated by a refractory minimum which can itself be
jittered with Gaussian noise (soft limit).
"""

import math
from dataclasses import dataclass

import numpy as np

_TINY = float(np.finfo(float).tiny)


@dataclass
class RateModelConfig:
    """Conversion parameters. Periods and deviations in ms."""
    min_period: float = 0.0
    longest_sustained_period: float = math.inf
    input_threshold: float = 0.0
    gain: float = 1.0                      # Hz per input unit
    spike_jitter_std_dev: float = 0.0      # < 0 -> Fano factor 1
    min_period_std_dev: float = 0.0        # > 0 -> soft refractory limit

    @property
    def stochastic(self):
        return self.spike_jitter_std_dev != 0.0 or self.min_period_std_dev > 0.0


def _offset_rate(longest_sustained_period_ms):
    """Firing rate (Hz) reached just above threshold."""
    max_period_s = longest_sustained_period_ms / 1000.0
    if max_period_s == 0.0:
        return math.inf
    return 1.0 / max_period_s


class RateModel:
    """Pixel value -> firing period, drawing noise from an injected rng."""

    def __init__(self, config=None, rng=None):
        self.config = config if config is not None else RateModelConfig()
        self.rng = rng if rng is not None else np.random.default_rng()

    def min_period_s(self):
        """Refractory limit for one conversion (jittered if soft)."""
        cfg = self.config
        if cfg.min_period_std_dev > 0.0:
            return cfg.min_period / 1000.0 + float(self.rng.normal(
                0.0, cfg.min_period_std_dev / 1000.0))
        return cfg.min_period / 1000.0

    def deterministic_period(self, x):
        """Period for pixel value x without jitter or saturation."""
        cfg = self.config
        if x < cfg.input_threshold:
            return math.inf
        rate = (x - cfg.input_threshold) * cfg.gain + _offset_rate(
            cfg.longest_sustained_period)
        # A non-positive rate (negative gain) never fires
        if not rate > 0.0:
            return math.inf
        return 1.0 / rate

    def jitter(self, period_s):
        """Draw a period from a Gamma distribution of mean period_s."""
        std_ms = self.config.spike_jitter_std_dev
        if std_ms > 0.0:
            variance = (std_ms / 1000.0) ** 2
        else:
            variance = period_s
        # mean = k * theta, variance = k * theta^2
        k = period_s * period_s / variance
        theta = variance / period_s
        # Very irregular trains (small k) can underflow to 0
        return max(float(self.rng.gamma(k, theta)), _TINY)

    def period(self, x):
        """Firing period in seconds for one pixel value (may be inf)."""
        min_period_s = self.min_period_s()
        period_s = self.deterministic_period(x)

        if (self.config.spike_jitter_std_dev != 0.0 and math.isfinite(period_s)
                and period_s > 0.0):
            period_s = self.jitter(period_s)

        if period_s < min_period_s:
            period_s = min_period_s
        return period_s

    __call__ = period

    def periods(self, values):
        """period() over an array of pixel values.

        Without noise this is a single numpy expression; with noise each
        element consumes its own draws, in index order.
        """
        values = np.asarray(values, dtype=float)
        if self.config.stochastic:
            flat = [self.period(v) for v in values.ravel()]
            return np.array(flat, dtype=float).reshape(values.shape)

        cfg = self.config
        rate = (values - cfg.input_threshold) * cfg.gain + _offset_rate(
            cfg.longest_sustained_period)
        with np.errstate(divide='ignore'):
            period_s = np.where(rate > 0.0, 1.0 / np.where(rate > 0.0, rate, 1.0), np.inf)
        period_s = np.where(values < cfg.input_threshold, np.inf, period_s)
        return np.maximum(period_s, cfg.min_period / 1000.0)
