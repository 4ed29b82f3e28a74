"""
Recording window and pixel subsampling for the spiking output.

A frame is converted only if its whole slot lies inside
[start_time, end_time]. Of the N pixels of a frame, only
first_index, first_index + index_increment, ... (at most total_inputs of
them) are ever converted.
"""

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np


class ResumePolicy(str, Enum):
    """What the admitted neurons do with time they did not see.

    SILENT: an interval without admitted frames counts as silent input,
            so predictions are pushed forward by its length on the next
            admitted slot and the firing phase recovers gradually.
    STALE:  state is left exactly as the last admitted slot left it.
    """
    SILENT = "silent"
    STALE = "stale"


@dataclass
class GatingConfig:
    """Active window (ms) and admitted pixel subset."""
    start_time: float = 0.0
    end_time: float = math.inf
    first_index: int = 0
    index_increment: int = 1
    total_inputs: float = math.inf
    resume_policy: ResumePolicy = ResumePolicy.SILENT


class RecordingGate:

    def __init__(self, config=None):
        self.config = config if config is not None else GatingConfig()

    def admits_frame(self, t_ms, dt_ms):
        cfg = self.config
        return t_ms >= cfg.start_time and t_ms + dt_ms <= cfg.end_time

    def admitted_indices(self, n_neurons):
        """Flat pixel offsets converted on a grid of n_neurons pixels."""
        cfg = self.config
        first = int(cfg.first_index)
        if first >= n_neurons or cfg.total_inputs < 1:
            return np.zeros(0, dtype=np.intp)
        inc = int(cfg.index_increment)
        if inc == 0:
            return np.array([first], dtype=np.intp)

        indices = np.arange(first, n_neurons, inc, dtype=np.intp)
        if math.isfinite(cfg.total_inputs):
            indices = indices[:int(cfg.total_inputs)]
        return indices
