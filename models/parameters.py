"""
Parameter identifiers and setter outcomes for the spiking output stage.

Parameters arrive from the pipeline script as (name, value) pairs. Names
are resolved against a closed enumeration; each identifier maps to one
validated setter on the engine.
"""

import math
import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ParamID(str, Enum):
    """Configurable parameters, valued by their script names."""
    MIN_PERIOD = "Min_period"
    LONGEST_SUSTAINED_PERIOD = "Longest_sustained_period"
    INPUT_THRESHOLD = "Input_threshold"
    FREQ_PER_INP = "Freq_per_inp"
    SPIKE_STD_DEV = "Spike_std_dev"
    MIN_PERIOD_STD_DEV = "Min_period_std_dev"
    START_TIME = "Start_time"
    END_TIME = "End_time"
    RANDOM_INIT = "Random_init"
    FIRST_INP_IND = "First_inp_ind"
    INP_IND_INC = "Inp_ind_inc"
    TOTAL_INPUTS = "Total_inputs"

    @classmethod
    def lookup(cls, key):
        """Resolve a ParamID or script name; None if unknown."""
        if isinstance(key, cls):
            return key
        try:
            return cls(key)
        except ValueError:
            return None


@dataclass
class SetResult:
    """Outcome of a setter, a bulk update or a file save."""
    ok: bool
    failure_reason: Optional[str] = None

    def __bool__(self):
        return self.ok


OK = SetResult(True)


def check_number(name, value):
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return SetResult(False, f"{name} must be a number, got {value!r}")
    if math.isnan(value):
        return SetResult(False, f"{name} must not be NaN")
    return OK


def check_non_negative(name, value):
    result = check_number(name, value)
    if not result:
        return result
    if value < 0:
        return SetResult(False, f"{name} must be >= 0, got {value}")
    return OK


def check_index(name, value):
    """Pixel offsets and strides: finite and >= 0."""
    result = check_non_negative(name, value)
    if result and math.isinf(value):
        return SetResult(False, f"{name} must be finite")
    return result
