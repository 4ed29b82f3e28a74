"""
Retinal output stage: activation frames -> ganglion cell spike times.

Pipeline per simulation slot [ts, ts + dt):
  frame --RecordingGate--> admitted pixels --rate model--> firing period
        --slot recurrence--> spike times --sort--> run-wide event list

The slot recurrence places the first spike of a new input so that the
firing phase reached with the previous input is preserved:

  t_first = ts + (next_spike_time - ts) * period_new / period_old

If the previous input's spike was about to happen, the neuron fires near
the slot start; if it has just fired, the first spike is pushed up to one
new period away. With a constant input this reproduces a regular train
that does not depend on the slot boundaries. A silent input (infinite
period) does not touch last_period and pushes next_spike_time one slot
forward, postponing the phase calculation to the next non-silent slot
and avoiding the 0*inf and inf/inf forms.
"""

import copy
import logging
import math
import sys
import os

import numpy as np

# Support both package and standalone imports
_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _root not in sys.path:
    sys.path.insert(0, _root)

from circuit import config
from circuit.diagnostics import DiagnosticsSink
from circuit.event_list import EventList, SpikeEvent
from circuit.recording_gate import GatingConfig, RecordingGate, ResumePolicy
from models.neuron_state import NeuronStateStore
from models.parameters import (
    OK, ParamID, SetResult, check_index, check_non_negative, check_number,
)
from models.rate_model import RateModel, RateModelConfig
from recording.spike_file import save_spikes

logger = logging.getLogger(__name__)

# Slot boundary rounding, relative to the slot length
SLOT_TOLERANCE = 1e-9


def generate_slot_spikes(neuron, x, ts, dt, last_period, next_spike_time,
                         rate_model, period=None, diagnostics=None):
    """Spike times of one neuron inside the slot [ts, ts + dt).

    Parameters
    ----------
    neuron : int
        Flat pixel index (only used for diagnostics).
    x : float
        Pixel value during the slot.
    ts, dt : float
        Slot start and length (s).
    last_period, next_spike_time : float
        Neuron state before the slot (s). last_period must not be 0.
    rate_model : RateModel
        Converts x into a period; called again after every spike.
    period : float, optional
        First period if already computed for x.
    diagnostics : DiagnosticsSink, optional
        Receives internal-consistency violations.

    Returns
    -------
    times : list of float
        Spike times in ascending order.
    last_period, next_spike_time : float
        Updated neuron state.
    """
    if period is None:
        period = rate_model.period(x)
    slot_end = ts + dt

    if not math.isfinite(period):
        # Silent input: keep the period, postpone the prediction one slot
        return [], last_period, next_spike_time + dt
    if not period > 0.0:
        if diagnostics is not None:
            diagnostics.report("non-positive firing period", neuron, ts, dt, period)
        return [], last_period, next_spike_time + dt

    # A prediction made for the previous slot end may round to just below ts
    if ts - SLOT_TOLERANCE * dt <= next_spike_time < ts:
        next_spike_time = ts

    t_spk = ts + (next_spike_time - ts) * period / last_period
    last_period = period
    next_spike_time = t_spk

    if diagnostics is not None:
        if t_spk < ts:
            diagnostics.report("spike before slot start", neuron, ts, dt, t_spk)
        if not math.isfinite(t_spk):
            diagnostics.report("spike time is not finite", neuron, ts, dt, t_spk)

    times = []
    while t_spk < slot_end:
        times.append(t_spk)
        # Redrawn after every spike when the output is stochastic
        period = rate_model.period(x)
        if math.isfinite(period) and period > 0.0:
            # Periods below the time resolution still move forward one ulp
            t_spk = max(t_spk + period, float(np.nextafter(t_spk, np.inf)))
            next_spike_time = t_spk
            last_period = period
        else:
            if math.isfinite(period) and diagnostics is not None:
                diagnostics.report("non-positive firing period", neuron, ts, dt, period)
            # The rest of the slot is silent
            next_spike_time = slot_end
            if not last_period > 0.0:
                last_period = next_spike_time - t_spk
            break

    return times, last_period, next_spike_time


class SpikingOutput:
    """Converts retinal activation frames into ganglion cell spike times.

    Frames are numpy arrays of shape (size_y, size_x); neuron indices are
    C-order flat pixel offsets. Times are given in ms (frames, slots,
    configuration) and spikes are produced in seconds.
    """

    def __init__(self, size_x=config.DEFAULT_GRID[1], size_y=config.DEFAULT_GRID[0],
                 step_ms=config.DEFAULT_STEP_MS,
                 output_filename="", rate_config=None, gating_config=None,
                 random_init=config.RANDOM_INIT,
                 first_spike_delay=config.FIRST_SPIKE_DELAY,
                 seed=None, rng=None, diagnostics=None):
        """
        Parameters
        ----------
        size_x, size_y : int
            Grid width and height (pixels).
        step_ms : float
            Length of one simulation slot (ms).
        output_filename : str
            Spike file written by close(); default results/spikes.spk.
        rate_config : RateModelConfig, optional
        gating_config : GatingConfig, optional
        random_init : float
            0 = deterministic initial phase, otherwise the initial phases
            are randomized, scaled by this factor.
        first_spike_delay : float
            Delay of the first spike in units of the first period.
        seed : int, optional
            Seed of the engine's random generator.
        rng : np.random.Generator, optional
            Random generator to use instead of seeding a new one.
        diagnostics : DiagnosticsSink, optional
            Sink for internal-consistency violations.
        """
        self.size_x = int(size_x)
        self.size_y = int(size_y)
        self.step = float(step_ms)
        self.sim_time = 0.0
        self.output_filename = output_filename or config.DEFAULT_SPIKE_FILE

        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.rate_config = rate_config if rate_config is not None else RateModelConfig()
        self.gating_config = gating_config if gating_config is not None else GatingConfig()
        self.rate_model = RateModel(self.rate_config, self.rng)
        self.gate = RecordingGate(self.gating_config)
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticsSink(
            max_kept=config.MAX_KEPT_VIOLATIONS)

        self.random_init = random_init
        self.state = NeuronStateStore(first_spike_delay=first_spike_delay)
        self.events = EventList()
        self._input = None
        self._pending = False
        self._closed = False
        self.allocate_values()

    # ------------------------------------------------------------------
    # Allocation
    # ------------------------------------------------------------------
    @property
    def shape(self):
        return (self.size_y, self.size_x)

    @property
    def n_neurons(self):
        return self.size_x * self.size_y

    def allocate_values(self):
        """Reset neuron state for the current grid size."""
        self.state.allocate(self.shape)
        if self.random_init != 0:
            self.state.randomize(self.random_init, self.rng)
        self._input = None
        self._pending = False
        logger.info("Spiking output allocated: %dx%d neurons, step %g ms",
                    self.size_x, self.size_y, self.step)
        return OK

    def set_size(self, size_x, size_y):
        self.size_x = int(size_x)
        self.size_y = int(size_y)
        return self.allocate_values()

    # ------------------------------------------------------------------
    # Validated setters
    # ------------------------------------------------------------------
    def _set(self, target, attr, value, result):
        if not result:
            logger.warning("Parameter %s rejected: %s", attr, result.failure_reason)
            return result
        setattr(target, attr, value)
        return OK

    def set_min_period(self, value):
        return self._set(self.rate_config, 'min_period', value,
                         check_non_negative("Min_period", value))

    def set_longest_sustained_period(self, value):
        return self._set(self.rate_config, 'longest_sustained_period', value,
                         check_non_negative("Longest_sustained_period", value))

    def set_input_threshold(self, value):
        return self._set(self.rate_config, 'input_threshold', value,
                         check_number("Input_threshold", value))

    def set_freq_per_inp(self, value):
        return self._set(self.rate_config, 'gain', value,
                         check_number("Freq_per_inp", value))

    def set_spike_std_dev(self, value):
        return self._set(self.rate_config, 'spike_jitter_std_dev', value,
                         check_number("Spike_std_dev", value))

    def set_min_period_std_dev(self, value):
        return self._set(self.rate_config, 'min_period_std_dev', value,
                         check_non_negative("Min_period_std_dev", value))

    def set_start_time(self, value):
        return self._set(self.gating_config, 'start_time', value,
                         check_non_negative("Start_time", value))

    def set_end_time(self, value):
        return self._set(self.gating_config, 'end_time', value,
                         check_non_negative("End_time", value))

    def set_random_init(self, value):
        """Takes effect at the next allocation of the neuron state."""
        return self._set(self, 'random_init', value,
                         check_number("Random_init", value))

    def set_first_inp_ind(self, value):
        result = check_index("First_inp_ind", value)
        return self._set(self.gating_config, 'first_index',
                         int(value) if result else value, result)

    def set_inp_ind_inc(self, value):
        result = check_index("Inp_ind_inc", value)
        return self._set(self.gating_config, 'index_increment',
                         int(value) if result else value, result)

    def set_total_inputs(self, value):
        result = check_non_negative("Total_inputs", value)
        if result and math.isfinite(value):
            value = int(value)
        return self._set(self.gating_config, 'total_inputs', value, result)

    _SETTERS = {
        ParamID.MIN_PERIOD: set_min_period,
        ParamID.LONGEST_SUSTAINED_PERIOD: set_longest_sustained_period,
        ParamID.INPUT_THRESHOLD: set_input_threshold,
        ParamID.FREQ_PER_INP: set_freq_per_inp,
        ParamID.SPIKE_STD_DEV: set_spike_std_dev,
        ParamID.MIN_PERIOD_STD_DEV: set_min_period_std_dev,
        ParamID.START_TIME: set_start_time,
        ParamID.END_TIME: set_end_time,
        ParamID.RANDOM_INIT: set_random_init,
        ParamID.FIRST_INP_IND: set_first_inp_ind,
        ParamID.INP_IND_INC: set_inp_ind_inc,
        ParamID.TOTAL_INPUTS: set_total_inputs,
    }

    def set_parameter(self, key, value):
        param = ParamID.lookup(key)
        if param is None:
            logger.warning("Unknown spiking output parameter: %r", key)
            return SetResult(False, f"unknown parameter {key!r}")
        return self._SETTERS[param](self, value)

    def set_parameters(self, params, param_ids=None):
        """Apply several named parameters in order.

        params is a mapping or an iterable of (name, value) pairs; with
        param_ids, params is the list of values and param_ids their names.
        Stops at the first rejected or unknown parameter. Parameters
        applied before it stay applied.
        """
        if param_ids is not None:
            pairs = zip(param_ids, params)
        elif hasattr(params, 'items'):
            pairs = params.items()
        else:
            pairs = params

        for key, value in pairs:
            result = self.set_parameter(key, value)
            if not result:
                return result
        return OK

    # ------------------------------------------------------------------
    # Frame ingress and slot update
    # ------------------------------------------------------------------
    def feed_input(self, sim_time, new_input, is_current=True, port=0):
        """Buffer the frame valid during [sim_time, sim_time + step) (ms).

        is_current and port are accepted for pipeline compatibility and
        ignored. Frames outside the recording window are dropped, so the
        next update() produces nothing and leaves the state untouched.
        """
        frame = np.asarray(new_input, dtype=float)
        if frame.ndim == 1:
            frame = frame.reshape(1, -1)
        if frame.ndim != 2:
            raise ValueError(f"expected a 2-D activation frame, got shape {frame.shape}")

        if frame.shape != self.shape:
            logger.info("Input grid changed from %s to %s: reallocating neuron state",
                        self.shape, frame.shape)
            self.size_y, self.size_x = frame.shape
            self.allocate_values()

        self.sim_time = float(sim_time)
        if self.gate.admits_frame(self.sim_time, self.step):
            self._input = frame.copy()
            self._pending = True
        else:
            self._input = None
            self._pending = False

    def update(self):
        """Generate the spikes of the current slot. Returns them sorted."""
        if not self._pending:
            return []
        # One conversion per fed frame
        self._pending = False

        ts = self.sim_time / 1000.0
        dt = self.step / 1000.0
        indices = self.gate.admitted_indices(self.state.n_neurons)

        # Time each neuron was not converted (gated frames, frames never fed,
        # neurons outside an earlier pixel subset)
        if self.gating_config.resume_policy == ResumePolicy.SILENT:
            self.state.catch_up(indices, self.sim_time, SLOT_TOLERANCE * self.step)
        self.state.mark_covered(indices, self.sim_time + self.step)

        values = self._input.ravel()[indices]
        periods = self.rate_model.periods(values)
        last_period = self.state.last_period
        next_spike_time = self.state.next_spike_time

        slot_events = []
        for idx, x, period in zip(indices, values, periods):
            times, lp, nst = generate_slot_spikes(
                int(idx), float(x), ts, dt,
                float(last_period[idx]), float(next_spike_time[idx]),
                self.rate_model, period=float(period), diagnostics=self.diagnostics)
            last_period[idx] = lp
            next_spike_time[idx] = nst
            slot_events.extend(SpikeEvent(int(idx), t) for t in times)

        return self.events.extend_slot(slot_events)

    def process_frame(self, frame):
        """Feed and convert one SimulationFrame, using its own step length."""
        self.step = float(frame.step_ms)
        self.feed_input(frame.time_ms, frame.values)
        return self.update()

    def run(self, frames):
        for frame in frames:
            self.process_frame(frame)
        return self.events

    def get_output(self):
        """Last admitted input frame (None if the slot was gated out)."""
        return self._input

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------
    def save_file(self, filepath=None):
        return save_spikes(filepath or self.output_filename, self.events)

    def close(self):
        """Save the accumulated spikes to output_filename (once)."""
        if self._closed:
            return OK
        self._closed = True
        result = self.save_file()
        logger.info("Saving output spike file: %s... %s", self.output_filename,
                    "Ok" if result else "Fail")
        return result

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def copy(self):
        """Independent engine with the same configuration, state and rng."""
        return copy.deepcopy(self)
