"""
Save/load utilities for output spike files.

Text format (.spk):
  % Output activity file generated by <generator> on <local time>
  % <neuron index from 0> <spike time in seconds>
  <neuron> <time>
  ...

Times are written with repr() so that loading gives back the exact floats.

HDF5 format (optional, needs h5py):
  /meta                 attrs: generator, created
  /neuron               (n_spikes,) int64
  /time                 (n_spikes,) float64
"""

import logging
import os
import time

import numpy as np

from circuit.event_list import SpikeEvent
from models.parameters import SetResult

try:
    import h5py
    HAS_H5PY = True
except ImportError:
    HAS_H5PY = False

logger = logging.getLogger(__name__)

GENERATOR_NAME = "retina-spiking-output"


def _header(generator):
    line = f"% Output activity file generated by {generator}"
    # asctime() gives e.g. 'Mon Oct 19 10:12:03 2026'
    line += f" on {time.asctime(time.localtime())}\n"
    return line + "% <neuron index from 0> <spike time in seconds>\n"


def save_spikes(filepath, events, generator=GENERATOR_NAME):
    """Write events (iterable of (neuron, time)) in list order.

    Failure to create or write the file is logged and returned, never raised.
    """
    try:
        out_dir = os.path.dirname(filepath)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        with open(filepath, 'w') as f:
            f.write(_header(generator))
            for neuron, t in events:
                f.write(f"{int(neuron)} {float(t)!r}\n")
    except OSError as e:
        logger.error("Unable to open file for output spikes: %s (%s)", filepath, e)
        return SetResult(False, f"cannot write {filepath}: {e}")
    return SetResult(True)


def load_spikes(filepath):
    """Parse a .spk file back into a list of SpikeEvent."""
    events = []
    with open(filepath) as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith('%'):
                continue
            fields = line.split()
            if len(fields) != 2:
                raise ValueError(f"{filepath}:{line_no}: expected 2 columns, got {len(fields)}")
            events.append(SpikeEvent(int(fields[0]), float(fields[1])))
    return events


def save_spikes_hdf5(filepath, events, generator=GENERATOR_NAME):
    """Write events to HDF5 (neuron and time datasets)."""
    if not HAS_H5PY:
        raise ImportError("h5py required for HDF5 I/O: pip install h5py")

    out_dir = os.path.dirname(filepath)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)

    events = list(events)
    neurons = np.array([e[0] for e in events], dtype=np.int64)
    times = np.array([e[1] for e in events], dtype=np.float64)

    with h5py.File(filepath, 'w') as f:
        meta = f.create_group('meta')
        meta.attrs['generator'] = generator
        meta.attrs['created'] = time.asctime(time.localtime())
        f.create_dataset('neuron', data=neurons, compression='gzip')
        f.create_dataset('time', data=times, compression='gzip')


def load_spikes_hdf5(filepath):
    if not HAS_H5PY:
        raise ImportError("h5py required for HDF5 I/O: pip install h5py")

    with h5py.File(filepath, 'r') as f:
        neurons = f['neuron'][:]
        times = f['time'][:]
    return [SpikeEvent(int(n), float(t)) for n, t in zip(neurons, times)]
