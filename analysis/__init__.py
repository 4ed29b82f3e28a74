import sys, os
_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _root not in sys.path:
    sys.path.insert(0, _root)

from analysis.spike_analysis import isi_statistics, mean_firing_rate, population_rate, first_spike_phases, phase_uniformity, spikes_per_slot
