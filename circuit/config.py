"""
Spiking output defaults: engine-level constants in one place.

Rate-model and gating defaults live on their dataclasses
(models.rate_model.RateModelConfig, circuit.recording_gate.GatingConfig).
"""

import os

# =============================================================================
# Simulation slots
# =============================================================================

DEFAULT_STEP_MS = 1.0            # Slot length (ms) when none is given
DEFAULT_GRID = (1, 1)            # (height, width) before the first frame

# =============================================================================
# Initial neuron state
# =============================================================================

FIRST_SPIKE_DELAY = 1.0          # First spike after this many first periods (0 = at once)
RANDOM_INIT = 0.0                # 0 = same initial phase for every neuron

# =============================================================================
# Output
# =============================================================================

RESULTS_DIR = "results"
DEFAULT_SPIKE_FILE = os.path.join(RESULTS_DIR, "spikes.spk")

# =============================================================================
# Diagnostics
# =============================================================================

MAX_KEPT_VIOLATIONS = 100        # Internal-error records kept for inspection
